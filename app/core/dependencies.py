"""
Core dependencies for route protection and role checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config.permissions_config import ADMIN_MASTER, APP_ROLES, roles_for_area
from app.database.supabase_client import get_supabase, get_session_client_factory
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Callable, List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (role, is_active, organization_ids)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    session_client_factory: Callable[[], Client] = Depends(get_session_client_factory)
) -> AuthService:
    return AuthService(supabase, session_client_factory)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def get_user_role(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """Return the primary role (first user_roles row) or None. Uses request-scoped cache when provided."""
    if cache is not None and "role" in cache:
        return cache["role"]
    result = supabase.table("user_roles")\
        .select("role")\
        .eq("user_id", user_id)\
        .order("created_at")\
        .execute()
    role = result.data[0]["role"] if result.data else None
    if cache is not None:
        cache["role"] = role
    return role


def is_user_active(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    """Users without a profile row or with is_active = null are treated as active."""
    if cache is not None and "is_active" in cache:
        return cache["is_active"]
    result = supabase.table("profiles")\
        .select("is_active")\
        .eq("id", user_id)\
        .limit(1)\
        .execute()
    active = True
    if result.data and result.data[0].get("is_active") is False:
        active = False
    if cache is not None:
        cache["is_active"] = active
    return active


def is_admin_master(user_data: dict) -> bool:
    return user_data.get("role") == ADMIN_MASTER


def get_current_user_with_role(
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Authenticated user with its portal role attached. Users without a role or deactivated get 403."""
    cache = _get_request_cache(request)
    try:
        role = get_user_role(user_data["id"], supabase, cache)
        active = is_user_active(user_data["id"], supabase, cache)
    except Exception as e:
        logger.error(f"Error resolving role for user {user_data['id']}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to resolve user role"
        )
    if role not in APP_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User has no portal role assigned"
        )
    if not active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive"
        )
    return {**user_data, "role": role}


def require_role(*allowed_roles: str):
    """Factory function to create role check dependency"""
    def check_role(user_data: dict = Depends(get_current_user_with_role)) -> dict:
        """Dependency to check if user has one of the allowed roles"""
        if user_data["role"] not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required role: {' or '.join(allowed_roles)}"
            )
        return user_data
    return check_role


def require_area(area: str):
    """Role check for a portal area as configured in permissions_config.AREAS"""
    return require_role(*roles_for_area(area))


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns request-scoped access cache (populated by get_current_user_with_role)."""
    return _get_request_cache(request)


def get_user_organization_ids(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Organizations the user owns or is a member of. Uses request-scoped cache when provided."""
    if cache is not None and "organization_ids" in cache:
        return cache["organization_ids"]
    owned = supabase.table("organizations")\
        .select("id")\
        .eq("owner_id", user_id)\
        .execute()
    memberships = supabase.table("organization_members")\
        .select("organization_id")\
        .eq("user_id", user_id)\
        .execute()
    ids = [o["id"] for o in owned.data or []]
    for m in memberships.data or []:
        if m["organization_id"] not in ids:
            ids.append(m["organization_id"])
    if cache is not None:
        cache["organization_ids"] = ids
    return ids


def _get_organization_owner(organization_id: str, supabase: Client) -> Optional[str]:
    org_result = supabase.table("organizations")\
        .select("owner_id")\
        .eq("id", organization_id)\
        .limit(1)\
        .execute()
    if not org_result.data:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found"
        )
    return org_result.data[0].get("owner_id")


def check_organization_admin(
    organization_id: str,
    user_data: dict,
    supabase: Client
) -> dict:
    """Check if user is owner/admin of an organization or admin_master"""
    user_id = user_data["id"]

    owner_id = _get_organization_owner(organization_id, supabase)

    # admin_master bypasses membership checks
    if is_admin_master(user_data) or owner_id == user_id:
        return user_data

    member_result = supabase.table("organization_members")\
        .select("id")\
        .eq("organization_id", organization_id)\
        .eq("user_id", user_id)\
        .eq("role", "admin")\
        .execute()

    if member_result.data:
        return user_data

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You must be an organization owner or admin to perform this action"
    )


def check_organization_member(
    organization_id: str,
    user_data: dict,
    supabase: Client
) -> dict:
    """Check if user belongs to an organization (owner or member) or is admin_master"""
    user_id = user_data["id"]

    owner_id = _get_organization_owner(organization_id, supabase)

    if is_admin_master(user_data) or owner_id == user_id:
        return user_data

    member_result = supabase.table("organization_members")\
        .select("id")\
        .eq("organization_id", organization_id)\
        .eq("user_id", user_id)\
        .execute()

    if member_result.data:
        return user_data

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You must be a member of this organization"
    )
