from fastapi import APIRouter, Depends, HTTPException, status
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.users.schemas import UserCreate, UserUpdate, UserRoleUpdate, UserResponse
from app.modules.users.service import UserService
from app.core.dependencies import require_area
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(
    supabase: Client = Depends(get_supabase),
    admin_client: Client = Depends(get_service_supabase)
) -> UserService:
    return UserService(supabase, admin_client)


@router.get("", response_model=List[UserResponse])
def list_users(
    is_active: Optional[bool] = None,
    user_data: Dict = Depends(require_area("users")),
    service: UserService = Depends(get_user_service)
):
    """List all users with their primary role"""
    return service.list_users(is_active=is_active)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    user_body: UserCreate,
    user_data: Dict = Depends(require_area("users")),
    service: UserService = Depends(get_user_service)
):
    """Create a portal user (auth account, profile and role)"""
    return service.create_user(user_body)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    user_data: Dict = Depends(require_area("users")),
    service: UserService = Depends(get_user_service)
):
    """Get user by ID"""
    return service.get_user_by_id(user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    user_body: UserUpdate,
    user_data: Dict = Depends(require_area("users")),
    service: UserService = Depends(get_user_service)
):
    """Update user profile"""
    return service.update_user(user_id, user_body)


@router.put("/{user_id}/role", response_model=UserResponse)
def set_user_role(
    user_id: str,
    role_body: UserRoleUpdate,
    user_data: Dict = Depends(require_area("users")),
    service: UserService = Depends(get_user_service)
):
    """Replace the role of a user"""
    if user_id == user_data["id"] and role_body.role != user_data["role"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot change your own role")
    return service.set_user_role(user_id, role_body.role)


@router.delete("/{user_id}", response_model=UserResponse)
def deactivate_user(
    user_id: str,
    user_data: Dict = Depends(require_area("users")),
    service: UserService = Depends(get_user_service)
):
    """Deactivate user"""
    if user_id == user_data["id"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate yourself")
    return service.deactivate_user(user_id)
