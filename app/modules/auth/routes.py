from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_service_supabase
from app.modules.auth.schemas import (
    LoginRequest, TokenResponse, ChangePasswordRequest, CurrentUserResponse
)
from app.modules.auth.service import AuthService
from app.core.dependencies import get_auth_service, get_current_user_with_role
from app.config.permissions_config import get_navigation_for_role
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])

# Security scheme for JWT Bearer token
security = HTTPBearer()


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.post("/login", response_model=TokenResponse)
def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service),
    admin_client: Client = Depends(get_service_supabase)
):
    """Logout: revoke the session of the token"""
    service.logout(token, admin_client)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse)
def get_current_user(
    current_user: Dict = Depends(get_current_user_with_role),
):
    """Get current authenticated user, its role and the navigation it may see (for frontend UI)."""
    return CurrentUserResponse(
        id=current_user["id"],
        email=current_user.get("email"),
        role=current_user["role"],
        user_metadata=current_user.get("user_metadata") or {},
        navigation=get_navigation_for_role(current_user["role"])
    )


@router.post("/change-password", status_code=200)
def change_password(
    request: ChangePasswordRequest,
    current_user: Dict = Depends(get_current_user_with_role),
    service: AuthService = Depends(get_auth_service),
    admin_client: Client = Depends(get_service_supabase)
):
    """Change the password of the authenticated user"""
    service.change_password(current_user["id"], request.new_password, admin_client)
    return {"message": "Password changed successfully"}
