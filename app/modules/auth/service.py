import hashlib
import logging
import time
from supabase import Client
from app.modules.auth.schemas import LoginRequest, TokenResponse
from fastapi import HTTPException
from typing import Callable, Dict, Any, Optional
from app.database.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client, session_client_factory: Optional[Callable[[], Client]] = None):
        self.supabase = supabase
        self.session_client_factory = session_client_factory or SupabaseClient.create_session_client

    def _portal_access(self, user_id: str) -> tuple:
        """(primary role, is_active) of an auth user"""
        roles = self.supabase.table("user_roles")\
            .select("role")\
            .eq("user_id", user_id)\
            .order("created_at")\
            .limit(1)\
            .execute()
        profile = self.supabase.table("profiles")\
            .select("is_active")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        role = roles.data[0]["role"] if roles.data else None
        active = not (profile.data and profile.data[0].get("is_active") is False)
        return role, active

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate with Supabase Auth; deactivated portal accounts are refused"""
        try:
            auth_response = self.session_client_factory().auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            role, active = self._portal_access(auth_response.user.id)
            if not active:
                logger.info(f"Login refused for deactivated user {auth_response.user.id}")
                raise HTTPException(status_code=403, detail="User is inactive")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email,
                role=role
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str, admin_client: Client) -> bool:
        """Drop the cached token lookup and revoke the session of this token (requires service role client)"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # The access token itself stays valid until it expires; refresh tokens are revoked
            admin_client.auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.warning(f"Supabase sign_out failed: {e}")
            return False

    def change_password(self, user_id: str, new_password: str, admin_client: Client) -> bool:
        """Set a new password for a user (requires service role client)"""
        try:
            response = admin_client.auth.admin.update_user_by_id(
                user_id,
                {"password": new_password}
            )
            if not response or not response.user:
                raise HTTPException(status_code=404, detail="User not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(
                status_code=500,
                detail=f"Failed to change password: {str(e)}"
            )
