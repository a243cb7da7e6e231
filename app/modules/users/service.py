from datetime import datetime, timezone
import logging
from supabase import Client
from app.modules.users.schemas import UserCreate, UserUpdate, UserResponse
from typing import Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, supabase: Client, admin_client: Optional[Client] = None):
        self.supabase = supabase
        self.admin_client = admin_client or supabase

    def _roles_by_user(self, user_ids: Optional[List[str]] = None) -> Dict[str, List[str]]:
        query = self.supabase.table("user_roles").select("user_id, role")
        if user_ids is not None:
            query = query.in_("user_id", user_ids)
        result = query.order("created_at").execute()
        roles: Dict[str, List[str]] = {}
        for row in result.data or []:
            roles.setdefault(row["user_id"], []).append(row["role"])
        return roles

    @staticmethod
    def _to_response(profile: dict, roles: List[str]) -> UserResponse:
        return UserResponse(
            id=profile["id"],
            first_name=profile.get("first_name"),
            last_name=profile.get("last_name"),
            email=profile.get("email"),
            is_active=profile.get("is_active"),
            role=roles[0] if roles else None,
            created_at=profile.get("created_at"),
            updated_at=profile.get("updated_at"),
        )

    def list_users(self, is_active: Optional[bool] = None) -> List[UserResponse]:
        """All profiles merged with their primary role"""
        try:
            query = self.supabase.table("profiles").select("id, first_name, last_name, is_active, created_at, updated_at")
            if is_active is not None:
                query = query.eq("is_active", is_active)
            profiles = query.order("first_name").execute()
            roles = self._roles_by_user()
            return [self._to_response(p, roles.get(p["id"], [])) for p in profiles.data or []]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing users: {e}")
            raise HTTPException(status_code=500, detail=f"Error fetching users: {str(e)}")

    def list_users_by_ids(self, user_ids: List[str]) -> List[UserResponse]:
        if not user_ids:
            return []
        try:
            profiles = self.supabase.table("profiles")\
                .select("id, first_name, last_name, is_active, created_at, updated_at")\
                .in_("id", user_ids)\
                .order("first_name")\
                .execute()
            roles = self._roles_by_user(user_ids)
            return [self._to_response(p, roles.get(p["id"], [])) for p in profiles.data or []]
        except Exception as e:
            logger.error(f"Error listing users by id: {e}")
            raise HTTPException(status_code=500, detail=f"Error fetching users: {str(e)}")

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Get user profile by ID"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            roles = self._roles_by_user([user_id])
            return self._to_response(result.data[0], roles.get(user_id, []))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_user(self, user_data: UserCreate) -> UserResponse:
        """Create auth user (admin API), then its profile and role"""
        try:
            auth_response = self.admin_client.auth.admin.create_user({
                "email": user_data.email,
                "password": user_data.password,
                "email_confirm": True,
                "user_metadata": {
                    "first_name": user_data.first_name,
                    "last_name": user_data.last_name
                }
            })
            if not auth_response or not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to create user")
            user_id = auth_response.user.id

            # A database trigger may already have created the profile
            profile = self.supabase.table("profiles").upsert({
                "id": user_id,
                "first_name": user_data.first_name,
                "last_name": user_data.last_name,
                "is_active": True
            }, on_conflict="id").execute()

            self.supabase.table("user_roles").insert({
                "user_id": user_id,
                "role": user_data.role
            }).execute()

            logger.info(f"Created user {user_id} with role {user_data.role}")
            row = profile.data[0] if profile.data else {"id": user_id}
            response = self._to_response(row, [user_data.role])
            response.email = auth_response.user.email or user_data.email
            return response
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=f"User creation failed: {error_message}")

    def update_user(self, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update user profile"""
        try:
            update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
            if user_data.first_name is not None:
                update_data["first_name"] = user_data.first_name
            if user_data.last_name is not None:
                update_data["last_name"] = user_data.last_name
            if user_data.is_active is not None:
                update_data["is_active"] = user_data.is_active

            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            roles = self._roles_by_user([user_id])
            return self._to_response(result.data[0], roles.get(user_id, []))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def set_user_role(self, user_id: str, role: str) -> UserResponse:
        """Replace every role row of the user with a single role"""
        try:
            user = self.get_user_by_id(user_id)

            self.supabase.table("user_roles")\
                .delete()\
                .eq("user_id", user_id)\
                .execute()

            self.supabase.table("user_roles").insert({
                "user_id": user_id,
                "role": role
            }).execute()

            logger.info(f"Role of user {user_id} set to {role}")
            user.role = role
            return user
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def deactivate_user(self, user_id: str) -> UserResponse:
        """Soft delete: the auth account stays, access checks reject it"""
        return self.update_user(user_id, UserUpdate(is_active=False))
