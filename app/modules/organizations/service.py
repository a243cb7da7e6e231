from datetime import datetime, timezone
import logging
from supabase import Client
from app.modules.organizations.schemas import (
    OrganizationCreate, OrganizationUpdate, OrganizationResponse,
    OrganizationMemberAdd, OrganizationMemberResponse
)
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class OrganizationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_organization(self, org_data: OrganizationCreate, owner_id: str) -> OrganizationResponse:
        """Create a new organization"""
        try:
            result = self.supabase.table("organizations").insert({
                "name": org_data.name,
                "owner_id": owner_id,
                "logo_url": org_data.logo_url,
                "primary_color": org_data.primary_color
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create organization")

            # Add creator as admin
            self.supabase.table("organization_members").insert({
                "organization_id": result.data[0]["id"],
                "user_id": owner_id,
                "role": "admin"
            }).execute()

            logger.info(f"Organization {result.data[0]['id']} created by {owner_id}")
            return OrganizationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_organization_by_id(self, organization_id: str) -> OrganizationResponse:
        """Get organization by ID"""
        try:
            result = self.supabase.table("organizations")\
                .select("*")\
                .eq("id", organization_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Organization not found")

            return OrganizationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_organization(self, organization_id: str, org_data: OrganizationUpdate) -> OrganizationResponse:
        """Update organization"""
        try:
            update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
            if org_data.name:
                update_data["name"] = org_data.name
            if org_data.logo_url is not None:
                update_data["logo_url"] = org_data.logo_url
            if org_data.primary_color is not None:
                update_data["primary_color"] = org_data.primary_color

            result = self.supabase.table("organizations")\
                .update(update_data)\
                .eq("id", organization_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Organization not found")

            return OrganizationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_organizations(self, organization_ids: Optional[List[str]] = None) -> List[OrganizationResponse]:
        """List organizations, optionally restricted to organization_ids (membership-scoped)"""
        try:
            if organization_ids is not None and len(organization_ids) == 0:
                return []
            query = self.supabase.table("organizations").select("*")
            if organization_ids is not None:
                query = query.in_("id", organization_ids)
            result = query.order("created_at").execute()
            return [OrganizationResponse(**org) for org in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_organization(self, organization_id: str) -> bool:
        """Delete organization and its memberships"""
        try:
            self.supabase.table("organization_members")\
                .delete()\
                .eq("organization_id", organization_id)\
                .execute()

            # Dashboards bound to this organization fall back to unbound
            self.supabase.table("powerbi_dashboard_settings")\
                .update({"organization_id": None})\
                .eq("organization_id", organization_id)\
                .execute()

            result = self.supabase.table("organizations")\
                .delete()\
                .eq("id", organization_id)\
                .execute()

            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_member_ids(self, organization_id: str) -> List[str]:
        try:
            result = self.supabase.table("organization_members")\
                .select("user_id")\
                .eq("organization_id", organization_id)\
                .execute()
            return [m["user_id"] for m in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_members(self, organization_id: str) -> List[OrganizationMemberResponse]:
        """List members of an organization with their profile names"""
        try:
            result = self.supabase.table("organization_members")\
                .select("*")\
                .eq("organization_id", organization_id)\
                .order("created_at")\
                .execute()
            members = result.data or []
            if not members:
                return []

            profiles_result = self.supabase.table("profiles")\
                .select("id, first_name, last_name")\
                .in_("id", [m["user_id"] for m in members])\
                .execute()
            profiles = {p["id"]: p for p in profiles_result.data or []}

            response = []
            for member in members:
                profile = profiles.get(member["user_id"])
                member_data = dict(member)
                member_data["user"] = {
                    "first_name": profile.get("first_name"),
                    "last_name": profile.get("last_name")
                } if profile else None
                response.append(OrganizationMemberResponse(**member_data))
            return response
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_member(self, organization_id: str, member_data: OrganizationMemberAdd) -> OrganizationMemberResponse:
        """Add a member to the organization"""
        try:
            # Verify organization exists
            self.get_organization_by_id(organization_id)

            existing = self.supabase.table("organization_members")\
                .select("id")\
                .eq("organization_id", organization_id)\
                .eq("user_id", member_data.user_id)\
                .execute()

            if existing.data:
                raise HTTPException(status_code=400, detail="User already a member of this organization")

            result = self.supabase.table("organization_members").insert({
                "organization_id": organization_id,
                "user_id": member_data.user_id,
                "role": member_data.role
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add member")

            return OrganizationMemberResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_member(self, organization_id: str, user_id: str) -> bool:
        """Remove a member from the organization"""
        try:
            result = self.supabase.table("organization_members")\
                .delete()\
                .eq("organization_id", organization_id)\
                .eq("user_id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Membership not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
