from datetime import datetime, timezone
import logging
from supabase import Client
from app.core.dependencies import is_admin_master
from app.modules.dashboards.policy import can_view_dashboard
from app.modules.dashboards.schemas import (
    DashboardSettingUpdate, DashboardSettingBulkItem, DashboardSettingResponse,
    DashboardUserSettingResponse
)
from typing import Any, Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "powerbi_dashboard_settings"
USER_SETTINGS_TABLE = "powerbi_dashboard_user_settings"


class DashboardSettingsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_settings(self) -> List[DashboardSettingResponse]:
        try:
            result = self.supabase.table(SETTINGS_TABLE)\
                .select("*")\
                .order("created_at")\
                .execute()
            return [DashboardSettingResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Error fetching dashboard settings: {str(e)}")

    def settings_by_dashboard(self, dashboard_ids: Optional[List[str]] = None) -> Dict[str, Dict[str, Any]]:
        """Raw setting rows keyed by dashboard_id"""
        try:
            if dashboard_ids is not None and len(dashboard_ids) == 0:
                return {}
            query = self.supabase.table(SETTINGS_TABLE).select("*")
            if dashboard_ids is not None:
                query = query.in_("dashboard_id", dashboard_ids)
            result = query.execute()
            return {row["dashboard_id"]: row for row in result.data or []}
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Error fetching dashboard settings: {str(e)}")

    def get_setting_row(self, dashboard_id: str) -> Optional[Dict[str, Any]]:
        return self.settings_by_dashboard([dashboard_id]).get(dashboard_id)

    def ensure_access(self, dashboard_id: str, user_data: Dict) -> Optional[Dict[str, Any]]:
        """Setting row of the dashboard; 403 when the user may not open it. admin_master may preview hidden ones."""
        setting = self.get_setting_row(dashboard_id)
        if is_admin_master(user_data):
            return setting
        if not can_view_dashboard(setting, user_data["id"], user_data.get("role")):
            raise HTTPException(status_code=403, detail="You do not have access to this report")
        return setting

    def get_setting(self, dashboard_id: str) -> DashboardSettingResponse:
        """Stored setting, or the hidden default when none exists"""
        row = self.get_setting_row(dashboard_id)
        if row is None:
            return DashboardSettingResponse(dashboard_id=dashboard_id)
        return DashboardSettingResponse(**row)

    def upsert_setting(self, dashboard_id: str, setting: DashboardSettingUpdate) -> DashboardSettingResponse:
        return self.bulk_upsert([DashboardSettingBulkItem(dashboard_id=dashboard_id, **setting.model_dump())])[0]

    def bulk_upsert(self, items: List[DashboardSettingBulkItem]) -> List[DashboardSettingResponse]:
        """Insert or update settings rows keyed on dashboard_id"""
        if not items:
            return []
        now = datetime.now(timezone.utc).isoformat()
        rows = []
        for item in items:
            row = item.model_dump()
            row["updated_at"] = now
            rows.append(row)
        try:
            result = self.supabase.table(SETTINGS_TABLE)\
                .upsert(rows, on_conflict="dashboard_id")\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save dashboard settings")
            logger.info(f"Saved settings for {len(rows)} dashboard(s)")
            return [DashboardSettingResponse(**row) for row in result.data]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Error saving dashboard settings: {str(e)}")

    def get_user_setting(self, dashboard_id: str, user_id: str) -> Optional[DashboardUserSettingResponse]:
        """Per-user RLS role, or None when the user has none"""
        try:
            result = self.supabase.table(USER_SETTINGS_TABLE)\
                .select("*")\
                .eq("dashboard_id", dashboard_id)\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            if not result.data:
                return None
            return DashboardUserSettingResponse(**result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Error fetching user dashboard setting: {str(e)}")

    def upsert_user_setting(self, dashboard_id: str, user_id: str, rls_role: str) -> DashboardUserSettingResponse:
        try:
            result = self.supabase.table(USER_SETTINGS_TABLE)\
                .upsert({
                    "dashboard_id": dashboard_id,
                    "user_id": user_id,
                    "rls_role": rls_role
                }, on_conflict="dashboard_id,user_id")\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save user dashboard setting")
            return DashboardUserSettingResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Error saving user dashboard setting: {str(e)}")

    def delete_user_setting(self, dashboard_id: str, user_id: str) -> bool:
        try:
            result = self.supabase.table(USER_SETTINGS_TABLE)\
                .delete()\
                .eq("dashboard_id", dashboard_id)\
                .eq("user_id", user_id)\
                .execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
