import logging
from supabase import Client
from app.modules.page_permissions.policy import resolve_allowed_pages
from app.modules.page_permissions.schemas import PagePermissionResponse, PageGrant
from typing import Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

TABLE_NAME = "powerbi_dashboard_page_permissions"


def _dedupe(values: List[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


class PagePermissionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_permissions(self, dashboard_id: str) -> List[PagePermissionResponse]:
        """All permission rows of a dashboard (management screen)"""
        try:
            result = self.supabase.table(TABLE_NAME)\
                .select("*")\
                .eq("dashboard_id", dashboard_id)\
                .order("created_at")\
                .execute()
            return [PagePermissionResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching page permissions for {dashboard_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Error fetching page permissions: {str(e)}")

    def permissions_by_page(self, dashboard_id: str) -> Dict[str, List[str]]:
        """page_name -> user ids with an explicit grant"""
        grouped: Dict[str, List[str]] = {}
        for permission in self.list_permissions(dashboard_id):
            users = grouped.setdefault(permission.page_name, [])
            if permission.user_id not in users:
                users.append(permission.user_id)
        return grouped

    def get_user_allowed_pages(self, dashboard_id: str, user_id: str) -> Optional[List[str]]:
        """
        Pages the user may open on a dashboard.

        None when the user has no rows (no restriction). A database error is
        raised rather than read as "no rows" so a failure never widens access.
        """
        try:
            result = self.supabase.table(TABLE_NAME)\
                .select("page_name")\
                .eq("dashboard_id", dashboard_id)\
                .eq("user_id", user_id)\
                .order("created_at")\
                .execute()
        except Exception as e:
            logger.error(f"Error checking page permissions of user {user_id} on {dashboard_id}: {e}")
            raise HTTPException(status_code=500, detail="Error checking page permissions")
        return resolve_allowed_pages(row["page_name"] for row in result.data or [])

    def _replace_rows(self, existing: List[dict], wanted: List[dict], key: str) -> None:
        """
        Make `existing` match `wanted` (compared on `key`).

        Missing rows are inserted before stale ones are deleted, so a failed
        save leaves the previous grants in place instead of an empty list.
        """
        have = {row[key] for row in existing}
        keep = {row[key] for row in wanted}

        missing = [row for row in wanted if row[key] not in have]
        if missing:
            self.supabase.table(TABLE_NAME).insert(missing).execute()

        stale_ids = [row["id"] for row in existing if row[key] not in keep]
        if stale_ids:
            self.supabase.table(TABLE_NAME)\
                .delete()\
                .in_("id", stale_ids)\
                .execute()

    def update_page_permissions(
        self,
        dashboard_id: str,
        page_name: str,
        page_display_name: Optional[str],
        user_ids: List[str]
    ) -> List[PagePermissionResponse]:
        """Replace the set of users granted one page. An empty list only clears the page."""
        try:
            existing = self.supabase.table(TABLE_NAME)\
                .select("*")\
                .eq("dashboard_id", dashboard_id)\
                .eq("page_name", page_name)\
                .execute().data or []

            wanted = [
                {
                    "dashboard_id": dashboard_id,
                    "page_name": page_name,
                    "page_display_name": page_display_name,
                    "user_id": user_id
                }
                for user_id in _dedupe(user_ids)
            ]
            self._replace_rows(existing, wanted, "user_id")

            logger.info(f"Page {page_name} of dashboard {dashboard_id} granted to {len(wanted)} user(s)")
            result = self.supabase.table(TABLE_NAME)\
                .select("*")\
                .eq("dashboard_id", dashboard_id)\
                .eq("page_name", page_name)\
                .order("created_at")\
                .execute()
            return [PagePermissionResponse(**row) for row in result.data or []]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error saving permissions of page {page_name} on {dashboard_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Error saving page permissions: {str(e)}")

    def set_user_pages(self, dashboard_id: str, user_id: str, pages: List[PageGrant]) -> List[PagePermissionResponse]:
        """Replace the pages granted to one user. An empty list restores access to every page."""
        try:
            existing = self.supabase.table(TABLE_NAME)\
                .select("*")\
                .eq("dashboard_id", dashboard_id)\
                .eq("user_id", user_id)\
                .execute().data or []

            unique: Dict[str, PageGrant] = {}
            for page in pages:
                unique.setdefault(page.page_name, page)

            wanted = [
                {
                    "dashboard_id": dashboard_id,
                    "page_name": page.page_name,
                    "page_display_name": page.page_display_name,
                    "user_id": user_id
                }
                for page in unique.values()
            ]
            self._replace_rows(existing, wanted, "page_name")

            result = self.supabase.table(TABLE_NAME)\
                .select("*")\
                .eq("dashboard_id", dashboard_id)\
                .eq("user_id", user_id)\
                .order("created_at")\
                .execute()
            return [PagePermissionResponse(**row) for row in result.data or []]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error saving page permissions of user {user_id} on {dashboard_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Error saving page permissions: {str(e)}")

    def clear_user_permissions(self, dashboard_id: str, user_id: str) -> int:
        """Remove every row of a user on a dashboard (back to "see all")"""
        try:
            result = self.supabase.table(TABLE_NAME)\
                .delete()\
                .eq("dashboard_id", dashboard_id)\
                .eq("user_id", user_id)\
                .execute()
            return len(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Error clearing page permissions: {str(e)}")
