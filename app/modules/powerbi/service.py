"""Report listing and embedding for portal users."""
import logging
from typing import Dict, List, Optional

from fastapi import HTTPException

from app.config import settings
from app.modules.dashboards.policy import filter_visible_reports
from app.modules.dashboards.service import DashboardSettingsService
from app.modules.page_permissions.policy import (
    filter_pages, first_allowed_page, resolve_navigation
)
from app.modules.page_permissions.service import PagePermissionService
from app.modules.powerbi.api_client import PowerBIApiClient
from app.modules.powerbi.schemas import (
    Report, RLSIdentity, EmbedConfigResponse,
    PageNavigationRequest, PageNavigationResponse
)

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(
        self,
        api: PowerBIApiClient,
        dashboard_settings: DashboardSettingsService,
        page_permissions: PagePermissionService,
    ):
        self.api = api
        self.dashboard_settings = dashboard_settings
        self.page_permissions = page_permissions

    def _visible(self, reports: List[Report], user_data: Dict) -> List[Report]:
        settings_map = self.dashboard_settings.settings_by_dashboard([r.id for r in reports])
        return filter_visible_reports(reports, settings_map, user_data["id"], user_data.get("role"))

    def list_visible_reports(self, workspace_id: str, user_data: Dict, client_row_id: Optional[str] = None) -> List[Report]:
        """Reports of a workspace the user may open"""
        reports = self.api.get_reports_in_workspace(workspace_id, client_row_id)
        return self._visible(reports, user_data)

    def list_all_visible_reports(self, user_data: Dict, client_row_id: Optional[str] = None) -> List[Report]:
        """Reports of every workspace the user may open"""
        return self._visible(self.api.get_all_reports(client_row_id), user_data)

    def ensure_dashboard_access(self, report_id: str, user_data: Dict) -> Optional[Dict]:
        """Setting row of the dashboard; 403 when the user may not open it. admin_master may preview hidden ones."""
        return self.dashboard_settings.ensure_access(report_id, user_data)

    def resolve_rls_role(self, report_id: str, user_id: str, setting: Optional[Dict]) -> Optional[str]:
        """Personal RLS role, then the dashboard's, then the configured default"""
        user_setting = self.dashboard_settings.get_user_setting(report_id, user_id)
        if user_setting and user_setting.rls_role:
            return user_setting.rls_role
        if setting and setting.get("rls_role"):
            return setting["rls_role"]
        return settings.powerbi_default_rls_role

    def build_embed_config(
        self,
        workspace_id: str,
        report_id: str,
        user_data: Dict,
        client_row_id: Optional[str] = None,
    ) -> EmbedConfigResponse:
        setting = self.ensure_dashboard_access(report_id, user_data)
        allowed = self.page_permissions.get_user_allowed_pages(report_id, user_data["id"])

        report = self.api.get_report(workspace_id, report_id, client_row_id)
        pages = self.api.get_report_pages(workspace_id, report_id, client_row_id)
        visible_pages = filter_pages(pages, allowed)
        if allowed is not None and not visible_pages:
            raise HTTPException(status_code=403, detail="None of your permitted pages exist in this report")

        rls_role = self.resolve_rls_role(report_id, user_data["id"], setting)
        identity = None
        if rls_role:
            if not report.dataset_id:
                raise HTTPException(status_code=502, detail="Report has no dataset; cannot apply RLS")
            identity = RLSIdentity(
                username=user_data.get("email") or user_data["id"],
                roles=[rls_role],
                datasets=[report.dataset_id],
            )

        embed_token = self.api.generate_embed_token(workspace_id, report_id, client_row_id, identity)
        logger.info(
            f"Embed token issued for report {report_id} to user {user_data['id']}"
            f" (rls={rls_role or 'none'}, restricted={allowed is not None})"
        )

        return EmbedConfigResponse(
            report_id=report.id,
            report_name=report.name,
            workspace_id=workspace_id,
            embed_url=report.embed_url,
            embed_token=embed_token.token,
            token_expiration=embed_token.expiration,
            dataset_id=report.dataset_id,
            rls_role=rls_role,
            restricted=allowed is not None,
            allowed_pages=allowed,
            pages=visible_pages,
            default_page=first_allowed_page(allowed, [p.name for p in pages]),
        )

    def check_page_navigation(self, report_id: str, user_data: Dict, request: PageNavigationRequest) -> PageNavigationResponse:
        """Decide whether a tab change in the embedded report stands or is reverted"""
        self.ensure_dashboard_access(report_id, user_data)
        allowed = self.page_permissions.get_user_allowed_pages(report_id, user_data["id"])
        is_allowed, page = resolve_navigation(
            allowed,
            request.target_page,
            current_page=request.current_page,
            page_order=request.pages,
        )
        if not is_allowed:
            logger.info(f"User {user_data['id']} blocked from page {request.target_page} of report {report_id}; reverting to {page}")
        return PageNavigationResponse(allowed=is_allowed, page=page)
