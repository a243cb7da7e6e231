from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.dashboards.service import DashboardSettingsService
from app.modules.page_permissions.service import PagePermissionService
from app.modules.powerbi.api_client import PowerBIApiClient
from app.modules.powerbi.http_client import get_http_client
from app.modules.powerbi.schemas import (
    Workspace, Report, ReportPage, EmbedConfigResponse,
    PageNavigationRequest, PageNavigationResponse
)
from app.modules.powerbi.service import ReportService
from app.modules.powerbi.token_service import TokenService
from app.core.dependencies import get_current_user_with_role, require_area
from supabase import Client
from typing import List, Dict, Optional
import httpx
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/powerbi", tags=["powerbi"])


def get_token_service(
    supabase: Client = Depends(get_service_supabase),
    http_client: httpx.Client = Depends(get_http_client)
) -> TokenService:
    return TokenService(supabase, http_client)


def get_powerbi_api(
    token_service: TokenService = Depends(get_token_service),
    http_client: httpx.Client = Depends(get_http_client)
) -> PowerBIApiClient:
    return PowerBIApiClient(token_service, http_client)


def get_report_service(
    api: PowerBIApiClient = Depends(get_powerbi_api),
    supabase: Client = Depends(get_supabase)
) -> ReportService:
    return ReportService(api, DashboardSettingsService(supabase), PagePermissionService(supabase))


@router.api_route("/proxy", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def proxy(
    request: Request,
    path: Optional[str] = None,
    client_id: Optional[str] = None,
    user_data: Dict = Depends(require_area("dashboard_management")),
    api: PowerBIApiClient = Depends(get_powerbi_api)
):
    """Forward a call to the Power BI REST API with a service principal token (path=get-access-token returns the token)"""
    if not path:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Parameter "path" is required')
    if "://" in path or ".." in path.split("/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid "path"')

    body = None
    if request.method != "GET":
        raw = await request.body()
        if raw:
            try:
                body = await request.json()
            except ValueError:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be JSON")

    status_code, data = await run_in_threadpool(api.proxy, request.method, path, client_id, body)
    return JSONResponse(status_code=status_code, content=data)


@router.get("/workspaces", response_model=List[Workspace])
def list_workspaces(
    client_id: Optional[str] = None,
    user_data: Dict = Depends(require_area("reports")),
    api: PowerBIApiClient = Depends(get_powerbi_api)
):
    """List Power BI workspaces"""
    return api.get_workspaces(client_id)


@router.get("/reports", response_model=List[Report])
def list_all_reports(
    client_id: Optional[str] = None,
    user_data: Dict = Depends(require_area("reports")),
    service: ReportService = Depends(get_report_service)
):
    """Reports of every workspace visible to the user"""
    return service.list_all_visible_reports(user_data, client_id)


@router.get("/workspaces/{workspace_id}/reports", response_model=List[Report])
def list_reports(
    workspace_id: str,
    client_id: Optional[str] = None,
    user_data: Dict = Depends(require_area("reports")),
    service: ReportService = Depends(get_report_service)
):
    """Reports of a workspace visible to the user"""
    return service.list_visible_reports(workspace_id, user_data, client_id)


@router.get("/workspaces/{workspace_id}/reports/{report_id}/pages", response_model=List[ReportPage])
def list_report_pages(
    workspace_id: str,
    report_id: str,
    client_id: Optional[str] = None,
    user_data: Dict = Depends(require_area("dashboard_management")),
    api: PowerBIApiClient = Depends(get_powerbi_api)
):
    """All pages of a report, in report order (for the page permissions screen)"""
    return api.get_report_pages(workspace_id, report_id, client_id)


@router.post("/workspaces/{workspace_id}/reports/{report_id}/embed", response_model=EmbedConfigResponse)
def embed_report(
    workspace_id: str,
    report_id: str,
    client_id: Optional[str] = None,
    user_data: Dict = Depends(require_area("reports")),
    service: ReportService = Depends(get_report_service)
):
    """Embed configuration (token, url, permitted pages) for a report"""
    return service.build_embed_config(workspace_id, report_id, user_data, client_id)


@router.post("/reports/{report_id}/page-navigation", response_model=PageNavigationResponse)
def check_page_navigation(
    report_id: str,
    navigation: PageNavigationRequest,
    user_data: Dict = Depends(get_current_user_with_role),
    service: ReportService = Depends(get_report_service)
):
    """Check a page change of an embedded report; a forbidden target comes back with the page to revert to"""
    return service.check_page_navigation(report_id, user_data, navigation)
