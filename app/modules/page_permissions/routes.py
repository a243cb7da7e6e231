from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.dashboards.service import DashboardSettingsService
from app.modules.page_permissions.schemas import (
    PagePermissionResponse, PagePermissionsUpdate, PagePermissionsByPage,
    UserPagesUpdate, AllowedPagesResponse
)
from app.modules.page_permissions.service import PagePermissionService
from app.core.dependencies import get_current_user_with_role, require_area
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/dashboards/{dashboard_id}/page-permissions", tags=["page-permissions"])


def get_page_permission_service(supabase: Client = Depends(get_supabase)) -> PagePermissionService:
    return PagePermissionService(supabase)


def _allowed_pages_response(dashboard_id: str, user_id: str, service: PagePermissionService) -> AllowedPagesResponse:
    allowed = service.get_user_allowed_pages(dashboard_id, user_id)
    return AllowedPagesResponse(
        dashboard_id=dashboard_id,
        user_id=user_id,
        restricted=allowed is not None,
        allowed_pages=allowed
    )


@router.get("", response_model=List[PagePermissionResponse])
def list_page_permissions(
    dashboard_id: str,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: PagePermissionService = Depends(get_page_permission_service)
):
    """All page permission rows of a dashboard"""
    return service.list_permissions(dashboard_id)


@router.get("/by-page", response_model=PagePermissionsByPage)
def page_permissions_by_page(
    dashboard_id: str,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: PagePermissionService = Depends(get_page_permission_service)
):
    """Users granted each page of a dashboard"""
    return PagePermissionsByPage(dashboard_id=dashboard_id, pages=service.permissions_by_page(dashboard_id))


@router.get("/me", response_model=AllowedPagesResponse)
def my_allowed_pages(
    dashboard_id: str,
    user_data: Dict = Depends(get_current_user_with_role),
    service: PagePermissionService = Depends(get_page_permission_service),
    supabase: Client = Depends(get_supabase)
):
    """Pages the current user may open on a dashboard it can access (allowed_pages is null when unrestricted)"""
    DashboardSettingsService(supabase).ensure_access(dashboard_id, user_data)
    return _allowed_pages_response(dashboard_id, user_data["id"], service)


@router.put("/pages/{page_name}", response_model=List[PagePermissionResponse])
def update_page_permissions(
    dashboard_id: str,
    page_name: str,
    body: PagePermissionsUpdate,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: PagePermissionService = Depends(get_page_permission_service)
):
    """Replace the users granted one page"""
    return service.update_page_permissions(dashboard_id, page_name, body.page_display_name, body.user_ids)


@router.get("/users/{user_id}", response_model=AllowedPagesResponse)
def user_allowed_pages(
    dashboard_id: str,
    user_id: str,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: PagePermissionService = Depends(get_page_permission_service)
):
    """Pages a user may open on a dashboard"""
    return _allowed_pages_response(dashboard_id, user_id, service)


@router.put("/users/{user_id}", response_model=List[PagePermissionResponse])
def set_user_pages(
    dashboard_id: str,
    user_id: str,
    body: UserPagesUpdate,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: PagePermissionService = Depends(get_page_permission_service)
):
    """Replace the pages granted to a user (an empty list restores access to every page)"""
    return service.set_user_pages(dashboard_id, user_id, body.pages)


@router.delete("/users/{user_id}", status_code=204)
def clear_user_permissions(
    dashboard_id: str,
    user_id: str,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: PagePermissionService = Depends(get_page_permission_service)
):
    """Remove every page restriction of a user on a dashboard"""
    service.clear_user_permissions(dashboard_id, user_id)
    return None
