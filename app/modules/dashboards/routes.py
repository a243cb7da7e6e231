from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.dashboards.schemas import (
    DashboardSettingUpdate, DashboardSettingBulkItem, DashboardSettingResponse,
    DashboardCatalogItem, DashboardUserSettingUpsert, DashboardUserSettingResponse
)
from app.modules.dashboards.service import DashboardSettingsService
from app.modules.organizations.service import OrganizationService
from app.modules.powerbi.api_client import PowerBIApiClient
from app.modules.powerbi.routes import get_powerbi_api
from app.modules.powerbi_clients.service import PowerBIClientService
from app.modules.users.schemas import UserResponse
from app.modules.users.service import UserService
from app.core.dependencies import require_area
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/dashboards", tags=["dashboards"])


def get_dashboard_settings_service(supabase: Client = Depends(get_supabase)) -> DashboardSettingsService:
    return DashboardSettingsService(supabase)


@router.get("/settings", response_model=List[DashboardSettingResponse])
def list_settings(
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: DashboardSettingsService = Depends(get_dashboard_settings_service)
):
    """List every stored dashboard setting"""
    return service.list_settings()


@router.put("/settings", response_model=List[DashboardSettingResponse])
def bulk_upsert_settings(
    items: List[DashboardSettingBulkItem],
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: DashboardSettingsService = Depends(get_dashboard_settings_service)
):
    """Save settings of several dashboards at once"""
    return service.bulk_upsert(items)


@router.get("/catalog", response_model=List[DashboardCatalogItem])
def dashboard_catalog(
    client_id: Optional[str] = None,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: DashboardSettingsService = Depends(get_dashboard_settings_service),
    api: PowerBIApiClient = Depends(get_powerbi_api)
):
    """Every Power BI report merged with its settings (unconfigured reports show as hidden)"""
    reports = api.get_all_reports(client_id)
    settings_map = service.settings_by_dashboard([r.id for r in reports])
    catalog = []
    for report in reports:
        row = settings_map.get(report.id)
        setting = DashboardSettingResponse(**row) if row else DashboardSettingResponse(
            dashboard_id=report.id, workspace_id=report.workspace_id
        )
        catalog.append(DashboardCatalogItem(
            id=report.id,
            name=report.name,
            embed_url=report.embed_url,
            workspace_id=report.workspace_id,
            workspace_name=report.workspace_name,
            dataset_id=report.dataset_id,
            settings=setting
        ))
    return catalog


@router.get("/{dashboard_id}/settings", response_model=DashboardSettingResponse)
def get_settings(
    dashboard_id: str,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: DashboardSettingsService = Depends(get_dashboard_settings_service)
):
    """Get settings of a dashboard"""
    return service.get_setting(dashboard_id)


@router.put("/{dashboard_id}/settings", response_model=DashboardSettingResponse)
def upsert_settings(
    dashboard_id: str,
    setting: DashboardSettingUpdate,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: DashboardSettingsService = Depends(get_dashboard_settings_service)
):
    """Create or replace settings of a dashboard"""
    return service.upsert_setting(dashboard_id, setting)


@router.get("/{dashboard_id}/assignable-users", response_model=List[UserResponse])
def assignable_users(
    dashboard_id: str,
    client_id: Optional[str] = None,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: DashboardSettingsService = Depends(get_dashboard_settings_service),
    supabase: Client = Depends(get_supabase),
    service_supabase: Client = Depends(get_service_supabase)
):
    """Users that can be assigned: the dashboard's organization, else the client's organization, else everyone"""
    organization_id = service.get_setting(dashboard_id).organization_id
    if not organization_id and client_id:
        organization_id = PowerBIClientService(service_supabase).get_client_organization_id(client_id)

    users = UserService(supabase)
    if not organization_id:
        return users.list_users(is_active=True)
    member_ids = OrganizationService(supabase).list_member_ids(organization_id)
    return [u for u in users.list_users_by_ids(member_ids) if u.is_active is not False]


@router.get("/{dashboard_id}/user-settings/{user_id}", response_model=Optional[DashboardUserSettingResponse])
def get_user_setting(
    dashboard_id: str,
    user_id: str,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: DashboardSettingsService = Depends(get_dashboard_settings_service)
):
    """RLS role of a user on a dashboard (null when none)"""
    return service.get_user_setting(dashboard_id, user_id)


@router.put("/{dashboard_id}/user-settings/{user_id}", response_model=DashboardUserSettingResponse)
def upsert_user_setting(
    dashboard_id: str,
    user_id: str,
    body: DashboardUserSettingUpsert,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: DashboardSettingsService = Depends(get_dashboard_settings_service)
):
    """Set the RLS role of a user on a dashboard"""
    return service.upsert_user_setting(dashboard_id, user_id, body.rls_role)


@router.delete("/{dashboard_id}/user-settings/{user_id}", status_code=204)
def delete_user_setting(
    dashboard_id: str,
    user_id: str,
    user_data: Dict = Depends(require_area("dashboard_management")),
    service: DashboardSettingsService = Depends(get_dashboard_settings_service)
):
    """Remove the personal RLS role (the dashboard default applies again)"""
    service.delete_user_setting(dashboard_id, user_id)
    return None
