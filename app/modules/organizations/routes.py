from fastapi import APIRouter, Depends, HTTPException, status
from app.database.supabase_client import get_supabase
from app.modules.organizations.schemas import (
    OrganizationCreate, OrganizationUpdate, OrganizationResponse,
    OrganizationMemberAdd, OrganizationMemberResponse
)
from app.modules.organizations.service import OrganizationService
from app.core.dependencies import (
    get_current_user_with_role,
    require_area,
    is_admin_master,
    get_access_cache,
    get_user_organization_ids,
    check_organization_admin,
    check_organization_member,
)
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/organizations", tags=["organizations"])


def get_organization_service(supabase: Client = Depends(get_supabase)) -> OrganizationService:
    return OrganizationService(supabase)


@router.post("", response_model=OrganizationResponse, status_code=201)
def create_organization(
    org_data: OrganizationCreate,
    user_data: Dict = Depends(require_area("organizations")),
    service: OrganizationService = Depends(get_organization_service)
):
    """Create a new organization; the caller becomes its owner"""
    return service.create_organization(org_data, user_data["id"])


@router.get("", response_model=List[OrganizationResponse])
def list_organizations(
    user_data: Dict = Depends(get_current_user_with_role),
    service: OrganizationService = Depends(get_organization_service),
    supabase: Client = Depends(get_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """List organizations the user belongs to (or all if admin_master)"""
    organization_ids = None if is_admin_master(user_data) else get_user_organization_ids(user_data["id"], supabase, cache)
    return service.list_organizations(organization_ids=organization_ids)


@router.get("/by-user/{user_id}", response_model=List[OrganizationResponse])
def list_user_organizations(
    user_id: str,
    user_data: Dict = Depends(get_current_user_with_role),
    service: OrganizationService = Depends(get_organization_service),
    supabase: Client = Depends(get_supabase)
):
    """Organizations a given user belongs to (self, or any user for admin_master)"""
    if user_id != user_data["id"] and not is_admin_master(user_data):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not accessible")
    return service.list_organizations(organization_ids=get_user_organization_ids(user_id, supabase))


@router.get("/{organization_id}", response_model=OrganizationResponse)
def get_organization(
    organization_id: str,
    user_data: Dict = Depends(get_current_user_with_role),
    service: OrganizationService = Depends(get_organization_service),
    supabase: Client = Depends(get_supabase)
):
    """Get organization by ID (only if user is a member)"""
    check_organization_member(organization_id, user_data, supabase)
    return service.get_organization_by_id(organization_id)


@router.put("/{organization_id}", response_model=OrganizationResponse)
def update_organization(
    organization_id: str,
    org_data: OrganizationUpdate,
    user_data: Dict = Depends(get_current_user_with_role),
    service: OrganizationService = Depends(get_organization_service),
    supabase: Client = Depends(get_supabase)
):
    """Update organization (organization admin or admin_master)"""
    check_organization_admin(organization_id, user_data, supabase)
    return service.update_organization(organization_id, org_data)


@router.delete("/{organization_id}", status_code=204)
def delete_organization(
    organization_id: str,
    user_data: Dict = Depends(get_current_user_with_role),
    service: OrganizationService = Depends(get_organization_service),
    supabase: Client = Depends(get_supabase)
):
    """Delete organization (organization admin or admin_master)"""
    check_organization_admin(organization_id, user_data, supabase)
    service.delete_organization(organization_id)
    return None


@router.get("/{organization_id}/members", response_model=List[OrganizationMemberResponse])
def list_members(
    organization_id: str,
    user_data: Dict = Depends(get_current_user_with_role),
    service: OrganizationService = Depends(get_organization_service),
    supabase: Client = Depends(get_supabase)
):
    """List all members of an organization (only if user is a member)"""
    check_organization_member(organization_id, user_data, supabase)
    return service.list_members(organization_id)


@router.post("/{organization_id}/members", response_model=OrganizationMemberResponse, status_code=201)
def add_member(
    organization_id: str,
    member_data: OrganizationMemberAdd,
    user_data: Dict = Depends(get_current_user_with_role),
    service: OrganizationService = Depends(get_organization_service),
    supabase: Client = Depends(get_supabase)
):
    """Add a member to the organization (organization admin or admin_master)"""
    check_organization_admin(organization_id, user_data, supabase)
    return service.add_member(organization_id, member_data)


@router.delete("/{organization_id}/members/{user_id}", status_code=204)
def remove_member(
    organization_id: str,
    user_id: str,
    user_data: Dict = Depends(get_current_user_with_role),
    service: OrganizationService = Depends(get_organization_service),
    supabase: Client = Depends(get_supabase)
):
    """Remove a member from the organization (organization admin or admin_master)"""
    check_organization_admin(organization_id, user_data, supabase)
    service.remove_member(organization_id, user_id)
    return None
