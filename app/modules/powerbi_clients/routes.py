from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.powerbi_clients.schemas import (
    PowerBIClientCreate, PowerBIClientUpdate, PowerBIClientResponse
)
from app.modules.powerbi_clients.service import PowerBIClientService
from app.modules.powerbi.token_service import token_cache
from app.core.dependencies import require_area
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/powerbi-clients", tags=["powerbi-clients"])


def get_powerbi_client_service(supabase: Client = Depends(get_service_supabase)) -> PowerBIClientService:
    return PowerBIClientService(supabase)


@router.get("", response_model=List[PowerBIClientResponse])
def list_clients(
    user_data: Dict = Depends(require_area("powerbi_clients")),
    service: PowerBIClientService = Depends(get_powerbi_client_service)
):
    """List Power BI clients"""
    return service.list_clients()


@router.post("", response_model=PowerBIClientResponse, status_code=201)
def create_client(
    client_data: PowerBIClientCreate,
    user_data: Dict = Depends(require_area("powerbi_clients")),
    service: PowerBIClientService = Depends(get_powerbi_client_service)
):
    """Create a Power BI client"""
    return service.create_client(client_data)


@router.get("/{client_row_id}", response_model=PowerBIClientResponse)
def get_client(
    client_row_id: str,
    user_data: Dict = Depends(require_area("powerbi_clients")),
    service: PowerBIClientService = Depends(get_powerbi_client_service)
):
    """Get Power BI client by ID"""
    return service.get_client(client_row_id)


@router.put("/{client_row_id}", response_model=PowerBIClientResponse)
def update_client(
    client_row_id: str,
    client_data: PowerBIClientUpdate,
    user_data: Dict = Depends(require_area("powerbi_clients")),
    service: PowerBIClientService = Depends(get_powerbi_client_service)
):
    """Update Power BI client; cached tokens for it are dropped"""
    response = service.update_client(client_row_id, client_data)
    token_cache.invalidate(client_row_id)
    token_cache.invalidate(None)
    return response


@router.delete("/{client_row_id}", status_code=204)
def delete_client(
    client_row_id: str,
    user_data: Dict = Depends(require_area("powerbi_clients")),
    service: PowerBIClientService = Depends(get_powerbi_client_service)
):
    """Delete Power BI client"""
    service.delete_client(client_row_id)
    token_cache.invalidate(client_row_id)
    token_cache.invalidate(None)
    return None
