from datetime import datetime, timezone
import logging
from supabase import Client
from app.modules.powerbi_clients.schemas import (
    PowerBIClientCreate, PowerBIClientUpdate, PowerBIClientResponse
)
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

TABLE_NAME = "powerbi_clients"


def _to_response(row: dict) -> PowerBIClientResponse:
    return PowerBIClientResponse(
        id=row["id"],
        name=row["name"],
        client_id=row["client_id"],
        tenant_id=row["tenant_id"],
        email=row.get("email"),
        organization_id=row.get("organization_id"),
        has_secret=bool(row.get("client_secret")),
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
    )


class PowerBIClientService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_clients(self) -> List[PowerBIClientResponse]:
        """List clients, oldest first (the first one is the default)"""
        try:
            result = self.supabase.table(TABLE_NAME)\
                .select("*")\
                .order("created_at")\
                .execute()
            return [_to_response(row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_client_row(self, client_row_id: str) -> dict:
        try:
            result = self.supabase.table(TABLE_NAME)\
                .select("*")\
                .eq("id", client_row_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Power BI client not found")
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_client(self, client_row_id: str) -> PowerBIClientResponse:
        return _to_response(self.get_client_row(client_row_id))

    def get_client_organization_id(self, client_row_id: Optional[str]) -> Optional[str]:
        if not client_row_id:
            return None
        return self.get_client_row(client_row_id).get("organization_id")

    def create_client(self, client_data: PowerBIClientCreate) -> PowerBIClientResponse:
        """Register a new tenant credential"""
        try:
            result = self.supabase.table(TABLE_NAME)\
                .insert(client_data.model_dump())\
                .execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create Power BI client")

            logger.info(f"Power BI client {result.data[0]['id']} created for tenant {client_data.tenant_id}")
            return _to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_client(self, client_row_id: str, client_data: PowerBIClientUpdate) -> PowerBIClientResponse:
        """Update a tenant credential; omitted or empty secret/password keep their stored value"""
        try:
            update_data = {
                key: value
                for key, value in client_data.model_dump(exclude_unset=True).items()
                if value is not None and not (key in ("client_secret", "password") and value == "")
            }
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table(TABLE_NAME)\
                .update(update_data)\
                .eq("id", client_row_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Power BI client not found")

            return _to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_client(self, client_row_id: str) -> bool:
        try:
            result = self.supabase.table(TABLE_NAME)\
                .delete()\
                .eq("id", client_row_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Power BI client not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
