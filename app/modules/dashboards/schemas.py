from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime


def _dedupe(users: List[str]) -> List[str]:
    seen = []
    for user_id in users:
        if user_id not in seen:
            seen.append(user_id)
    return seen


class DashboardSettingUpdate(BaseModel):
    workspace_id: Optional[str] = None
    is_visible: bool = False
    assigned_users: List[str] = []
    organization_id: Optional[str] = None
    rls_role: Optional[str] = None

    @field_validator("assigned_users")
    @classmethod
    def unique_users(cls, v: List[str]) -> List[str]:
        return _dedupe(v)


class DashboardSettingBulkItem(DashboardSettingUpdate):
    dashboard_id: str = Field(..., min_length=1)


class DashboardSettingResponse(BaseModel):
    id: Optional[str] = None
    dashboard_id: str
    workspace_id: Optional[str] = None
    is_visible: bool = False
    assigned_users: List[str] = []
    organization_id: Optional[str] = None
    rls_role: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("is_visible", mode="before")
    @classmethod
    def null_is_hidden(cls, v):
        return bool(v)

    @field_validator("assigned_users", mode="before")
    @classmethod
    def jsonb_list(cls, v):
        return [u for u in v if isinstance(u, str)] if isinstance(v, list) else []

    class Config:
        from_attributes = True


class DashboardCatalogItem(BaseModel):
    """A report from Power BI merged with its portal settings"""
    id: str
    name: str
    embed_url: Optional[str] = None
    workspace_id: Optional[str] = None
    workspace_name: Optional[str] = None
    dataset_id: Optional[str] = None
    settings: DashboardSettingResponse


class DashboardUserSettingUpsert(BaseModel):
    rls_role: str = Field(..., min_length=1)


class DashboardUserSettingResponse(BaseModel):
    id: Optional[str] = None
    dashboard_id: str
    user_id: str
    rls_role: str

    class Config:
        from_attributes = True
