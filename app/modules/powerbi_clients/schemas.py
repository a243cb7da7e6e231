from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class PowerBIClientCreate(BaseModel):
    name: str = Field(..., min_length=1)
    client_id: str = Field(..., min_length=1)
    tenant_id: str = Field(..., min_length=1)
    client_secret: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    organization_id: Optional[str] = None


class PowerBIClientUpdate(BaseModel):
    """Empty client_secret / password keep the stored value; identifiers can not be blanked"""
    name: Optional[str] = Field(None, min_length=1)
    client_id: Optional[str] = Field(None, min_length=1)
    tenant_id: Optional[str] = Field(None, min_length=1)
    client_secret: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    organization_id: Optional[str] = None


class PowerBIClientResponse(BaseModel):
    """Secrets are never echoed back; has_secret tells whether one is stored"""
    id: str
    name: str
    client_id: str
    tenant_id: str
    email: Optional[str] = None
    organization_id: Optional[str] = None
    has_secret: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PowerBICredentials(BaseModel):
    """Server-side only view of a row, used to mint access tokens"""
    id: Optional[str] = None
    tenant_id: str
    client_id: str
    client_secret: str
