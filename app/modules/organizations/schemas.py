from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from datetime import datetime

OrganizationRole = Literal["admin", "member"]


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1)
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Organization name is required")
        return v.strip()


class OrganizationUpdate(BaseModel):
    name: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Organization name cannot be blank")
        return v.strip() if v is not None else v


class OrganizationResponse(BaseModel):
    id: str
    name: str
    owner_id: str
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrganizationMemberAdd(BaseModel):
    user_id: str
    role: OrganizationRole = "member"


class MemberProfile(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class OrganizationMemberResponse(BaseModel):
    id: str
    organization_id: str
    user_id: str
    role: str
    created_at: datetime
    user: Optional[MemberProfile] = None

    class Config:
        from_attributes = True
