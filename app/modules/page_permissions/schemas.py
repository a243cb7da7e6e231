from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime


class PagePermissionResponse(BaseModel):
    id: str
    dashboard_id: str
    page_name: str
    page_display_name: Optional[str] = None
    user_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PagePermissionsUpdate(BaseModel):
    """Complete list of users that get an explicit grant on one page"""
    page_display_name: Optional[str] = None
    user_ids: List[str] = []


class PageGrant(BaseModel):
    page_name: str = Field(..., min_length=1)
    page_display_name: Optional[str] = None


class UserPagesUpdate(BaseModel):
    """Complete list of pages granted to one user; empty means back to all pages"""
    pages: List[PageGrant] = []


class PagePermissionsByPage(BaseModel):
    dashboard_id: str
    pages: Dict[str, List[str]]


class AllowedPagesResponse(BaseModel):
    dashboard_id: str
    user_id: str
    restricted: bool
    allowed_pages: Optional[List[str]] = None
