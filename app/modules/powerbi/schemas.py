from pydantic import BaseModel, Field
from typing import Optional, List


class Workspace(BaseModel):
    id: str
    name: str
    is_read_only: Optional[bool] = Field(None, alias="isReadOnly")
    is_on_dedicated_capacity: Optional[bool] = Field(None, alias="isOnDedicatedCapacity")

    class Config:
        populate_by_name = True


class Report(BaseModel):
    id: str
    name: str
    embed_url: Optional[str] = Field(None, alias="embedUrl")
    web_url: Optional[str] = Field(None, alias="webUrl")
    dataset_id: Optional[str] = Field(None, alias="datasetId")
    workspace_id: Optional[str] = Field(None, alias="workspaceId")
    workspace_name: Optional[str] = Field(None, alias="workspaceName")

    class Config:
        populate_by_name = True


class ReportPage(BaseModel):
    name: str
    display_name: Optional[str] = Field(None, alias="displayName")
    order: int = 0

    class Config:
        populate_by_name = True


class RLSIdentity(BaseModel):
    username: str
    roles: List[str]
    datasets: List[str]


class EmbedToken(BaseModel):
    token: str
    token_id: Optional[str] = Field(None, alias="tokenId")
    expiration: Optional[str] = None

    class Config:
        populate_by_name = True


class EmbedConfigResponse(BaseModel):
    report_id: str = Field(..., alias="reportId")
    report_name: str = Field(..., alias="reportName")
    workspace_id: str = Field(..., alias="workspaceId")
    embed_url: Optional[str] = Field(None, alias="embedUrl")
    embed_token: str = Field(..., alias="embedToken")
    token_expiration: Optional[str] = Field(None, alias="tokenExpiration")
    dataset_id: Optional[str] = Field(None, alias="datasetId")
    rls_role: Optional[str] = Field(None, alias="rlsRole")
    restricted: bool = False
    allowed_pages: Optional[List[str]] = Field(None, alias="allowedPages")
    pages: List[ReportPage] = []
    default_page: Optional[str] = Field(None, alias="defaultPage")

    class Config:
        populate_by_name = True


class PageNavigationRequest(BaseModel):
    target_page: str = Field(..., alias="targetPage", min_length=1)
    current_page: Optional[str] = Field(None, alias="currentPage")
    pages: Optional[List[str]] = None  # page names in report order, when the client knows them

    class Config:
        populate_by_name = True


class PageNavigationResponse(BaseModel):
    allowed: bool
    page: Optional[str] = None
