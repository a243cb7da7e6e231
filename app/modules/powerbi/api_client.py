"""Thin client over the Power BI REST API (v1.0/myorg)."""
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from fastapi import HTTPException

from app.config import settings
from app.modules.powerbi.schemas import Workspace, Report, ReportPage, RLSIdentity, EmbedToken
from app.modules.powerbi.token_service import TokenService

logger = logging.getLogger(__name__)

GET_ACCESS_TOKEN_PATH = "get-access-token"


class PowerBIApiClient:
    def __init__(self, token_service: TokenService, http_client: httpx.Client):
        self.tokens = token_service
        self.http = http_client

    def _url(self, path: str) -> str:
        return f"{settings.powerbi_api_url.rstrip('/')}/{path.lstrip('/')}"

    def _send(
        self,
        method: str,
        path: str,
        client_row_id: Optional[str] = None,
        body: Optional[Any] = None,
    ) -> httpx.Response:
        access_token = self.tokens.get_access_token(client_row_id)
        try:
            return self.http.request(
                method,
                self._url(path),
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Content-Type": "application/json",
                },
                json=body if method.upper() != "GET" else None,
            )
        except httpx.HTTPError as e:
            logger.error(f"Power BI API unreachable ({method} {path}): {e}")
            raise HTTPException(status_code=502, detail="Power BI API unreachable")

    def _call(self, method: str, path: str, client_row_id: Optional[str] = None, body: Optional[Any] = None) -> Dict[str, Any]:
        response = self._send(method, path, client_row_id, body)
        if response.status_code >= 400:
            logger.error(f"Power BI {method} {path} failed: {response.status_code} {response.text}")
            raise HTTPException(
                status_code=502,
                detail=f"Power BI request failed: {response.status_code} - {response.text}",
            )
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            raise HTTPException(status_code=502, detail="Invalid response from Power BI")

    def proxy(
        self,
        method: str,
        path: str,
        client_row_id: Optional[str] = None,
        body: Optional[Any] = None,
    ) -> Tuple[int, Any]:
        """Forward a raw call; returns upstream status and JSON ({} when the body is not JSON)"""
        if path == GET_ACCESS_TOKEN_PATH:
            return 200, {"access_token": self.tokens.get_access_token(client_row_id)}

        response = self._send(method, path, client_row_id, body)
        try:
            data = response.json()
        except ValueError:
            data = {}
        return response.status_code, data

    def get_workspaces(self, client_row_id: Optional[str] = None) -> List[Workspace]:
        data = self._call("GET", "v1.0/myorg/groups", client_row_id)
        return [Workspace(**ws) for ws in data.get("value") or []]

    def get_reports_in_workspace(self, workspace_id: str, client_row_id: Optional[str] = None) -> List[Report]:
        data = self._call("GET", f"v1.0/myorg/groups/{workspace_id}/reports", client_row_id)
        reports = []
        for item in data.get("value") or []:
            report = Report(**item)
            report.workspace_id = workspace_id
            reports.append(report)
        return reports

    def get_report(self, workspace_id: str, report_id: str, client_row_id: Optional[str] = None) -> Report:
        data = self._call("GET", f"v1.0/myorg/groups/{workspace_id}/reports/{report_id}", client_row_id)
        report = Report(**data)
        report.workspace_id = workspace_id
        return report

    def get_all_reports(self, client_row_id: Optional[str] = None) -> List[Report]:
        """Every report of every workspace, annotated with its workspace"""
        all_reports: List[Report] = []
        for workspace in self.get_workspaces(client_row_id):
            for report in self.get_reports_in_workspace(workspace.id, client_row_id):
                report.workspace_name = workspace.name
                all_reports.append(report)
        return all_reports

    def get_report_pages(self, workspace_id: str, report_id: str, client_row_id: Optional[str] = None) -> List[ReportPage]:
        data = self._call("GET", f"v1.0/myorg/groups/{workspace_id}/reports/{report_id}/pages", client_row_id)
        pages = [ReportPage(**page) for page in data.get("value") or []]
        return sorted(pages, key=lambda p: p.order)

    def generate_embed_token(
        self,
        workspace_id: str,
        report_id: str,
        client_row_id: Optional[str] = None,
        identity: Optional[RLSIdentity] = None,
    ) -> EmbedToken:
        body: Dict[str, Any] = {"accessLevel": "View"}
        if identity is not None:
            body["identities"] = [identity.model_dump()]
        data = self._call(
            "POST",
            f"v1.0/myorg/groups/{workspace_id}/reports/{report_id}/GenerateToken",
            client_row_id,
            body,
        )
        if not data.get("token"):
            raise HTTPException(status_code=502, detail="Failed to generate embed token")
        return EmbedToken(**data)
