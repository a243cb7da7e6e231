"""
Access tokens for the Power BI REST API (OAuth 2.0 client-credentials grant).

Credentials come from the powerbi_clients table; tokens are kept in a
process-wide cache keyed by client row id ("default" when none is given).
"""
import logging
import threading
import time
from typing import Dict, Optional, Tuple

import httpx
from fastapi import HTTPException
from supabase import Client

from app.config import settings
from app.modules.powerbi_clients.schemas import PowerBICredentials

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_KEY = "default"


class TokenCache:
    """Thread-safe token cache with a fixed expiry per entry."""

    def __init__(self):
        self._lock = threading.Lock()
        self._tokens: Dict[str, Tuple[str, float]] = {}

    @staticmethod
    def key_for(client_row_id: Optional[str]) -> str:
        return client_row_id or DEFAULT_CLIENT_KEY

    def get(self, client_row_id: Optional[str]) -> Optional[str]:
        key = self.key_for(client_row_id)
        with self._lock:
            entry = self._tokens.get(key)
            if entry is None:
                return None
            token, expires_at = entry
            if time.monotonic() >= expires_at:
                del self._tokens[key]
                return None
            return token

    def put(self, client_row_id: Optional[str], token: str, ttl_seconds: float) -> None:
        with self._lock:
            self._tokens[self.key_for(client_row_id)] = (token, time.monotonic() + ttl_seconds)

    def invalidate(self, client_row_id: Optional[str]) -> None:
        with self._lock:
            self._tokens.pop(self.key_for(client_row_id), None)

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()


token_cache = TokenCache()


def resolve_credentials(supabase: Client, client_row_id: Optional[str] = None) -> PowerBICredentials:
    """Credentials of the given client row, or of the oldest row when none is given"""
    try:
        query = supabase.table("powerbi_clients").select("id, tenant_id, client_id, client_secret")
        if client_row_id:
            result = query.eq("id", client_row_id).limit(1).execute()
        else:
            result = query.order("created_at").limit(1).execute()
    except Exception as e:
        logger.error(f"Error fetching Power BI credentials: {e}")
        raise HTTPException(status_code=500, detail="Error fetching Power BI credentials")

    if not result.data:
        logger.info(f"No Power BI client found (client_id={client_row_id or 'default'})")
        raise HTTPException(status_code=404, detail="No Power BI client found in powerbi_clients")

    row = result.data[0]
    if not row.get("tenant_id") or not row.get("client_id") or not row.get("client_secret"):
        raise HTTPException(status_code=500, detail="Incomplete Power BI client credentials")

    return PowerBICredentials(
        id=row.get("id"),
        tenant_id=row["tenant_id"],
        client_id=row["client_id"],
        client_secret=row["client_secret"],
    )


class TokenService:
    def __init__(self, supabase: Client, http_client: httpx.Client, cache: TokenCache = token_cache):
        self.supabase = supabase
        self.http = http_client
        self.cache = cache

    def get_access_token(self, client_row_id: Optional[str] = None) -> str:
        """Cached access token for a client, requesting a new one when missing or expired"""
        cached = self.cache.get(client_row_id)
        if cached:
            return cached

        credentials = resolve_credentials(self.supabase, client_row_id)
        token, expires_in = self._request_token(credentials)

        ttl = settings.powerbi_token_ttl_seconds
        if expires_in:
            ttl = min(ttl, max(expires_in - 60, 0))
        self.cache.put(client_row_id, token, ttl)
        return token

    def _request_token(self, credentials: PowerBICredentials) -> Tuple[str, Optional[int]]:
        token_url = f"{settings.powerbi_authority_host.rstrip('/')}/{credentials.tenant_id}/oauth2/v2.0/token"
        logger.info(f"Requesting Power BI access token (tenant={credentials.tenant_id}, client={credentials.client_id})")
        try:
            response = self.http.post(
                token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": credentials.client_id,
                    "client_secret": credentials.client_secret,
                    "scope": settings.powerbi_scope,
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Microsoft token endpoint unreachable: {e}")
            raise HTTPException(status_code=502, detail="Microsoft identity platform unreachable")

        if response.status_code >= 400:
            logger.error(f"Error obtaining Microsoft token: {response.status_code} {response.text}")
            raise HTTPException(
                status_code=response.status_code,
                detail={
                    "error": "Error authenticating with Microsoft",
                    "status": response.status_code,
                    "details": response.text,
                },
            )

        try:
            data = response.json()
        except ValueError:
            logger.error("Microsoft token response is not valid JSON")
            raise HTTPException(status_code=500, detail="Invalid response from Microsoft")

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise HTTPException(status_code=500, detail="Microsoft response does not contain access_token")

        expires_in = data.get("expires_in")
        try:
            expires_in = int(expires_in) if expires_in is not None else None
        except (TypeError, ValueError):
            expires_in = None
        return access_token, expires_in
