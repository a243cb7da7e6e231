"""
Shared fixtures: in-memory Supabase, fake Power BI / Microsoft endpoints and a
TestClient with auth resolved from a settable current user.
"""
import copy
import json
import itertools
import re
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from app.core.dependencies import get_current_user_id
from app.database.supabase_client import get_supabase, get_service_supabase, get_session_client_factory
from app.main import app as fastapi_app, limiter
from app.modules.auth.service import clear_auth_cache
from app.modules.powerbi.http_client import get_http_client
from app.modules.powerbi.token_service import token_cache


# ── In-memory Supabase ──────────────────────────────────────────────────────

class FakeResult:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Subset of the postgrest query builder used by the services"""

    def __init__(self, db, table_name):
        self.db = db
        self.table_name = table_name
        self._op = "select"
        self._payload = None
        self._on_conflict = None
        self._filters = []
        self._order = []
        self._limit = None

    def select(self, *columns, **kwargs):
        self._op = "select"
        return self

    def insert(self, payload, **kwargs):
        self._op, self._payload = "insert", payload
        return self

    def upsert(self, payload, on_conflict=None, **kwargs):
        self._op, self._payload, self._on_conflict = "upsert", payload, on_conflict
        return self

    def update(self, payload, **kwargs):
        self._op, self._payload = "update", payload
        return self

    def delete(self, **kwargs):
        self._op = "delete"
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False, **kwargs):
        self._order.append((column, desc))
        return self

    def limit(self, size, **kwargs):
        self._limit = size
        return self

    def _matches(self, row):
        return all(f(row) for f in self._filters)

    def execute(self):
        if self.table_name in self.db.failing_tables or (self.table_name, self._op) in self.db.failing_ops:
            raise Exception(f"connection to {self.table_name} lost")
        rows = self.db.tables.setdefault(self.table_name, [])

        if self._op == "insert":
            payload = self._payload if isinstance(self._payload, list) else [self._payload]
            return FakeResult([copy.deepcopy(self.db.add(self.table_name, p)) for p in payload])

        if self._op == "upsert":
            payload = self._payload if isinstance(self._payload, list) else [self._payload]
            keys = [k.strip() for k in (self._on_conflict or "id").split(",")]
            saved = []
            for item in payload:
                existing = next((r for r in rows if all(r.get(k) == item.get(k) for k in keys)), None)
                if existing is not None:
                    existing.update(copy.deepcopy(item))
                    saved.append(copy.deepcopy(existing))
                else:
                    saved.append(copy.deepcopy(self.db.add(self.table_name, item)))
            return FakeResult(saved)

        matched = [r for r in rows if self._matches(r)]

        if self._op == "update":
            for row in matched:
                row.update(copy.deepcopy(self._payload))
            return FakeResult(copy.deepcopy(matched))

        if self._op == "delete":
            self.db.tables[self.table_name] = [r for r in rows if not self._matches(r)]
            return FakeResult(copy.deepcopy(matched))

        for column, desc in reversed(self._order):
            matched = sorted(
                matched,
                key=lambda r: (r.get(column) is None, r.get(column) if r.get(column) is not None else ""),
                reverse=desc,
            )
        if self._limit is not None:
            matched = matched[:self._limit]
        return FakeResult(copy.deepcopy(matched))


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.failing_tables = set()
        self.failing_ops = set()  # (table, "insert" | "update" | "delete" | ...)
        self.auth = MagicMock()
        self._ids = itertools.count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def table(self, name):
        return FakeQuery(self, name)

    def add(self, table_name, row):
        row = copy.deepcopy(row)
        row.setdefault("id", f"{table_name}-{next(self._ids)}")
        self._clock += timedelta(seconds=1)
        row.setdefault("created_at", self._clock.isoformat())
        self.tables.setdefault(table_name, []).append(row)
        return row

    def seed(self, table_name, *rows):
        for row in rows:
            self.add(table_name, row)

    def rows(self, table_name, **match):
        return [
            r for r in self.tables.get(table_name, [])
            if all(r.get(k) == v for k, v in match.items())
        ]


# ── Fake Microsoft identity + Power BI REST API ─────────────────────────────

class FakePowerBI:
    """httpx.MockTransport handler emulating login.microsoftonline.com and api.powerbi.com"""

    def __init__(self):
        self.workspaces = [{"id": "ws-1", "name": "Sales"}, {"id": "ws-2", "name": "Finance"}]
        self.reports = {
            "ws-1": [
                {"id": "r-1", "name": "Revenue", "embedUrl": "https://app.powerbi.com/reportEmbed?reportId=r-1", "datasetId": "ds-1"},
                {"id": "r-2", "name": "Pipeline", "embedUrl": "https://app.powerbi.com/reportEmbed?reportId=r-2", "datasetId": "ds-2"},
            ],
            "ws-2": [
                {"id": "r-3", "name": "Budget", "embedUrl": "https://app.powerbi.com/reportEmbed?reportId=r-3", "datasetId": "ds-3"},
            ],
        }
        self.pages = {
            "r-1": [
                {"name": "ReportSectionC", "displayName": "Details", "order": 2},
                {"name": "ReportSectionA", "displayName": "Overview", "order": 0},
                {"name": "ReportSectionB", "displayName": "Regions", "order": 1},
            ],
        }
        self.token_status = 200
        self.token_calls = 0
        self.expires_in = 3599
        self.requests = []
        self.embed_bodies = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.url.host == "login.microsoftonline.com":
            self.token_calls += 1
            if self.token_status != 200:
                return httpx.Response(self.token_status, text='{"error":"invalid_client"}')
            return httpx.Response(200, json={
                "token_type": "Bearer",
                "expires_in": self.expires_in,
                "access_token": f"aad-token-{self.token_calls}",
            })

        if not request.headers.get("Authorization", "").startswith("Bearer aad-token-"):
            return httpx.Response(401, json={"error": "unauthorized"})

        if path == "/v1.0/myorg/groups":
            return httpx.Response(200, json={"value": self.workspaces})

        match = re.fullmatch(r"/v1\.0/myorg/groups/([^/]+)/reports", path)
        if match:
            return httpx.Response(200, json={"value": self.reports.get(match.group(1), [])})

        match = re.fullmatch(r"/v1\.0/myorg/groups/([^/]+)/reports/([^/]+)(/pages|/GenerateToken)?", path)
        if match:
            workspace_id, report_id, suffix = match.groups()
            report = next((r for r in self.reports.get(workspace_id, []) if r["id"] == report_id), None)
            if report is None:
                return httpx.Response(404, json={"error": {"code": "ItemNotFound"}})
            if suffix == "/pages":
                return httpx.Response(200, json={"value": self.pages.get(report_id, [])})
            if suffix == "/GenerateToken":
                self.embed_bodies.append(json.loads(request.content))
                return httpx.Response(200, json={
                    "token": f"embed-{report_id}",
                    "tokenId": "tok-1",
                    "expiration": "2026-01-01T01:00:00Z",
                })
            return httpx.Response(200, json=report)

        return httpx.Response(404, json={"error": "not found"})


# ── Fixtures ─────────────────────────────────────────────────────────────────

PBI_CLIENT_ROW = {
    "id": "pc-1",
    "name": "Contoso",
    "client_id": "app-id",
    "tenant_id": "tenant-1",
    "client_secret": "s3cret",
    "email": "svc@contoso.com",
    "password": "pbi-password",
    "organization_id": None,
}

USERS = {
    "u-master": ("admin_master", "Ada", "Master"),
    "u-admin": ("admin", "Alan", "Admin"),
    "u-alice": ("user", "Alice", "Anders"),
    "u-bob": ("user", "Bob", "Brown"),
}


@pytest.fixture(autouse=True)
def _reset_caches():
    token_cache.clear()
    clear_auth_cache()
    limiter.enabled = False
    yield
    token_cache.clear()
    clear_auth_cache()


@pytest.fixture()
def db():
    fake = FakeSupabase()
    for user_id, (role, first_name, last_name) in USERS.items():
        fake.seed("profiles", {"id": user_id, "first_name": first_name, "last_name": last_name, "is_active": True})
        fake.seed("user_roles", {"user_id": user_id, "role": role})
    fake.seed("powerbi_clients", dict(PBI_CLIENT_ROW))
    return fake


@pytest.fixture()
def powerbi():
    return FakePowerBI()


@pytest.fixture()
def http_client(powerbi):
    client = httpx.Client(transport=httpx.MockTransport(powerbi.handler))
    yield client
    client.close()


@pytest.fixture()
def current_user():
    """Mutable holder: set ["id"] (and optionally ["email"]) to authenticate requests"""
    return {"id": None, "email": None}


@pytest.fixture()
def client(db, http_client, current_user):
    def _current_user():
        if not current_user["id"]:
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        return {
            "id": current_user["id"],
            "email": current_user["email"],
            "user_metadata": {},
            "app_metadata": {},
        }

    fastapi_app.dependency_overrides[get_supabase] = lambda: db
    fastapi_app.dependency_overrides[get_service_supabase] = lambda: db
    fastapi_app.dependency_overrides[get_session_client_factory] = lambda: (lambda: db)
    fastapi_app.dependency_overrides[get_http_client] = lambda: http_client
    fastapi_app.dependency_overrides[get_current_user_id] = _current_user
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def login_as(current_user):
    def _login(user_id, email=None):
        current_user["id"] = user_id
        current_user["email"] = email or f"{user_id}@contoso.com"
    return _login
