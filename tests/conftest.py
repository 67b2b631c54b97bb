"""Shared fixtures: an in-memory Supabase stand-in and an API client."""

from datetime import timedelta
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from merchant_app.config import Settings
from merchant_app.webhooks import WebhookRegistry


class FakeQuery:
    """Chainable query recorder covering the PostgREST calls the app makes."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.filters: List[tuple] = []
        self.count_mode: Optional[str] = None
        self._order: Optional[tuple] = None
        self._limit: Optional[int] = None
        self._range: Optional[tuple] = None

    def select(self, *columns, count=None, head=None):
        self.op = "select"
        self.count_mode = count
        return self

    def insert(self, records):
        self.op = "insert"
        self.payload = records if isinstance(records, list) else [records]
        return self

    def update(self, fields):
        self.op = "update"
        self.payload = fields
        return self

    def eq(self, column, value):
        self.filters.append((column, "eq", value))
        return self

    def in_(self, column, values):
        self.filters.append((column, "in", list(values)))
        return self

    def gte(self, column, value):
        self.filters.append((column, "gte", value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        for column, op, value in self.filters:
            if "." in column:
                # Filters on embedded resources are not simulated
                continue
            current = row.get(column)
            if op == "eq" and current != value:
                return False
            if op == "in" and current not in value:
                return False
            if op == "gte" and (current is None or current < value):
                return False
        return True

    def execute(self):
        self.db.queries.append(self)
        if self.table in self.db.failing_tables:
            raise APIError({"message": f"{self.table} unavailable", "code": "500"})

        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            created = []
            for record in self.payload:
                row = {"id": self.db.next_id(), "deleted": False, **record}
                rows.append(row)
                created.append(dict(row))
            return SimpleNamespace(data=created, count=None)

        matched = [row for row in rows if self._matches(row)]

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(row) for row in matched], count=None)

        if self._order:
            column, desc = self._order
            matched = sorted(matched, key=lambda r: r.get(column) or 0, reverse=desc)
        count = len(matched) if self.count_mode == "exact" else None
        if self._limit is not None:
            matched = matched[: self._limit]
        if self._range is not None:
            start, end = self._range
            matched = matched[start: end + 1]
        return SimpleNamespace(data=[dict(row) for row in matched], count=count)


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path, content, file_options=None):
        if self.storage.fail:
            raise RuntimeError("upload rejected")
        self.storage.uploads.append((self.name, path, content, file_options))
        return {"Key": f"{self.name}/{path}"}

    def create_signed_url(self, path, expires_in):
        return {"signedURL": f"https://storage.test/{self.name}/{path}?token=abc&ttl={expires_in}"}


class FakeStorage:
    def __init__(self):
        self.uploads: List[tuple] = []
        self.fail = False

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabase:
    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables = tables or {}
        self.queries: List[FakeQuery] = []
        self.failing_tables = set()
        self.storage = FakeStorage()
        self.auth = MagicMock()
        self._id = 1000

    def next_id(self) -> int:
        self._id += 1
        return self._id

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


AUTH_USER_ID = "7f1c0e4e-5b7a-4f7e-9d2a-1c3b5e7a9f00"


@pytest.fixture
def merchant_row():
    return {
        "id": 42,
        "owner_user_id": 7,
        "name": "Cafe Roma",
        "legal_name": "Cafe Roma SL",
        "vat_number": None,
        "logo_url": None,
        "street": "Calle Mayor 1\nPiso 2",
        "city": "Madrid",
        "postal_code": "28013",
        "country": "ES",
        "subscription_status": "active",
        "subscription_valid_until": None,
        "stripe_customer_id": "cus_123",
        "balance_cents": 0,
        "is_visible": True,
    }


@pytest.fixture
def fake_supabase(merchant_row):
    return FakeSupabase({
        "users": [{"id": 7, "auth_user_id": AUTH_USER_ID, "email": "owner@caferoma.es", "role": "merchant"}],
        "merchants": [merchant_row],
        "offers": [],
        "redemptions": [],
    })


@pytest.fixture
def webhook_requests():
    return []


@pytest.fixture
def webhook_response():
    """Status and body returned by the mocked webhook endpoint; tests mutate it."""
    return {"status": 200, "json": {"success": True, "url": "https://billing.test/session/1"}}


@pytest.fixture
def webhooks(webhook_requests, webhook_response):
    def handler(request: httpx.Request) -> httpx.Response:
        webhook_requests.append(request)
        return httpx.Response(webhook_response["status"], json=webhook_response["json"])

    settings = Settings(
        signup_webhook_url="https://hooks.test/signup",
        billing_webhook_url="https://hooks.test/billing",
    )
    return WebhookRegistry.from_settings(settings, transport=httpx.MockTransport(handler))


@pytest.fixture
def current_user():
    return {
        "user_id": AUTH_USER_ID,
        "email": "owner@caferoma.es",
        "role": "merchant",
        "payload": {"sub": AUTH_USER_ID},
        "token": "test-token",
    }


@pytest.fixture
def client(fake_supabase, webhooks, current_user):
    from merchant_app import deps
    from merchant_app.main import app
    from merchant_app.offers import reset_config
    from merchant_app.security import limiter, security_auditor

    reset_config()
    limiter.reset()
    security_auditor.cleanup(max_age=timedelta(0))

    app.dependency_overrides[deps.get_supabase] = lambda: fake_supabase
    app.dependency_overrides[deps.get_auth_client] = lambda: fake_supabase
    app.dependency_overrides[deps.get_webhooks] = lambda: webhooks
    app.dependency_overrides[deps.verify_token] = lambda: current_user

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
