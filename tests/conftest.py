"""Shared test fixtures.

Provides an in-memory stand-in for the Supabase fluent query builder, a
mock HTTP transport for GitHub and Resend, and a FastAPI ``TestClient``
wired to both.
"""

from __future__ import annotations

import copy
import hashlib
import hmac
from collections.abc import Callable, Generator
from typing import Any
from uuid import uuid4

import httpx
import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

WEBHOOK_SECRET = "whsec-test-secret"


# ---------------------------------------------------------------------------
# Supabase fake
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, data: list[dict[str, Any]]) -> None:
        self.data = data
        self.count = None


class FakeQuery:
    """Chainable query mirroring ``client.table(name)....execute()``."""

    def __init__(self, db: FakeSupabase, table: str) -> None:
        self._db = db
        self._table = table
        self._op = "select"
        self._payload: Any = None
        self._filters: list[tuple[str, Any]] = []
        self._order: tuple[str, bool] | None = None
        self._limit: int | None = None

    def select(self, *columns: str, **kwargs: Any) -> FakeQuery:
        return self

    def insert(self, payload: Any) -> FakeQuery:
        self._op = "insert"
        self._payload = payload
        return self

    def update(self, payload: dict[str, Any]) -> FakeQuery:
        self._op = "update"
        self._payload = payload
        return self

    def eq(self, column: str, value: Any) -> FakeQuery:
        self._filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False) -> FakeQuery:
        self._order = (column, desc)
        return self

    def limit(self, count: int) -> FakeQuery:
        self._limit = count
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(str(row.get(col)) == str(val) for col, val in self._filters)

    def execute(self) -> FakeResponse:
        self._db.calls.append((self._table, self._op))
        failure = self._db.failures.get((self._table, self._op))
        if failure is not None:
            raise failure

        rows = self._db.tables.setdefault(self._table, [])

        if self._op == "insert":
            payloads = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = []
            for payload in payloads:
                row = dict(payload)
                row.setdefault("id", str(uuid4()))
                self._db.check_unique(self._table, row)
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            return FakeResponse(inserted)

        matched = [row for row in rows if self._matches(row)]

        if self._op == "update":
            for row in matched:
                row.update(self._payload)
            return FakeResponse(copy.deepcopy(matched))

        if self._order is not None:
            column, desc = self._order
            matched = sorted(matched, key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self._limit is not None:
            matched = matched[: self._limit]
        return FakeResponse(copy.deepcopy(matched))


class FakeSupabase:
    """In-memory ``candidates``/``releases`` tables with their unique constraints."""

    UNIQUE: dict[str, tuple[str, ...]] = {
        "candidates": ("token",),
        "releases": ("tag_name",),
    }

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {"candidates": [], "releases": []}
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], Exception] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def check_unique(self, table: str, row: dict[str, Any]) -> None:
        for column in self.UNIQUE.get(table, ()):
            if any(existing.get(column) == row.get(column) for existing in self.tables[table]):
                raise APIError(
                    {
                        "message": f'duplicate key value violates unique constraint "{table}_{column}_key"',
                        "code": "23505",
                        "hint": None,
                        "details": f"Key ({column})=({row.get(column)}) already exists.",
                    }
                )

    def fail(self, table: str, op: str, message: str = "connection reset") -> None:
        self.failures[(table, op)] = APIError(
            {"message": message, "code": "XX000", "hint": None, "details": None}
        )

    def snapshot(self) -> dict[str, list[dict[str, Any]]]:
        return copy.deepcopy(self.tables)

    def writes(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[1] in ("insert", "update")]


# ---------------------------------------------------------------------------
# Upstream HTTP fake (GitHub + Resend)
# ---------------------------------------------------------------------------

class FakeUpstream:
    """Serves ``releases/latest`` and the Resend email endpoint."""

    def __init__(self) -> None:
        self.release: dict[str, Any] | None = None
        self.github_status = 200
        self.email_status = 200
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "api.resend.com":
            return httpx.Response(self.email_status, json={"id": "email-1"})
        if self.github_status >= 400:
            return httpx.Response(self.github_status, json={"message": "Server Error"})
        if self.release is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, json=self.release)

    @property
    def github_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "api.github.com"]

    @property
    def email_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "api.resend.com"]


def make_github_release(
    tag_name: str = "v1.0",
    created_at: str = "2026-01-10T12:00:00Z",
    assets: list[dict[str, str]] | None = None,
) -> dict[str, Any]:
    version = tag_name.lstrip("v")
    if assets is None:
        assets = [
            {"name": "notes.txt", "browser_download_url": f"https://x/{version}.txt"},
            {
                "name": f"sdk-challenge-{version}.zip",
                "browser_download_url": f"https://x/{version}.zip",
            },
        ]
    return {
        "tag_name": tag_name,
        "name": f"Challenge {tag_name}",
        "html_url": f"https://github.com/composio/sdk-design-question/releases/tag/{tag_name}",
        "created_at": created_at,
        "assets": assets,
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def settings() -> Any:
    from challenge_portal.core.config import Settings

    return Settings(  # type: ignore[call-arg]
        _env_file=None,
        SUPABASE_URL="https://test.supabase.co",
        SUPABASE_KEY="test-key",
        GITHUB_TOKEN="gh-test",
        GITHUB_WEBHOOK_SECRET=WEBHOOK_SECRET,
        RESEND_API_KEY="re-test",
        PUBLIC_BASE_URL="https://challenge.example.com",
    )


@pytest.fixture()
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def http_client(upstream: FakeUpstream) -> Generator[httpx.Client, None, None]:
    with httpx.Client(transport=httpx.MockTransport(upstream.handler)) as client:
        yield client


@pytest.fixture()
def github_release() -> Callable[..., dict[str, Any]]:
    """Builder for GitHub release objects (API response / webhook ``release``)."""
    return make_github_release


@pytest.fixture()
def services(settings: Any, fake_supabase: FakeSupabase, http_client: httpx.Client) -> Any:
    from challenge_portal.dependencies import build_services

    return build_services(settings, supabase=fake_supabase, http_client=http_client)  # type: ignore[arg-type]


@pytest.fixture()
def test_client(services: Any) -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient backed by the fakes."""
    from challenge_portal.main import create_app

    with TestClient(create_app(services)) as client:
        yield client


@pytest.fixture()
def sign() -> Callable[..., str]:
    """Return ``sha256=<hex>`` for a body, keyed with the test secret by default."""

    def _sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
        return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()

    return _sign
