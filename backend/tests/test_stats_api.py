"""API-level tests for the stats endpoint."""
from __future__ import annotations

import json
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from stats_api.core.config import Settings, get_settings
from stats_api.deps import get_translate_client_factory
from stats_api.main import app

from stubs import (
    COUNTRY_KEY,
    DAILY_KEY,
    MONTHLY_KEY,
    UppercaseClient,
    make_settings,
    uppercase_client_factory,
)


def _headers(key: str | None = MONTHLY_KEY, signature: str | None = "u1") -> dict[str, str]:
    headers: dict[str, str] = {}
    if key is not None:
        headers["Authorization"] = key
    if signature is not None:
        headers["X-User-Signature"] = signature
    return headers


@pytest.fixture(name="client_for")
def client_for_fixture(tmp_path: Path):
    clients: list[TestClient] = []

    def _make(**overrides: object) -> TestClient:
        settings = make_settings(tmp_path, **overrides)
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_translate_client_factory] = (
            lambda: uppercase_client_factory()
        )
        client = TestClient(app)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


def test_rate_limit_sequence_for_one_identity(client_for) -> None:
    client = client_for(rate_limit=2)
    responses = [client.get("/api/stats", headers=_headers()) for _ in range(3)]

    assert [r.status_code for r in responses] == [200, 200, 429]
    assert responses[0].json()["rateLimit"]["remaining"] == 1
    assert responses[1].json()["rateLimit"]["remaining"] == 0
    limited = responses[2].json()
    assert limited["error"] == "Rate limit exceeded"
    assert limited["remaining"] == 0
    reset = datetime.fromisoformat(limited["resetTime"].replace("Z", "+00:00"))
    assert reset > datetime.now(timezone.utc)


def test_monthly_key_returns_monthly_data(client_for) -> None:
    client = client_for(translation_enabled=False)
    response = client.get("/api/stats", headers=_headers(f"Bearer {MONTHLY_KEY}"))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Authorization successful"
    assert body["accessType"] == "monthly"
    assert body["data"]["users"] == 1500
    assert body["data"]["period"] == "January 2024"


def test_payload_strings_are_translated(client_for) -> None:
    client = client_for()
    response = client.get("/api/stats?lang=fr", headers=_headers(COUNTRY_KEY))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["message"] == "AVERAGE USERS PER COUNTRY"
    assert data["average"] == 75
    assert data["topCountries"][0] == {"country": "UNITED STATES", "users": 320}


def test_default_target_language_is_used(client_for) -> None:
    stub = UppercaseClient()
    client = client_for(default_target_lang="pt")
    app.dependency_overrides[get_translate_client_factory] = (
        lambda: uppercase_client_factory(stub)
    )
    response = client.get("/api/stats", headers=_headers(DAILY_KEY))

    assert response.status_code == 200
    assert {lang for _, lang in stub.calls} == {"pt"}
    assert response.json()["data"]["activeSessions"] == 127


def test_invalid_key_is_rejected_and_consumes_a_slot(client_for) -> None:
    client = client_for(rate_limit=1)
    rejected = client.get("/api/stats", headers=_headers("garbage"))
    assert rejected.status_code == 401
    assert rejected.json() == {"error": "Invalid API key"}

    follow_up = client.get("/api/stats", headers=_headers(MONTHLY_KEY))
    assert follow_up.status_code == 429


@pytest.mark.parametrize(
    ("headers", "error"),
    [
        (_headers(key=None), "Authorization header required"),
        (_headers(key="Bearer"), "Authorization header required"),
        (_headers(signature=None), "User signature header required"),
        (_headers(signature="  "), "User signature header required"),
    ],
)
def test_missing_headers_do_not_consume_slots(client_for, headers, error: str) -> None:
    client = client_for(rate_limit=1)
    response = client.get("/api/stats", headers=headers)
    assert response.status_code == 401
    assert response.json() == {"error": error}

    assert client.get("/api/stats", headers=_headers()).status_code == 200


def test_signatures_are_limited_independently(client_for) -> None:
    client = client_for(rate_limit=1)
    assert client.get("/api/stats", headers=_headers(signature="a")).status_code == 200
    assert client.get("/api/stats", headers=_headers(signature="a")).status_code == 429
    assert client.get("/api/stats", headers=_headers(signature="b")).status_code == 200


def test_zero_rate_limit_rejects_everything(client_for) -> None:
    client = client_for(rate_limit=0)
    response = client.get("/api/stats", headers=_headers())
    assert response.status_code == 429
    assert response.json()["remaining"] == 0


def test_unexpected_failure_returns_500_without_refund(client_for) -> None:
    @asynccontextmanager
    async def broken_factory(_: Settings):
        raise RuntimeError("translator offline")
        yield  # pragma: no cover

    client = client_for(rate_limit=1)
    app.dependency_overrides[get_translate_client_factory] = lambda: broken_factory

    failed = client.get("/api/stats", headers=_headers())
    assert failed.status_code == 500
    assert failed.json() == {"error": "Internal server error: translator offline"}

    assert client.get("/api/stats", headers=_headers()).status_code == 429


def test_report_endpoint_renders_text(client_for) -> None:
    client = client_for(translation_enabled=False)
    response = client.get(
        "/api/stats/report?format=structured", headers=_headers(COUNTRY_KEY)
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "Access Type: country_avg" in response.text
    assert "1. United States: 320 users" in response.text

    natural = client.get("/api/stats/report", headers=_headers(COUNTRY_KEY))
    assert natural.text.startswith("📊 Analytics Report: COUNTRY AVG")
    assert "• Remaining Requests: 98" in natural.text


def test_report_endpoint_uses_json_errors(client_for) -> None:
    client = client_for()
    response = client.get("/api/stats/report", headers=_headers("garbage"))
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid API key"}


def test_requests_are_audited(client_for, tmp_path: Path) -> None:
    client = client_for()
    response = client.get(
        "/api/stats", headers={**_headers(), "X-Request-Id": "req-123"}
    )
    assert response.headers["X-Request-Id"] == "req-123"

    lines = (tmp_path / "audit.jsonl").read_text(encoding="utf-8").splitlines()
    entry = next(e for e in map(json.loads, lines) if e["request_id"] == "req-123")
    assert entry["path"] == "/api/stats"
    assert entry["status_code"] == 200
    assert entry["access_type"] == "monthly"
    assert entry["signature"] == "u1"
