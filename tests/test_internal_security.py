"""
Test internal security logic: service token and JWT context verification in the middleware, and organization scope enforcement.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import asyncio
import json

import jwt
import pytest
from fastapi import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from api.security import InternalAuthMiddleware, InternalContext, enforce_organization, get_request_context
from config import settings


@pytest.fixture(autouse=True)
def security_defaults(monkeypatch):
    monkeypatch.setattr(settings, "expected_service_token", "internal-service-token")
    monkeypatch.setattr(settings, "context_verify_key", "very-secret-signing-key")
    monkeypatch.setattr(settings, "context_issuer", "greenratchet-web")
    monkeypatch.setattr(settings, "context_audience", "greenratchet-projections")
    monkeypatch.setattr(settings, "context_algorithms", "HS256")


def _headers(payload):
    token = jwt.encode(payload, settings.context_verify_key, algorithm="HS256")
    return {
        "x-service-token": settings.expected_service_token,
        "authorization": f"Bearer {token}",
    }


def _claims(**extra):
    payload = {
        "iss": settings.context_issuer,
        "aud": settings.context_audience,
        "iat": 1_700_000_000,
        "exp": 4_700_000_000,
        "organization_id": "org-from-context",
        "user_id": "u1",
        "username": "alice",
    }
    payload.update(extra)
    return payload


async def _run_request(path: str, headers: dict[str, str]):
    async def app(scope, receive, send):
        ctx = get_request_context(Request(scope, receive=receive))
        response = JSONResponse({"organization_id": ctx.organization_id})
        await response(scope, receive, send)

    middleware = InternalAuthMiddleware(app)

    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("ascii"),
        "query_string": b"",
        "headers": [(k.encode("latin1"), v.encode("latin1")) for k, v in headers.items()],
        "client": ("127.0.0.1", 12345),
        "server": ("testserver", 80),
    }

    messages: list[dict] = []

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message):
        messages.append(message)

    await middleware(scope, receive, send)

    status = next(m["status"] for m in messages if m["type"] == "http.response.start")
    body = b"".join(m.get("body", b"") for m in messages if m["type"] == "http.response.body")
    data = json.loads(body.decode("utf-8")) if body else {}
    return status, data


def test_missing_service_token_rejected():
    status, _ = asyncio.run(_run_request("/api/v1/timeline", headers={}))
    assert status == 401


def test_invalid_context_token_rejected():
    status, _ = asyncio.run(
        _run_request(
            "/api/v1/timeline",
            headers={"x-service-token": settings.expected_service_token, "authorization": "Bearer invalid"},
        )
    )
    assert status == 401


def test_expired_context_token_rejected():
    status, payload = asyncio.run(_run_request("/api/v1/timeline", headers=_headers(_claims(exp=1_700_000_100))))
    assert status == 401
    assert payload["detail"] == "Context token expired"


def test_token_without_organization_rejected():
    status, payload = asyncio.run(_run_request("/api/v1/timeline", headers=_headers(_claims(organization_id=""))))
    assert status == 401
    assert payload["detail"] == "Missing organization context"


def test_valid_context_is_attached_to_request():
    status, payload = asyncio.run(_run_request("/api/v1/timeline", headers=_headers(_claims())))
    assert status == 200
    assert payload["organization_id"] == "org-from-context"


def test_enforce_organization_scope():
    ctx = InternalContext(organization_id="org-1", user_id="u1", username="alice", role="user", is_superuser=False)
    assert enforce_organization(ctx, "org-1") == "org-1"
    assert enforce_organization(ctx, "") == "org-1"
    with pytest.raises(HTTPException) as exc:
        enforce_organization(ctx, "org-2")
    assert exc.value.status_code == 403
