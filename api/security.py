"""
Internal request authentication and organization scope helpers.
"""

from __future__ import annotations

from dataclasses import dataclass
from hmac import compare_digest
from typing import Any

import jwt
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from config import HEALTH_PATH, settings


@dataclass(frozen=True)
class InternalContext:
    organization_id: str
    user_id: str
    username: str
    role: str
    is_superuser: bool


def _context_algorithms() -> list[str]:
    raw = settings.context_algorithms or "HS256"
    return [v.strip() for v in str(raw).split(",") if v.strip()] or ["HS256"]


def _parse_bearer(auth_header: str | None) -> str:
    if not auth_header:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing authorization header")
    parts = auth_header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authorization header")
    return parts[1].strip()


def _decode_context_token(token: str) -> dict[str, Any]:
    key = settings.context_verify_key
    if not key:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Missing context verify key")
    try:
        return jwt.decode(
            token,
            key,
            algorithms=_context_algorithms(),
            audience=settings.context_audience,
            issuer=settings.context_issuer,
            options={"require": ["exp", "iat", "iss", "aud"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Context token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid context token") from exc


def _build_context(payload: dict[str, Any]) -> InternalContext:
    organization_id = str(payload.get("organization_id", "")).strip()
    if not organization_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing organization context")
    return InternalContext(
        organization_id=organization_id,
        user_id=str(payload.get("user_id", "")),
        username=str(payload.get("username", "")),
        role=str(payload.get("role", "user")),
        is_superuser=bool(payload.get("is_superuser", False)),
    )


def authenticate_internal_request(request: Request) -> InternalContext:
    expected_service_token = settings.expected_service_token
    if not expected_service_token:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Missing expected service token")

    provided_service_token = request.headers.get("x-service-token", "")
    if not compare_digest(provided_service_token, expected_service_token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid service token")

    bearer = _parse_bearer(request.headers.get("authorization"))
    payload = _decode_context_token(bearer)
    return _build_context(payload)


def get_request_context(request: Request) -> InternalContext:
    ctx = getattr(request.state, "internal_context", None)
    if ctx is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing organization context")
    return ctx


def enforce_organization(ctx: InternalContext, organization_id: str) -> str:
    """Return ``organization_id`` if the caller may read it, else 403."""
    requested = str(organization_id or "").strip() or ctx.organization_id
    if requested != ctx.organization_id and not ctx.is_superuser:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Organization outside caller scope")
    return requested


def _requires_internal_auth(path: str) -> bool:
    return path.startswith("/api/v1") and path != HEALTH_PATH


class InternalAuthMiddleware:
    def __init__(self, app) -> None:
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        path = str(scope.get("path", ""))
        if not _requires_internal_auth(path):
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        try:
            ctx = authenticate_internal_request(request)
        except HTTPException as exc:
            response = JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
            await response(scope, receive, send)
            return

        scope.setdefault("state", {})
        scope["state"]["internal_context"] = ctx
        await self.app(scope, receive, send)
