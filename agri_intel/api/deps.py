"""
Request dependencies: shared context, orchestrator and admin key check.
"""
import secrets
from typing import Optional

from fastapi import HTTPException, Request, Security, status
from fastapi.security.api_key import APIKeyHeader

from ..agent.orchestrator import Orchestrator
from ..infra.context import AppContext
from ..observability.logging_utils import log_error

ADMIN_KEY_NAME = "X-Admin-Key"
admin_key_header = APIKeyHeader(name=ADMIN_KEY_NAME, auto_error=False)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_orchestrator(request: Request) -> Orchestrator:
    return request.app.state.orchestrator


def require_admin(
    request: Request, api_key: Optional[str] = Security(admin_key_header)
) -> str:
    expected = get_context(request).config.admin_api_key
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin API key not configured",
        )
    if not api_key or not api_key.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing admin key",
            headers={"WWW-Authenticate": "API key"},
        )
    if not secrets.compare_digest(api_key.strip(), expected):
        log_error("admin_key_rejected", path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing admin key",
            headers={"WWW-Authenticate": "API key"},
        )
    return api_key
