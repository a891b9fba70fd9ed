"""Bearer-token authentication for the service API."""

from __future__ import annotations

import hashlib
from typing import Optional, Set

from fastapi import Header, Request

from src.config.loader import load_session_tokens
from src.extraction.exceptions import UnauthenticatedError
from src.web.dependencies import get_settings


def user_id_for_token(token: str) -> str:
    """Stable opaque user id derived from a session token."""
    return "user-" + hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]


def _accepted_tokens(request: Request) -> Set[str]:
    tokens = getattr(request.app.state, "session_tokens", None)
    if tokens is None:
        tokens = load_session_tokens(get_settings(request))
        request.app.state.session_tokens = tokens
    return tokens


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()


async def require_user(request: Request, authorization: Optional[str] = Header(default=None)) -> str:
    """Resolve the caller's user id or raise UnauthenticatedError (401)."""
    if not authorization:
        raise UnauthenticatedError("Unauthorized - no token provided")
    token = _bearer(authorization)
    if token is None or token not in _accepted_tokens(request):
        raise UnauthenticatedError("Unauthorized - invalid token")
    return user_id_for_token(token)
