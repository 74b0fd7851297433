"""
Bearer Session Authentication

Minimal session lookup for the cart endpoints. Sessions are issued by the
embedding application with ``create_web_session`` and presented as
``Authorization: Bearer <token>``.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from fastapi import Header, HTTPException
from pydantic import BaseModel

from core.errors import ERROR_INVALID_SESSION, ERROR_NO_AUTH_HEADER

SESSION_TTL = timedelta(days=7)

# In-memory session store for web access
_web_sessions: dict[str, dict] = {}


class CartUser(BaseModel):
    """Authenticated caller of the cart endpoints."""
    id: str


def create_web_session(user_id: str) -> str:
    """Create a new web session and return the token."""
    session_token = secrets.token_urlsafe(32)
    now = datetime.now(timezone.utc)
    _web_sessions[session_token] = {
        "user_id": str(user_id),
        "created_at": now.isoformat(),
        "expires_at": (now + SESSION_TTL).isoformat(),
    }
    return session_token


def revoke_web_session(token: str) -> None:
    _web_sessions.pop(token, None)


def verify_web_session_token(token: str) -> dict | None:
    """Verify a web session token and return session data."""
    session = _web_sessions.get(token)

    if not session:
        return None

    expires_at = datetime.fromisoformat(session["expires_at"])
    if datetime.now(timezone.utc) > expires_at:
        del _web_sessions[token]
        return None

    return session


async def verify_bearer_auth(
    authorization: str = Header(None, alias="Authorization"),
) -> CartUser:
    """
    Resolve the caller from ``Authorization: Bearer <session_token>``.

    Raises 401 when the header is missing, malformed, or names an unknown or
    expired session.
    """
    if not authorization:
        raise HTTPException(status_code=401, detail=ERROR_NO_AUTH_HEADER)

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail=ERROR_INVALID_SESSION)

    session = verify_web_session_token(parts[1])
    if not session:
        raise HTTPException(status_code=401, detail=ERROR_INVALID_SESSION)

    return CartUser(id=session["user_id"])
