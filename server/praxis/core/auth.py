from __future__ import annotations
import logging
from typing import Any, Dict, Optional

import jwt  # PyJWT
from fastapi import Request

logger = logging.getLogger(__name__)


class AuthUser(Dict[str, Any]):
    """Minimal user payload extracted from a NextAuth JWT."""


def verify_nextauth_jwt(request: Request, secret: Optional[str]) -> Optional[AuthUser]:
    """
    Best-effort verification of a NextAuth JWT from Authorization: Bearer <token>.
    - Uses the NextAuth secret (HS256) to verify the signature.
    - Returns the decoded payload on success, or None if not present/invalid.
    """
    if not secret:
        return None
    auth = request.headers.get("authorization")
    if not auth or not auth.lower().startswith("bearer "):
        return None

    token = auth.split(" ", 1)[1].strip()
    try:
        payload = jwt.decode(token, secret, algorithms=["HS256"])
    except jwt.InvalidTokenError as e:
        logger.info("Rejected bearer token: %s", e)
        return None
    return AuthUser(payload) if isinstance(payload, dict) else None


GUEST_PREFIX = "guest:"


def get_authenticated_user_id(request: Request, secret: Optional[str]) -> Optional[str]:
    """User id from a verified NextAuth JWT (``sub``, else ``email``), or None."""
    user = verify_nextauth_jwt(request, secret)
    if user:
        uid = user.get("sub") or user.get("email")
        if uid:
            return str(uid)
    return None


def get_effective_owner(request: Request, secret: Optional[str]) -> Optional[str]:
    """Resolve the user id for this request.
    Priority:
    1) Authenticated user (NextAuth JWT) -> user.sub or user.email
    2) Guest ID header 'x-guest-id', namespaced as 'guest:<id>'. The header is
       unauthenticated, so it can never name a real user's stored keys.
    3) None
    """
    uid = get_authenticated_user_id(request, secret)
    if uid:
        return uid
    guest_id = request.headers.get("x-guest-id")
    if guest_id:
        return f"{GUEST_PREFIX}{guest_id}"
    return None
