"""Firebase ID-token authentication for the JSON API."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Optional

from firebase_admin import auth as firebase_auth
from flask import g, request

from credit800.api.errors import error_response
from credit800.core.firebase import init_firebase_admin

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        return (self.email or "").split("@")[0] or "Consumer"


def verify_id_token(token: str) -> dict[str, Any]:
    """Return the decoded claims of a Firebase ID token; raises on failure."""

    init_firebase_admin()
    return firebase_auth.verify_id_token(token)


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    token = header[7:].strip()
    return token or None


def current_user() -> Optional[AuthUser]:
    """Resolve the request's bearer token to an :class:`AuthUser`, or ``None``."""

    token = bearer_token()
    if token is None:
        return None
    try:
        claims = verify_id_token(token)
    except Exception as exc:
        logger.info("AUTH_TOKEN_REJECTED reason=%s", type(exc).__name__)
        return None
    uid = claims.get("uid") or claims.get("user_id") or claims.get("sub")
    if not uid:
        return None
    return AuthUser(uid=uid, email=claims.get("email"))


def require_user(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        user = current_user()
        if user is None:
            return error_response(401, "Unauthorized")
        g.user = user
        return fn(*args, **kwargs)

    return wrapper


def is_admin(user: Optional[AuthUser]) -> bool:
    admin_email = (os.getenv("ADMIN_EMAIL") or "").strip().lower()
    if not user or not user.email or not admin_email:
        return False
    return user.email.strip().lower() == admin_email
