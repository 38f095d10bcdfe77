"""Session token issuance, verification and extraction."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import jwt

from artsyhub.errors import Unauthenticated

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Identity:
    user_id: int
    email: str


class SessionTokens:
    """Signs and verifies HS256 session tokens carrying ``{id, email, exp}``."""

    def __init__(self, secret: str, algorithm: str = "HS256",
                 clock: Callable[[], float] = time.time) -> None:
        if not secret:
            raise ValueError("A JWT secret is required")
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock

    def issue(self, user_id: int, email: str, ttl_seconds: int) -> str:
        now = int(self._clock())
        claims = {
            "id": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + int(ttl_seconds),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> Identity:
        if not token:
            raise Unauthenticated()
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.PyJWTError as exc:
            raise Unauthenticated() from exc
        # Expiry is checked against the injected clock so tests control time
        try:
            expires_at = int(claims["exp"])
            user_id = int(claims["id"])
        except (KeyError, TypeError, ValueError) as exc:
            raise Unauthenticated() from exc
        if expires_at <= self._clock():
            raise Unauthenticated()
        return Identity(user_id=user_id, email=str(claims.get("email") or ""))


def extract_token(request: Any, cookie_name: str = "jwt") -> Optional[str]:
    """Return the session token from the cookie, else from a Bearer header.

    ``request`` is anything exposing ``cookies`` and ``headers`` mappings.
    """
    cookies: Mapping[str, str] = getattr(request, "cookies", None) or {}
    token = cookies.get(cookie_name)
    if token:
        return token
    headers: Mapping[str, str] = getattr(request, "headers", None) or {}
    authorization = headers.get("Authorization") or ""
    if authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip() or None
    return None


__all__ = ["Identity", "SessionTokens", "extract_token"]
