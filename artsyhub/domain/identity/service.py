#!/usr/bin/env python
"""
Account registration, login and deletion.

Passwords are stored as werkzeug salted hashes. Successful register/login
calls return a signed session token alongside the user record.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError

from artsyhub.database.db_manager import User, db
from artsyhub.domain.favorites.store import FavoriteStore
from artsyhub.errors import Conflict, InvalidCredentials, ValidationError
from artsyhub.observability.metrics import record_auth_event

from .tokens import Identity, SessionTokens

logger = logging.getLogger(__name__)

GRAVATAR_URL = "https://www.gravatar.com/avatar/{digest}?d=identicon"


def gravatar_url(email: str) -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return GRAVATAR_URL.format(digest=digest)


@dataclass
class AuthResult:
    user: User
    token: str


class IdentityService:
    def __init__(self, tokens: SessionTokens, favorites: FavoriteStore,
                 register_ttl_seconds: int = 3600, login_ttl_seconds: int = 7200) -> None:
        self.tokens = tokens
        self._favorites = favorites
        self._register_ttl = register_ttl_seconds
        self._login_ttl = login_ttl_seconds

    def register(self, fullname: Optional[str], email: Optional[str], password: Optional[str]) -> AuthResult:
        if not fullname or not email or not password:
            raise ValidationError("All fields are required")
        email = email.strip()
        if User.query.filter_by(email=email).first() is not None:
            record_auth_event('register_conflict')
            raise Conflict("Email already exists", field="email", status_code=400)

        user = User(fullname=fullname.strip(), email=email, profile_image_url=gravatar_url(email))
        user.set_password(password)
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            record_auth_event('register_conflict')
            raise Conflict("Email already exists", field="email", status_code=400)

        record_auth_event('register')
        logger.info("Registered user %s (%s).", user.id, user.email)
        token = self.tokens.issue(user.id, user.email, self._register_ttl)
        return AuthResult(user=user, token=token)

    def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        user = User.query.filter_by(email=(email or "").strip()).first() if email else None
        # Unknown email and wrong password are indistinguishable to the caller
        if user is None or not password or not user.check_password(password):
            record_auth_event('login_failed')
            logger.info("Failed login attempt for %s.", email)
            raise InvalidCredentials()

        record_auth_event('login')
        logger.info("User %s logged in.", user.id)
        token = self.tokens.issue(user.id, user.email, self._login_ttl)
        return AuthResult(user=user, token=token)

    def verify(self, token: Optional[str]) -> Identity:
        return self.tokens.verify(token)

    def load_user(self, identity: Identity) -> Optional[User]:
        return db.session.get(User, identity.user_id)

    def delete_account(self, identity: Identity) -> bool:
        removed = self._favorites.delete_all_for_user(identity.user_id)
        user = self.load_user(identity)
        if user is None:
            logger.info("Account %s was already gone; removed %s favorites.", identity.user_id, removed)
            return False
        db.session.delete(user)
        db.session.commit()
        record_auth_event('delete')
        logger.info("Deleted account %s with %s favorites.", identity.user_id, removed)
        return True


__all__ = ["AuthResult", "IdentityService", "gravatar_url"]
