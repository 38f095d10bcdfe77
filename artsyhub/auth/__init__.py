#!/usr/bin/env python
"""Authentication utilities and Flask-Login integration."""

from __future__ import annotations

import logging

from flask import current_app, g, jsonify
from flask_login import LoginManager

from artsyhub.domain.identity import extract_token
from artsyhub.errors import Unauthenticated

logger = logging.getLogger(__name__)

login_manager = LoginManager()
login_manager.login_message = None


def get_identity_service():
    return current_app.extensions['identity_service']


def init_auth(app):
    """Attach Flask-Login to the app, resolving users from session tokens."""
    from artsyhub.database.db_manager import User, db

    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id: str) -> User | None:
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    @login_manager.request_loader
    def load_user_from_token(request) -> User | None:
        token = extract_token(request, cookie_name=current_app.config.get('JWT_COOKIE_NAME', 'jwt'))
        if not token:
            return None
        identity_service = get_identity_service()
        try:
            identity = identity_service.verify(token)
        except Unauthenticated:
            logger.info("Rejected session token on %s", request.path)
            return None
        user = identity_service.load_user(identity)
        if user is None:
            # Token outlived its account
            logger.info("Session token references missing user %s", identity.user_id)
            return None
        g.identity = identity
        return user

    @login_manager.unauthorized_handler
    def _unauthorized():
        return jsonify({"error": "Unauthorized"}), 401

    return login_manager


__all__ = ["login_manager", "init_auth", "get_identity_service"]
