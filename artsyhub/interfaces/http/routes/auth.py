#!/usr/bin/env python
"""Authentication API endpoints for registration, login and account removal."""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request
from flask_login import current_user, login_required

from artsyhub.auth import get_identity_service
from artsyhub.domain.identity import Identity


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def _set_session_cookie(response, token: str, max_age: int):
    response.set_cookie(
        current_app.config.get("JWT_COOKIE_NAME", "jwt"),
        token,
        max_age=max_age,
        httponly=True,
        secure=bool(current_app.config.get("COOKIE_SECURE")),
        samesite="Lax",
    )
    return response


def _clear_session_cookie(response):
    response.delete_cookie(current_app.config.get("JWT_COOKIE_NAME", "jwt"))
    return response


def _current_identity() -> Identity:
    identity = getattr(g, "identity", None)
    if identity is None:
        identity = Identity(user_id=current_user.id, email=current_user.email)
    return identity


@auth_bp.route("/auth/register", methods=["POST"])
def register_user():
    data = request.get_json(silent=True) or {}
    result = get_identity_service().register(
        data.get("fullname"), data.get("email"), data.get("password")
    )
    response = jsonify(
        {
            "message": "User registered successfully",
            "user": result.user.to_dict(),
            "token": result.token,
        }
    )
    return _set_session_cookie(response, result.token, current_app.config["JWT_REGISTER_TTL_SECONDS"]), 200


@auth_bp.route("/auth/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    result = get_identity_service().login(data.get("email"), data.get("password"))
    response = jsonify({"user": result.user.to_dict(), "token": result.token})
    return _set_session_cookie(response, result.token, current_app.config["JWT_LOGIN_TTL_SECONDS"]), 200


@auth_bp.route("/auth/logout", methods=["POST"])
def logout():
    response = jsonify({"message": "Logout successful"})
    return _clear_session_cookie(response), 200


@auth_bp.route("/auth/delete", methods=["POST"])
@login_required
def delete_account():
    get_identity_service().delete_account(_current_identity())
    response = jsonify({"message": "Account deleted successfully"})
    return _clear_session_cookie(response), 200


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    return jsonify(current_user.to_dict()), 200


__all__ = ["auth_bp"]
