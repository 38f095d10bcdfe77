#!/usr/bin/env python
"""
Centralized configuration schema for service construction.

Merges defaults from config.Config with runtime overrides (usually the
Flask app config) and validates the values the catalog and identity
services depend on.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import Config


class AppSettings(BaseModel):
    """Application-wide settings for ArtsyHub services."""

    model_config = ConfigDict(extra="ignore")

    # Artsy credentials
    artsy_client_id: Optional[str] = None
    artsy_client_secret: Optional[str] = None
    artsy_api_base: str = "https://api.artsy.net/api"
    artsy_token_file: str
    artsy_timeout_seconds: Optional[float] = None

    # Metadata cache
    metadata_cache_ttl_seconds: int = Field(default=300)
    metadata_cache_maxsize: int = Field(default=256)

    # Session tokens
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_register_ttl_seconds: int = 3600
    jwt_login_ttl_seconds: int = 7200

    @field_validator("artsy_api_base")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("artsy_client_id", "artsy_client_secret", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("artsy_timeout_seconds", mode="before")
    @classmethod
    def _coerce_timeout(cls, value: object) -> Optional[float]:
        if value in (None, ""):
            return None
        try:
            timeout = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        return timeout if timeout > 0 else None

    @field_validator("metadata_cache_ttl_seconds", "metadata_cache_maxsize", mode="before")
    @classmethod
    def _coerce_positive(cls, value: object) -> int:
        try:
            number = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 1
        return max(1, number)

    @property
    def artsy_credentials_configured(self) -> bool:
        return bool(self.artsy_client_id and self.artsy_client_secret)


def load_app_settings(overrides: Optional[Mapping[str, Any]] = None) -> AppSettings:
    """Load settings merging config defaults with optional runtime overrides.

    ``overrides`` may be a Flask config mapping; upper-case Config keys are
    accepted and mapped to their settings field.
    """
    data: Dict[str, Any] = {
        "artsy_client_id": Config.ARTSY_CLIENT_ID,
        "artsy_client_secret": Config.ARTSY_CLIENT_SECRET,
        "artsy_api_base": Config.ARTSY_API_BASE,
        "artsy_token_file": Config.ARTSY_TOKEN_FILE,
        "artsy_timeout_seconds": Config.ARTSY_TIMEOUT_SECONDS,
        "metadata_cache_ttl_seconds": Config.METADATA_CACHE_TTL_SECONDS,
        "metadata_cache_maxsize": Config.METADATA_CACHE_MAXSIZE,
        "jwt_secret": Config.JWT_SECRET,
        "jwt_algorithm": Config.JWT_ALGORITHM,
        "jwt_register_ttl_seconds": Config.JWT_REGISTER_TTL_SECONDS,
        "jwt_login_ttl_seconds": Config.JWT_LOGIN_TTL_SECONDS,
    }
    if overrides:
        for key, value in overrides.items():
            field = key.lower()
            if field in AppSettings.model_fields:
                data[field] = value
    return AppSettings.model_validate(data)


__all__ = [
    "AppSettings",
    "load_app_settings",
]
