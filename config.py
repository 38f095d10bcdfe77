#!/usr/bin/env python
# config.py
import os
from typing import List, Optional

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'artsyhub-dev-secret'

    # Database (ArtsyHub)
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'artsyhub', 'database', 'instance', 'artsyhub.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # User session tokens
    JWT_SECRET = os.environ.get('JWT_SECRET') or 'artsyhub-dev-jwt-secret'
    JWT_ALGORITHM = 'HS256'
    # Registration tokens live 1h, login tokens 2h
    JWT_REGISTER_TTL_SECONDS = _get_int('JWT_REGISTER_TTL_SECONDS', 3600)
    JWT_LOGIN_TTL_SECONDS = _get_int('JWT_LOGIN_TTL_SECONDS', 7200)
    JWT_COOKIE_NAME = 'jwt'
    COOKIE_SECURE = _get_bool('COOKIE_SECURE', False)

    # Artsy API
    ARTSY_CLIENT_ID = os.environ.get('ARTSY_CLIENT_ID')
    ARTSY_CLIENT_SECRET = os.environ.get('ARTSY_CLIENT_SECRET')
    ARTSY_API_BASE = os.getenv('ARTSY_API_BASE', 'https://api.artsy.net/api').rstrip('/')
    ARTSY_TOKEN_FILE = os.getenv('ARTSY_TOKEN_FILE', os.path.join(basedir, 'artsy_token.json'))
    # None keeps the HTTP library default (no timeout)
    ARTSY_TIMEOUT_SECONDS = _get_float('ARTSY_TIMEOUT_SECONDS', None)
    # Fetch the xapp token while the app boots instead of on the first request
    PREFETCH_ARTSY_TOKEN = _get_bool('PREFETCH_ARTSY_TOKEN', True)

    # Metadata caching (Artsy artist lookups)
    METADATA_CACHE_TTL_SECONDS = _get_int('METADATA_CACHE_TTL_SECONDS', 300)
    METADATA_CACHE_MAXSIZE = max(1, _get_int('METADATA_CACHE_MAXSIZE', 256))

    # HTTP surface
    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', 'http://localhost:3000')

    # Runtime behavior
    # Turn Flask debug on/off from env; default off to avoid noisy console
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
    PORT = _get_int('PORT', 3000)

    # Observability
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    OTEL_EXPORTER_OTLP_HEADERS = os.getenv('OTEL_EXPORTER_OTLP_HEADERS')
    OTEL_EXPORTER_OTLP_INSECURE = _get_bool('OTEL_EXPORTER_OTLP_INSECURE', True)
    OTEL_SERVICE_NAME = os.getenv('OTEL_SERVICE_NAME', 'artsyhub')
