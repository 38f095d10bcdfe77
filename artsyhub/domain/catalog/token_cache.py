#!/usr/bin/env python
"""
Artsy xapp token cache.

One credential per backend process: loaded from disk at startup when still
valid, refetched synchronously once expired, and mirrored back to disk on
every refresh so restarts reuse it.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol

import requests

from artsyhub.errors import UpstreamError
from artsyhub.observability.metrics import record_token_refresh

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    token: str
    expires_at: int  # epoch seconds

    def is_valid(self, now: float) -> bool:
        return bool(self.token) and now < self.expires_at


class TokenStore(Protocol):
    def load(self) -> Optional[Credential]: ...

    def save(self, credential: Credential) -> None: ...


class TokenFetcher(Protocol):
    def __call__(self) -> Credential: ...


class JsonFileTokenStore:
    """Persist the credential as ``{"token": ..., "expiration": ...}``."""

    def __init__(self, path: str) -> None:
        self.path = path

    def load(self) -> Optional[Credential]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return Credential(token=str(data['token']), expires_at=int(data['expiration']))
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable Artsy token file %s: %s", self.path, exc)
            return None

    def save(self, credential: Credential) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({'token': credential.token, 'expiration': credential.expires_at}, f, indent=2)


class MemoryTokenStore:
    """Store without a disk; used when no token file is configured."""

    def __init__(self, credential: Optional[Credential] = None) -> None:
        self.credential = credential
        self.saves = 0

    def load(self) -> Optional[Credential]:
        return self.credential

    def save(self, credential: Credential) -> None:
        self.credential = credential
        self.saves += 1


def _parse_expiry(raw: object) -> int:
    if isinstance(raw, (int, float)):
        return int(raw)
    text = str(raw or '').strip()
    if not text:
        raise ValueError("missing expires_at")
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return int(datetime.fromisoformat(text).timestamp())


class XappTokenFetcher:
    """Exchange the client id/secret for a fresh xapp token."""

    def __init__(self, client_id: Optional[str], client_secret: Optional[str], base_url: str,
                 session: Optional[requests.Session] = None, timeout: Optional[float] = None) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.url = f"{base_url.rstrip('/')}/tokens/xapp_token"
        self.session = session or requests.Session()
        self.timeout = timeout

    def __call__(self) -> Credential:
        if not self.client_id or not self.client_secret:
            logger.error("Artsy client id/secret are not configured; cannot fetch token.")
            raise UpstreamError("Artsy API authentication failed")
        try:
            response = self.session.post(
                self.url,
                json={'client_id': self.client_id, 'client_secret': self.client_secret},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
            return Credential(token=body['token'], expires_at=_parse_expiry(body.get('expires_at')))
        except (requests.RequestException, ValueError, KeyError, TypeError) as exc:
            logger.error("Failed to fetch Artsy API token: %s", exc)
            status = getattr(getattr(exc, 'response', None), 'status_code', None)
            raise UpstreamError("Artsy API authentication failed", upstream_status=status) from exc


class ArtsyTokenCache:
    """Serve one shared Artsy credential, refreshing it when it expires."""

    def __init__(self, fetcher: TokenFetcher, store: Optional[TokenStore] = None,
                 clock: Callable[[], float] = time.time) -> None:
        self._fetcher = fetcher
        self._store = store or MemoryTokenStore()
        self._clock = clock
        self._lock = threading.RLock()
        self._credential: Optional[Credential] = None
        self.refresh_count = 0
        self.load()

    def load(self) -> bool:
        """Adopt the persisted credential when it has not expired yet."""
        saved = self._store.load()
        if saved is not None and saved.is_valid(self._clock()):
            with self._lock:
                self._credential = saved
            logger.info("Loaded saved Artsy API token from file.")
            return True
        return False

    def get_token(self) -> Credential:
        with self._lock:
            current = self._credential
            if current is not None and current.is_valid(self._clock()):
                return current
            try:
                fresh = self._fetcher()
            except UpstreamError:
                record_token_refresh("failure")
                raise
            self._credential = fresh
            self.refresh_count += 1
            record_token_refresh("success")
            logger.info("Fetched new Artsy API token valid until %s", fresh.expires_at)
            # Saved under the lock so the file never falls behind memory
            try:
                self._store.save(fresh)
            except OSError as exc:
                logger.warning("Could not persist Artsy API token: %s", exc)
            return fresh


__all__ = [
    "Credential",
    "TokenStore",
    "JsonFileTokenStore",
    "MemoryTokenStore",
    "XappTokenFetcher",
    "ArtsyTokenCache",
]
