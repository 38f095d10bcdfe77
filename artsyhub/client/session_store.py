"""Persisted login for the client: the session token plus the user record."""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredSession:
    token: str
    user: Dict[str, Any] = field(default_factory=dict)


class SessionStore:
    """JSON-file backed session; ``path=None`` keeps it in memory only."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path
        self._lock = threading.Lock()
        self._session: Optional[StoredSession] = None
        self._loaded = False

    def _read(self) -> Optional[StoredSession]:
        if not self.path or not os.path.exists(self.path):
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as fh:
                data = json.load(fh)
            return StoredSession(token=data['token'], user=data.get('user') or {})
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return None

    def load(self) -> Optional[StoredSession]:
        with self._lock:
            if not self._loaded:
                self._session = self._read()
                self._loaded = True
            return self._session

    def save(self, token: str, user: Optional[Dict[str, Any]] = None) -> StoredSession:
        session = StoredSession(token=token, user=dict(user or {}))
        with self._lock:
            self._session = session
            self._loaded = True
            if self.path:
                directory = os.path.dirname(self.path)
                if directory:
                    os.makedirs(directory, exist_ok=True)
                with open(self.path, 'w', encoding='utf-8') as fh:
                    json.dump({'token': session.token, 'user': session.user}, fh)
        return session

    def clear(self) -> None:
        with self._lock:
            self._session = None
            self._loaded = True
            if self.path and os.path.exists(self.path):
                try:
                    os.remove(self.path)
                except OSError as exc:
                    logger.warning("Could not remove session file %s: %s", self.path, exc)

    @property
    def token(self) -> Optional[str]:
        session = self.load()
        return session.token if session else None

    @property
    def is_logged_in(self) -> bool:
        return self.token is not None
