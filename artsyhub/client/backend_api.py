#!/usr/bin/env python
"""
HTTP client for the ArtsyHub backend as used by the mobile app.

Requests carry ``Authorization: Bearer <token>`` when a session is stored.
A 401 answer means the session is no longer valid: the stored session is
cleared without further notice and :class:`SessionExpired` is raised so
the caller can fall back to its logged-out state.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .session_store import SessionStore

logger = logging.getLogger(__name__)


class BackendError(Exception):
    def __init__(self, status_code: Optional[int], message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class SessionExpired(BackendError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(401, message)


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ('error', 'message'):
            if body.get(key):
                return str(body[key])
        for value in body.values():
            return str(value)
    return f"HTTP {response.status_code}"


class BackendApi:
    def __init__(self, base_url: str, session_store: Optional[SessionStore] = None,
                 http: Optional[requests.Session] = None,
                 timeout: Optional[float] = None) -> None:
        self.base_url = base_url.rstrip('/')
        self.session_store = session_store or SessionStore()
        self.http = http or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        headers = {'Accept': 'application/json'}
        token = self.session_store.token
        if token:
            headers['Authorization'] = f"Bearer {token}"
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.http.request(method, url, json=json, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise BackendError(None, str(exc)) from exc

        if response.status_code == 401:
            logger.info("Backend rejected the session on %s %s; clearing it.", method, path)
            self.session_store.clear()
            raise SessionExpired(_error_message(response))
        if response.status_code >= 400:
            raise BackendError(response.status_code, _error_message(response))
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError(response.status_code, "Invalid JSON from backend") from exc

    # Session
    def login(self, email: str, password: str) -> Dict[str, Any]:
        body = self._request('POST', 'auth/login', json={'email': email, 'password': password})
        self.session_store.save(body['token'], body.get('user'))
        return body['user']

    def register(self, fullname: str, email: str, password: str) -> Dict[str, Any]:
        body = self._request('POST', 'auth/register',
                             json={'fullname': fullname, 'email': email, 'password': password})
        self.session_store.save(body['token'], body.get('user'))
        return body['user']

    def logout(self) -> None:
        try:
            self._request('POST', 'auth/logout')
        finally:
            self.session_store.clear()

    def delete_account(self) -> None:
        self._request('POST', 'auth/delete')
        self.session_store.clear()

    def me(self) -> Dict[str, Any]:
        return self._request('GET', 'me')

    # Catalog
    def search_artists(self, query: str) -> List[Dict[str, Any]]:
        return self._request('GET', f"search/{quote(query, safe='')}")['artists']

    def get_artist(self, artist_id: str) -> Dict[str, Any]:
        return self._request('GET', f"artist/{quote(artist_id, safe='')}")

    def list_artworks(self, artist_id: str) -> List[Dict[str, Any]]:
        return self._request('GET', f"artist/{quote(artist_id, safe='')}/artworks")['artworks']

    def list_categories(self, artwork_id: str) -> List[Dict[str, Any]]:
        return self._request('GET', f"artwork/{quote(artwork_id, safe='')}/categories")['categories']

    def list_similar(self, artist_id: str) -> List[Dict[str, Any]]:
        return self._request('GET', f"artist/{quote(artist_id, safe='')}/similar")['similar']

    # Favorites
    def list_favorites(self) -> List[Dict[str, Any]]:
        return self._request('GET', 'favorites')['favorites']

    def add_favorite(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = self._request('POST', 'favorites', json=payload)
        if not isinstance(body, dict) or 'favorite' not in body:
            raise BackendError(None, "Backend returned no favorite")
        return body['favorite']

    def remove_favorite(self, artist_id: str) -> None:
        self._request('DELETE', f"favorites/{quote(artist_id, safe='')}")


__all__ = ["BackendApi", "BackendError", "SessionExpired"]
