"""Shared test stubs for the Artsy API and the HTTP transport."""

import json as _json
from collections import deque
from typing import Any, Dict, Iterable, List, Optional

import requests

from artsyhub.domain.catalog import ArtistFacts, Credential
from artsyhub.errors import UpstreamError


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = float(now)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingFetcher:
    """Token fetcher handing out numbered credentials valid for ``ttl`` seconds."""

    def __init__(self, clock: FakeClock, ttl: int = 3600, fail: bool = False):
        self.clock = clock
        self.ttl = ttl
        self.fail = fail
        self.calls = 0

    def __call__(self) -> Credential:
        self.calls += 1
        if self.fail:
            raise UpstreamError("Artsy API authentication failed")
        return Credential(token=f"token-{self.calls}", expires_at=int(self.clock() + self.ttl))


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._body = body
        if text is None:
            text = _json.dumps(body) if body is not None else ""
        self.text = text
        self.content = text.encode("utf-8")
        self.reason = "OK" if status_code < 400 else "Error"

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class FakeSession:
    """Stand-in for ``requests.Session`` replaying queued responses.

    Each entry is a ``FakeResponse`` or an exception instance to raise.
    Every call is recorded in ``calls`` as a dict.
    """

    def __init__(self, responses: Iterable[Any] = ()):
        self.responses = deque(responses)
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected {method} {url}")
        result = self.responses.popleft()
        if isinstance(result, BaseException):
            raise result
        return result

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)


class StubArtsyClient:
    """In-memory Artsy client with canned catalog data."""

    def __init__(self, facts: Optional[Dict[str, ArtistFacts]] = None,
                 lookup_error: Optional[Exception] = None):
        self.facts = dict(facts or {})
        self.lookup_error = lookup_error
        self.lookups: List[str] = []
        self.failure: Optional[Exception] = None
        self.artists: Dict[str, Dict[str, Any]] = {}

    def _maybe_fail(self):
        if self.failure is not None:
            raise self.failure

    def lookup_artist(self, artist_id: str) -> Optional[ArtistFacts]:
        self.lookups.append(artist_id)
        if self.lookup_error is not None:
            raise self.lookup_error
        return self.facts.get(artist_id)

    def search_artists(self, query: str):
        self._maybe_fail()
        return [
            {"id": artist_id, "name": artist["name"], "image": artist.get("image")}
            for artist_id, artist in self.artists.items()
            if query.lower() in artist["name"].lower()
        ]

    def get_artist(self, artist_id: str):
        self._maybe_fail()
        from artsyhub.errors import UpstreamNotFound

        if artist_id not in self.artists:
            raise UpstreamNotFound()
        return {"id": artist_id, **self.artists[artist_id]}

    def list_artworks(self, artist_id: str):
        self._maybe_fail()
        return [{"id": f"{artist_id}-work", "title": "Untitled", "date": "Unknown", "image": "/default-artwork.png"}]

    def list_categories(self, artwork_id: str):
        self._maybe_fail()
        return [{"id": "gene-1", "name": "Portrait", "image": None, "description": "Faces"}]

    def list_similar(self, artist_id: str):
        self._maybe_fail()
        return [{"id": "similar-1", "name": "Neighbour", "image": "/default-artist.png"}]


__all__ = [
    "CountingFetcher",
    "FakeClock",
    "FakeResponse",
    "FakeSession",
    "StubArtsyClient",
]
