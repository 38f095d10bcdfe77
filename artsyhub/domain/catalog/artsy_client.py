# artsyhub/domain/catalog/artsy_client.py
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import requests

from artsyhub.errors import UpstreamError, UpstreamNotFound
from artsyhub.observability.metrics import record_upstream_call
from artsyhub.utils.cache import MISSING, TTLCache

from .token_cache import Credential

logger = logging.getLogger(__name__)

ARTIST_PLACEHOLDER_IMAGE = "/images/artsy_logo.svg"
SIMILAR_PLACEHOLDER_IMAGE = "/default-artist.png"
ARTWORK_PLACEHOLDER_IMAGE = "/default-artwork.png"
PLACEHOLDER_IMAGES = frozenset({ARTIST_PLACEHOLDER_IMAGE, SIMILAR_PLACEHOLDER_IMAGE})

_MD_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")


def strip_markdown_links(text: str) -> str:
    """Replace Markdown links ``[Text](url)`` with their text."""
    return _MD_LINK_RE.sub(r"\1", text or "")


def _thumbnail(payload: Dict[str, Any]) -> Optional[str]:
    return ((payload.get('_links') or {}).get('thumbnail') or {}).get('href')


def _self_id(payload: Dict[str, Any]) -> Optional[str]:
    href = ((payload.get('_links') or {}).get('self') or {}).get('href') or ''
    segments = [segment for segment in href.split('/') if segment]
    return segments[-1] if segments else None


def _embedded(payload: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    return list((payload.get('_embedded') or {}).get(key) or [])


@dataclass(frozen=True)
class ArtistFacts:
    """Artist fields used to enrich a favorite; empty values are None."""

    nationality: Optional[str] = None
    birthday: Optional[str] = None
    deathday: Optional[str] = None
    image_url: Optional[str] = None


class ArtsyClient:
    """Authenticated Artsy API calls translated into ArtsyHub's JSON shapes."""

    def __init__(self, token_provider: Callable[[], Credential], base_url: str,
                 session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None,
                 cache: Optional[TTLCache] = None) -> None:
        self._token_provider = token_provider
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        self._cache = cache or TTLCache(maxsize=256, ttl=300)

    def _get(self, operation: str, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        credential = self._token_provider()
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.get(
                url,
                headers={'X-XAPP-Token': credential.token},
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            record_upstream_call(operation, 'error')
            logger.error("Artsy %s request failed: %s", operation, exc)
            raise UpstreamError(f"Artsy {operation} request failed") from exc

        if response.status_code == 404:
            record_upstream_call(operation, 'not_found')
            raise UpstreamNotFound(f"Artsy resource not found for {operation}")
        if response.status_code >= 400:
            record_upstream_call(operation, 'error')
            logger.error("Artsy %s returned HTTP %s: %s", operation, response.status_code, response.text[:500])
            raise UpstreamError(f"Artsy {operation} request failed", upstream_status=response.status_code)
        try:
            body = response.json()
        except ValueError as exc:
            record_upstream_call(operation, 'error')
            raise UpstreamError(f"Artsy {operation} returned invalid JSON") from exc
        record_upstream_call(operation, 'ok')
        return body if isinstance(body, dict) else {}

    def _raw_artist(self, artist_id: str) -> Dict[str, Any]:
        cache_key = ('artist', artist_id)
        cached = self._cache.get(cache_key, MISSING)
        if cached is not MISSING:
            return cached
        artist = self._get('artist', f'artists/{artist_id}')
        self._cache.set(cache_key, artist)
        return artist

    def search_artists(self, query: str) -> List[Dict[str, Any]]:
        body = self._get('search', 'search', params={'q': query, 'size': 10, 'type': 'artist'})
        return [
            {
                'id': _self_id(result),
                'name': result.get('title'),
                'image': _thumbnail(result),
            }
            for result in _embedded(body, 'results')
        ]

    def get_artist(self, artist_id: str) -> Dict[str, Any]:
        artist = self._raw_artist(artist_id)
        return {
            'id': artist.get('id') or artist_id,
            'name': artist.get('name') or "Unknown Artist",
            'birthday': artist.get('birthday') or "",
            'deathday': artist.get('deathday') or "",
            'nationality': artist.get('nationality') or "Unknown",
            'biography': artist.get('biography') or "",
            'image': _thumbnail(artist) or ARTIST_PLACEHOLDER_IMAGE,
        }

    def list_artworks(self, artist_id: str) -> List[Dict[str, Any]]:
        body = self._get('artworks', 'artworks', params={'artist_id': artist_id, 'size': 10})
        return [
            {
                'id': artwork.get('id'),
                'title': artwork.get('title') or "Untitled",
                'date': artwork.get('date') or "Unknown",
                'image': _thumbnail(artwork) or ARTWORK_PLACEHOLDER_IMAGE,
            }
            for artwork in _embedded(body, 'artworks')
        ]

    def list_categories(self, artwork_id: str) -> List[Dict[str, Any]]:
        body = self._get('categories', 'genes', params={'artwork_id': artwork_id})
        return [
            {
                'id': gene.get('id'),
                'name': gene.get('name') or "Unknown",
                'image': _thumbnail(gene),
                'description': strip_markdown_links(gene.get('description') or ''),
            }
            for gene in _embedded(body, 'genes')
        ]

    def list_similar(self, artist_id: str) -> List[Dict[str, Any]]:
        body = self._get('similar', 'artists', params={'similar_to_artist_id': artist_id})
        return [
            {
                'id': artist.get('id'),
                'name': artist.get('name'),
                'image': _thumbnail(artist) or SIMILAR_PLACEHOLDER_IMAGE,
            }
            for artist in _embedded(body, 'artists')
        ]

    def lookup_artist(self, artist_id: str) -> Optional[ArtistFacts]:
        """Fetch enrichment facts; ``None`` when Artsy has no such artist."""
        if not artist_id:
            return None
        try:
            artist = self._raw_artist(artist_id)
        except UpstreamNotFound:
            logger.info("Artsy API has no artist with id %s", artist_id)
            return None
        return ArtistFacts(
            nationality=artist.get('nationality') or None,
            birthday=artist.get('birthday') or None,
            deathday=artist.get('deathday') or None,
            image_url=_thumbnail(artist) or None,
        )


__all__ = [
    "ArtsyClient",
    "ArtistFacts",
    "strip_markdown_links",
    "PLACEHOLDER_IMAGES",
    "ARTIST_PLACEHOLDER_IMAGE",
    "SIMILAR_PLACEHOLDER_IMAGE",
    "ARTWORK_PLACEHOLDER_IMAGE",
]
