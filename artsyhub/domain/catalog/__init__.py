"""Catalog domain services (Artsy token cache and API client)."""

from .artsy_client import ArtistFacts, ArtsyClient
from .token_cache import ArtsyTokenCache, Credential, JsonFileTokenStore, XappTokenFetcher

__all__ = [
    "ArtistFacts",
    "ArtsyClient",
    "ArtsyTokenCache",
    "Credential",
    "JsonFileTokenStore",
    "XappTokenFetcher",
]
