"""Favorites domain (per-user favorite artists)."""

from .store import FavoriteCandidate, FavoriteStore

__all__ = ["FavoriteCandidate", "FavoriteStore"]
