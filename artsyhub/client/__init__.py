"""Python rendition of the mobile app's backend access and favorite toggling."""

from .backend_api import BackendApi, BackendError, SessionExpired
from .favorite_toggle import (
    ClientFavoriteState,
    Committed,
    FavoriteArtist,
    FavoriteToggle,
    FavoritesScreenModel,
    Idle,
    NavigationResult,
    Outcome,
    Pending,
    RolledBack,
)
from .session_store import SessionStore, StoredSession

__all__ = [
    "BackendApi",
    "BackendError",
    "ClientFavoriteState",
    "Committed",
    "FavoriteArtist",
    "FavoriteToggle",
    "FavoritesScreenModel",
    "Idle",
    "NavigationResult",
    "Outcome",
    "Pending",
    "RolledBack",
    "SessionExpired",
    "SessionStore",
    "StoredSession",
]
