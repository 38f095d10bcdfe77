#!/usr/bin/env python
"""
Optimistic favorite toggling for one screen visit.

A tap flips the displayed favorite flag at once and sends the add/remove
call in the background. When the call fails the flag goes back to what it
was before the tap and a notification is emitted. The screen reports an
:class:`Outcome` to its parent through a one-shot :class:`NavigationResult`.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Union

import requests

from .backend_api import BackendApi, BackendError, SessionExpired

logger = logging.getLogger(__name__)

ADDED_MESSAGE = "Added to favorites"
REMOVED_MESSAGE = "Removed from favorites"
FAILED_MESSAGE = "Error: Could not update favorites"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Pending:
    previous: bool


@dataclass(frozen=True)
class Committed:
    pass


@dataclass(frozen=True)
class RolledBack:
    pass


ToggleState = Union[Idle, Pending, Committed, RolledBack]


@dataclass(frozen=True)
class FavoriteArtist:
    """Artist fields sent along with an add."""

    id: str
    name: str
    image: Optional[str] = None
    nationality: Optional[str] = None
    birthday: Optional[str] = None
    deathday: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FavoriteArtist":
        return cls(
            id=data['id'],
            name=data.get('name') or '',
            image=data.get('image'),
            nationality=data.get('nationality'),
            birthday=data.get('birthday'),
            deathday=data.get('deathday'),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            'artistId': self.id,
            'artistName': self.name,
            'artistImage': self.image,
            'nationality': self.nationality,
            'birthday': self.birthday,
            'deathday': self.deathday,
        }


class FavoriteToggle:
    """Displayed favorite flag of one artist and the state of its last tap."""

    def __init__(self, artist: FavoriteArtist, api: BackendApi, executor: Executor,
                 is_favorite: bool = False,
                 notify: Optional[Callable[[str], None]] = None) -> None:
        self.artist = artist
        self._api = api
        self._executor = executor
        self._notify = notify
        self._lock = threading.Lock()
        self._displayed = is_favorite
        self._state: ToggleState = Idle()
        self._listeners: List[Callable[["FavoriteToggle", ToggleState], None]] = []

    @property
    def is_favorite(self) -> bool:
        with self._lock:
            return self._displayed

    @property
    def state(self) -> ToggleState:
        with self._lock:
            return self._state

    def add_listener(self, listener: Callable[["FavoriteToggle", ToggleState], None]) -> None:
        self._listeners.append(listener)

    def _changed(self, state: ToggleState) -> None:
        for listener in list(self._listeners):
            listener(self, state)

    def sync(self, is_favorite: bool) -> None:
        """Adopt a server-side favorite flag unless a tap already changed it."""
        with self._lock:
            if isinstance(self._state, Idle):
                self._displayed = is_favorite

    def _emit(self, message: Optional[str]) -> None:
        if message and self._notify is not None:
            self._notify(message)

    def toggle(self) -> Future:
        with self._lock:
            previous = self._displayed
            self._displayed = not previous
            self._state = state = Pending(previous)
        self._changed(state)
        # Overlapping taps each get their own request
        return self._executor.submit(self._commit, previous, not previous)

    def _commit(self, previous: bool, target: bool) -> bool:
        try:
            if target:
                self._api.add_favorite(self.artist.to_payload())
            else:
                self._api.remove_favorite(self.artist.id)
        except SessionExpired:
            logger.info("Session expired while toggling %s; rolling back.", self.artist.id)
            self._rollback(previous, None)
            return False
        except (BackendError, requests.RequestException) as exc:
            logger.warning("Favorite toggle for %s failed: %s", self.artist.id, exc)
            self._rollback(previous, FAILED_MESSAGE)
            return False
        except Exception:
            logger.exception("Unexpected error toggling favorite %s; rolling back.", self.artist.id)
            self._rollback(previous, FAILED_MESSAGE)
            return False

        with self._lock:
            self._state = state = Committed()
        logger.debug("Favorite toggle for %s committed (favorite=%s).", self.artist.id, target)
        self._changed(state)
        self._emit(ADDED_MESSAGE if target else REMOVED_MESSAGE)
        return True

    def _rollback(self, previous: bool, message: Optional[str]) -> None:
        with self._lock:
            self._displayed = previous
            self._state = state = RolledBack()
        self._changed(state)
        self._emit(message)


@dataclass(frozen=True)
class Outcome:
    modified: bool


@dataclass(frozen=True)
class ClientFavoriteState:
    favorite_ids: FrozenSet[str] = field(default_factory=frozenset)
    dirty: bool = False


class NavigationResult:
    """One-shot channel from a screen back to its parent."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcome: Optional[Outcome] = None

    def deliver(self, outcome: Outcome) -> None:
        with self._lock:
            self._outcome = outcome

    def consume(self) -> Optional[Outcome]:
        with self._lock:
            outcome, self._outcome = self._outcome, None
        return outcome


class FavoritesScreenModel:
    """Favorite toggles of one screen visit and the outcome it reports.

    The visit counts as modified once any toggle on it committed, even if
    a later toggle failed.
    """

    def __init__(self, api: BackendApi, executor: Optional[Executor] = None,
                 notify: Optional[Callable[[str], None]] = None) -> None:
        self._api = api
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="favorite-toggle")
        self._notify = notify
        self._lock = threading.Lock()
        self._known_favorites: set = set()
        self._toggles: Dict[str, FavoriteToggle] = {}
        self._pending: List[Future] = []
        self._modified = False
        self.messages: List[str] = []

    def _on_message(self, message: str) -> None:
        with self._lock:
            self.messages.append(message)
        if self._notify is not None:
            self._notify(message)

    def _on_toggle_changed(self, toggle: FavoriteToggle, state: ToggleState) -> None:
        if isinstance(state, Committed):
            with self._lock:
                self._modified = True

    def load_favorites(self) -> FrozenSet[str]:
        """Fetch the user's favorites; logged-out or failed fetches mean none."""
        try:
            favorites = self._api.list_favorites()
        except BackendError as exc:
            logger.info("Could not load favorites: %s", exc)
            favorites = []
        ids = {item['artistId'] for item in favorites if item.get('artistId')}
        with self._lock:
            self._known_favorites = ids
            for artist_id, toggle in self._toggles.items():
                toggle.sync(artist_id in ids)
        return frozenset(ids)

    def toggle_for(self, artist: Union[FavoriteArtist, Dict[str, Any]]) -> FavoriteToggle:
        if isinstance(artist, dict):
            artist = FavoriteArtist.from_dict(artist)
        with self._lock:
            toggle = self._toggles.get(artist.id)
            if toggle is None:
                toggle = FavoriteToggle(
                    artist,
                    self._api,
                    self._executor,
                    is_favorite=artist.id in self._known_favorites,
                    notify=self._on_message,
                )
                toggle.add_listener(self._on_toggle_changed)
                self._toggles[artist.id] = toggle
        return toggle

    def toggle(self, artist: Union[FavoriteArtist, Dict[str, Any]]) -> Future:
        future = self.toggle_for(artist).toggle()
        with self._lock:
            self._pending.append(future)
        return future

    def is_favorite(self, artist_id: str) -> bool:
        with self._lock:
            toggle = self._toggles.get(artist_id)
            if toggle is None:
                return artist_id in self._known_favorites
        return toggle.is_favorite

    def wait_idle(self, timeout: Optional[float] = None) -> None:
        with self._lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)
        with self._lock:
            self._pending = [future for future in self._pending if not future.done()]

    def outcome(self) -> Outcome:
        with self._lock:
            return Outcome(modified=self._modified)

    def snapshot_favorites(self) -> ClientFavoriteState:
        with self._lock:
            ids = set(self._known_favorites)
            toggles = list(self._toggles.values())
            dirty = self._modified
        for toggle in toggles:
            if toggle.is_favorite:
                ids.add(toggle.artist.id)
            else:
                ids.discard(toggle.artist.id)
        return ClientFavoriteState(favorite_ids=frozenset(ids), dirty=dirty)

    def dismiss(self, result: NavigationResult, timeout: Optional[float] = None) -> Outcome:
        """Finish the visit: let in-flight toggles settle, then report upward."""
        self.wait_idle(timeout)
        outcome = self.outcome()
        result.deliver(outcome)
        if self._owns_executor:
            self._executor.shutdown(wait=False)
        return outcome


__all__ = [
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
    "ToggleState",
]
