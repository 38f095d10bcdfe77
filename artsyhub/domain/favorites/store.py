#!/usr/bin/env python
"""
Per-user favorite artists.

Adds are enriched from the Artsy catalog when the caller did not send the
artist's nationality or birthday. Enrichment is best-effort: a failed or
empty lookup never blocks the add.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError

from artsyhub.database.db_manager import Favorite, db
from artsyhub.domain.catalog.artsy_client import PLACEHOLDER_IMAGES, ArtistFacts
from artsyhub.errors import Conflict, ValidationError
from artsyhub.observability.metrics import record_enrichment, record_favorite_change
from artsyhub.utils.fallback import first_present, is_present

logger = logging.getLogger(__name__)

ArtistLookup = Callable[[str], Optional[ArtistFacts]]


@dataclass
class FavoriteCandidate:
    """Favorite fields as sent by the client."""

    artist_id: str
    artist_name: str
    artist_image: Optional[str] = None
    nationality: Optional[str] = None
    birthday: Optional[str] = None
    deathday: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "FavoriteCandidate":
        artist_id = str(payload.get('artistId') or '').strip()
        artist_name = str(payload.get('artistName') or '').strip()
        if not artist_id or not artist_name:
            raise ValidationError("Required artist ID or Name missing")
        return cls(
            artist_id=artist_id,
            artist_name=artist_name,
            artist_image=payload.get('artistImage'),
            nationality=payload.get('nationality'),
            birthday=payload.get('birthday'),
            deathday=payload.get('deathday'),
        )

    @property
    def needs_enrichment(self) -> bool:
        return not is_present(self.nationality) and not is_present(self.birthday)


def _choose_image(requested: Optional[str], facts: Optional[ArtistFacts]) -> Optional[str]:
    usable_request = requested if is_present(requested) and requested not in PLACEHOLDER_IMAGES else None
    value, _ = first_present([
        (usable_request, 'request'),
        (facts.image_url if facts else None, 'artsy'),
        (requested, 'request-placeholder'),
    ])
    return value


class FavoriteStore:
    def __init__(self, artist_lookup: Optional[ArtistLookup] = None,
                 clock: Callable[[], datetime] = datetime.utcnow) -> None:
        self._artist_lookup = artist_lookup
        self._clock = clock

    def list(self, user_id: int) -> List[Favorite]:
        return (
            Favorite.query.filter_by(user_id=user_id)
            .order_by(Favorite.added_at.desc(), Favorite.id.desc())
            .all()
        )

    def get(self, user_id: int, artist_id: str) -> Optional[Favorite]:
        return Favorite.query.filter_by(user_id=user_id, artist_id=artist_id).first()

    def _enrich(self, candidate: FavoriteCandidate) -> Optional[ArtistFacts]:
        if not candidate.needs_enrichment:
            logger.debug("Favorite %s already carries nationality/birthday; skipping lookup.", candidate.artist_id)
            return None
        if self._artist_lookup is None:
            record_enrichment('skipped')
            return None
        logger.info("Favorite %s is missing details; looking it up on Artsy.", candidate.artist_id)
        try:
            facts = self._artist_lookup(candidate.artist_id)
        except Exception as exc:
            # Enrichment must never fail the add; keep what the caller sent.
            logger.warning("Artsy lookup for favorite %s failed: %s", candidate.artist_id, exc)
            record_enrichment('error')
            return None
        record_enrichment('found' if facts else 'not_found')
        if facts is None:
            logger.info("No Artsy details for %s; saving request fields only.", candidate.artist_id)
        return facts

    def add(self, user_id: int, candidate: FavoriteCandidate) -> Favorite:
        if self.get(user_id, candidate.artist_id) is not None:
            logger.info("Artist %s is already a favorite of user %s.", candidate.artist_id, user_id)
            raise Conflict("Artist already in favorites")

        facts = self._enrich(candidate)

        def pick(requested, fetched):
            value, _ = first_present([(requested, 'request'), (fetched, 'artsy')])
            return value

        favorite = Favorite(
            user_id=user_id,
            artist_id=candidate.artist_id,
            artist_name=candidate.artist_name,
            artist_image=_choose_image(candidate.artist_image, facts),
            nationality=pick(candidate.nationality, facts.nationality if facts else None),
            birthday=pick(candidate.birthday, facts.birthday if facts else None),
            deathday=pick(candidate.deathday, facts.deathday if facts else None),
            added_at=self._clock(),
        )
        db.session.add(favorite)
        try:
            db.session.commit()
        except IntegrityError:
            # A concurrent add for the same artist won the unique constraint
            db.session.rollback()
            raise Conflict("Artist already in favorites")
        record_favorite_change('add')
        logger.info("User %s added artist %s to favorites.", user_id, candidate.artist_id)
        return favorite

    def remove(self, user_id: int, artist_id: str) -> bool:
        deleted = Favorite.query.filter_by(user_id=user_id, artist_id=artist_id).delete()
        db.session.commit()
        if not deleted:
            logger.info("User %s tried to remove artist %s, which is not a favorite.", user_id, artist_id)
            return False
        record_favorite_change('remove')
        logger.info("User %s removed artist %s from favorites.", user_id, artist_id)
        return True

    def delete_all_for_user(self, user_id: int) -> int:
        deleted = Favorite.query.filter_by(user_id=user_id).delete()
        db.session.commit()
        logger.info("Deleted %s favorites of user %s.", deleted, user_id)
        return deleted


__all__ = ["FavoriteCandidate", "FavoriteStore"]
