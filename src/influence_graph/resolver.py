from __future__ import annotations

import logging
import re
from datetime import timedelta

import httpx

from influence_graph.models import (
    Artist,
    ArtistStatus,
    WikiPage,
    to_canonical_id,
    to_lookup_title,
    utcnow,
)
from influence_graph.store.base import ArtistStore
from influence_graph.wiki.client import ContentSource

logger = logging.getLogger(__name__)

MUSICAL_INFOBOX_RE = re.compile(r"\{\{\s*Infobox[ _](?:musical artist|band|person)", re.IGNORECASE)

MUSIC_CATEGORY_KEYWORDS: tuple[str, ...] = (
    "musician",
    "singer",
    "band",
    "rapper",
    "musical group",
    "orchestra",
    "performer",
    "songwriter",
)


def is_musical_artist(page: WikiPage) -> bool:
    """A page is an artist if it carries a music infobox or a music category."""
    if MUSICAL_INFOBOX_RE.search(page.raw_markup or ""):
        return True
    for category in page.categories:
        c = category.lower()
        if any(k in c for k in MUSIC_CATEGORY_KEYWORDS):
            return True
    return False


class ArtistResolver:
    """Cache-or-fetch resolution of identifiers to validated artists.

    The store doubles as the cache: a validated record is returned as-is,
    a fresh rejection short-circuits to not-found, and anything else is
    fetched from the content source and classified.
    """

    def __init__(
        self,
        store: ArtistStore,
        source: ContentSource,
        *,
        rejection_ttl_hours: float | None = None,
    ):
        self.store = store
        self.source = source
        self.rejection_ttl = timedelta(hours=rejection_ttl_hours) if rejection_ttl_hours is not None else None

    def _rejection_fresh(self, artist: Artist) -> bool:
        if artist.status != ArtistStatus.REJECTED or artist.rejected_at is None:
            return False
        if self.rejection_ttl is None:
            return True
        return utcnow() - artist.rejected_at < self.rejection_ttl

    async def resolve(self, identifier: str) -> Artist | None:
        artist_id = to_canonical_id(identifier)
        existing = self.store.get_artist(artist_id)
        if existing is not None:
            if existing.is_validated:
                return existing
            if self._rejection_fresh(existing):
                logger.debug(f"Skipping {artist_id}: previously rejected")
                return None

        try:
            page = await self.source.fetch_page(to_lookup_title(identifier))
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Error fetching artist {identifier}: {e}")
            return None

        if page is None:
            return None
        return self.resolve_page(page, requested_id=artist_id)

    def resolve_page(self, page: WikiPage, *, requested_id: str | None = None) -> Artist | None:
        """Classify an already-fetched page; admit it or record the rejection."""
        if not is_musical_artist(page):
            logger.info(f"Skipping {page.title}: not identified as a musical artist")
            self._reject(page, requested_id)
            return None
        return self.admit(page)

    def admit(self, page: WikiPage) -> Artist:
        canonical_id = to_canonical_id(page.title)
        existing = self.store.get_artist(canonical_id)
        artist = Artist(
            id=canonical_id,
            name=page.title,
            summary=page.summary,
            image_url=page.thumbnail_url,
            wiki_url=page.page_url,
            status=ArtistStatus.VALIDATED,
            fetched_at=utcnow(),
            influences_fetched_at=existing.influences_fetched_at if existing else None,
        )
        return self.store.upsert_artist(artist)

    def _reject(self, page: WikiPage, requested_id: str | None) -> None:
        now = utcnow()
        ids = {to_canonical_id(page.title)} if page.title else set()
        if requested_id:
            ids.add(requested_id)
        for artist_id in ids:
            existing = self.store.get_artist(artist_id)
            if existing is not None and existing.is_validated:
                continue
            if existing is None:
                existing = Artist(id=artist_id, name=page.title or artist_id)
            self.store.upsert_artist(
                existing.model_copy(update={"status": ArtistStatus.REJECTED, "rejected_at": now})
            )
