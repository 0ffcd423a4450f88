from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from influence_graph.models import WikiPage
from influence_graph.settings import settings
from influence_graph.wiki.http import HttpClientFactory, RateLimiter, transient_retry

logger = logging.getLogger(__name__)


class ContentSource(Protocol):
    """Anything that can return a page's markup and metadata for a title."""

    async def fetch_page(self, title: str) -> WikiPage | None: ...


class WikipediaClient:
    """MediaWiki Action API client.

    Docs: https://www.mediawiki.org/wiki/API:Query

    One `query` call returns the intro extract, thumbnail, canonical URL,
    categories and raw wikitext of a page, following redirects.
    Transient transport errors are retried with exponential backoff and every
    request waits on a shared rate limiter.
    """

    def __init__(
        self,
        api_url: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        rate_limit_per_sec: float | None = None,
    ):
        self.api_url = api_url or settings.wiki_api_url
        self._client = HttpClientFactory.client(
            headers={"User-Agent": settings.user_agent},
            transport=transport,
        )
        self._limiter = RateLimiter(
            settings.rate_limit_per_sec if rate_limit_per_sec is None else rate_limit_per_sec
        )
        self._query = transient_retry(
            attempts=settings.http_retry_attempts,
            initial=settings.http_backoff_initial,
            maximum=settings.http_backoff_max,
        )(self._query_once)

    async def aclose(self):
        await self._client.aclose()

    async def _query_once(self, params: dict[str, str]) -> dict[str, Any]:
        await self._limiter.wait()
        r = await self._client.get(self.api_url, params=params)
        r.raise_for_status()
        return r.json()

    async def fetch_page(self, title: str) -> WikiPage | None:
        params = {
            "action": "query",
            "format": "json",
            "titles": title,
            "prop": "extracts|pageimages|info|categories|revisions",
            "rvprop": "content",
            "exintro": "true",
            "explaintext": "true",
            "pithumbsize": "500",
            "inprop": "url",
            "redirects": "1",
            "cllimit": "max",
        }
        data = await self._query(params)
        return self._to_page(data)

    def _to_page(self, data: dict[str, Any]) -> WikiPage | None:
        pages = (data.get("query") or {}).get("pages")
        if not pages:
            return None

        page_id, page = next(iter(pages.items()))
        if page_id == "-1" or "missing" in page or "invalid" in page:
            return None

        markup = ""
        revisions = page.get("revisions") or []
        if revisions:
            rev = revisions[0]
            markup = rev.get("*") or ((rev.get("slots") or {}).get("main") or {}).get("*") or ""

        thumb = page.get("thumbnail")
        return WikiPage(
            title=page.get("title") or "",
            summary=page.get("extract") or None,
            thumbnail_url=thumb.get("source") if isinstance(thumb, dict) else None,
            page_url=page.get("fullurl"),
            raw_markup=markup,
            categories=[c["title"] for c in page.get("categories") or [] if c.get("title")],
        )
