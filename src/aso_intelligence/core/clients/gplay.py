"""Google Play data source.

Search and app details come from google-play-scraper (synchronous, run in a
worker thread). Search hits are summaries; detail lookups are separate calls.
Autosuggest uses the Play Store suggestion endpoint directly.
Similar apps and top charts are not exposed by the scraper, so ``similar``
and ``collection`` are not provided.
"""

from __future__ import annotations

import asyncio
import logging

import google_play_scraper as gps
import httpx

from ..models import Listing

logger = logging.getLogger(__name__)

SUGGEST_URL = "https://market.android.com/suggest/SuggRequest"

MAX_SEARCH_RESULTS = 250


async def search(
    *,
    term: str,
    num: int = 10,
    full_detail: bool = False,
    country: str = "us",
    language: str = "en",
    timeout: int = 10000,
) -> list[Listing]:
    """Search Google Play.

    Hits are summaries without install counts or update dates; the session
    fetches details per app through ``app`` when it needs them. ``full_detail``
    is accepted and ignored.
    """
    results = await asyncio.to_thread(
        gps.search,
        term,
        lang=language,
        country=country,
        n_hits=min(num, MAX_SEARCH_RESULTS),
    )
    return [Listing.model_validate(r) for r in results if r.get("appId")]


async def app(
    *,
    app_id: str,
    country: str = "us",
    language: str = "en",
    timeout: int = 10000,
) -> Listing:
    """Full details for one app."""
    logger.debug("Fetching Google Play details for %s", app_id)
    details = await asyncio.to_thread(gps.app, app_id, lang=language, country=country)
    return Listing.model_validate(details)


async def suggest(
    *,
    term: str,
    country: str = "us",
    language: str = "en",
    timeout: int = 10000,
) -> list[str]:
    """Play Store autocomplete suggestions for ``term``."""
    params = {"json": 1, "c": 3, "query": term, "hl": language, "gl": country}
    async with httpx.AsyncClient(timeout=httpx.Timeout(timeout / 1000, connect=10.0)) as client:
        response = await client.get(SUGGEST_URL, params=params)
        response.raise_for_status()
        data = response.json()

    return [item["s"] for item in data if isinstance(item, dict) and "s" in item]
