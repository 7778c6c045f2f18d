"""Apple App Store data source.

iTunes Search API docs: https://developer.apple.com/library/archive/documentation/AudioVideo/Conceptual/iTuneSearchAPI/
No authentication required. Roughly 20 requests/minute per IP.

Implements search, app, suggest and collection. The App Store has no public
"similar apps" endpoint, so ``similar`` is not provided.
"""

from __future__ import annotations

import logging
import plistlib
from typing import Optional

import httpx

from ..errors import ConfigurationError
from ..models import Collection, Listing

logger = logging.getLogger(__name__)

SEARCH_URL = "https://itunes.apple.com/search"
LOOKUP_URL = "https://itunes.apple.com/lookup"
HINTS_URL = "https://search.itunes.apple.com/WebObjects/MZSearchHints.woa/wa/hints"
RSS_BASE = "https://itunes.apple.com"

MAX_SEARCH_RESULTS = 200
MAX_CHART_RESULTS = 200

# Storefront ids for the hints endpoint; unknown countries fall back to the default storefront.
STOREFRONTS: dict[str, int] = {
    "us": 143441,
    "fr": 143442,
    "de": 143443,
    "gb": 143444,
    "ca": 143455,
    "au": 143460,
    "jp": 143462,
    "br": 143503,
}

CHART_FEEDS: dict[Collection, str] = {
    Collection.TOP_FREE_IOS: "topfreeapplications",
    Collection.TOP_PAID_IOS: "toppaidapplications",
    Collection.TOP_GROSSING_IOS: "topgrossingapplications",
    Collection.NEW_IOS: "newapplications",
}


def _timeout(timeout_ms: int) -> httpx.Timeout:
    return httpx.Timeout(timeout_ms / 1000, connect=10.0)


def _parse_app(result: dict) -> Listing:
    """Parse an iTunes API result into a Listing."""
    price = result.get("price") or 0.0
    genre_id = result.get("primaryGenreId")
    return Listing(
        app_id=str(result.get("trackId", "")),
        title=result.get("trackName", ""),
        description=result.get("description", ""),
        score=result.get("averageUserRating"),
        free=price == 0,
        price=price,
        genre_id=str(genre_id) if genre_id else None,
        reviews=result.get("userRatingCount"),
        updated=result.get("currentVersionReleaseDate") or None,
        url=result.get("trackViewUrl"),
        developer=result.get("artistName"),
    )


def _parse_chart_entry(entry: dict) -> Listing:
    """Parse an RSS top-chart entry. Charts carry much less detail than lookups."""
    price = entry.get("im:price", {}).get("attributes", {}).get("amount", "0")
    return Listing(
        app_id=entry.get("id", {}).get("attributes", {}).get("im:id", ""),
        title=entry.get("im:name", {}).get("label", ""),
        description=entry.get("summary", {}).get("label", ""),
        free=float(price or 0) == 0,
        price=float(price or 0),
        genre_id=entry.get("category", {}).get("attributes", {}).get("im:id"),
        updated=entry.get("im:releaseDate", {}).get("label") or None,
        developer=entry.get("im:artist", {}).get("label"),
    )


async def search(
    *,
    term: str,
    num: int = 10,
    full_detail: bool = False,
    country: str = "us",
    language: str = "en",
    timeout: int = 10000,
) -> list[Listing]:
    """Search the App Store. Search results already carry full detail."""
    params = {
        "term": term,
        "country": country,
        "lang": f"{language}_{country}".lower(),
        "entity": "software",
        "limit": min(num, MAX_SEARCH_RESULTS),
    }
    async with httpx.AsyncClient(timeout=_timeout(timeout)) as client:
        response = await client.get(SEARCH_URL, params=params)
        response.raise_for_status()
        data = response.json()

    return [_parse_app(r) for r in data.get("results", [])]


async def app(
    *,
    app_id: str,
    country: str = "us",
    language: str = "en",
    timeout: int = 10000,
) -> Listing:
    """Look up a single app by its trackId."""
    params = {"id": app_id, "country": country, "lang": f"{language}_{country}".lower()}
    async with httpx.AsyncClient(timeout=_timeout(timeout)) as client:
        response = await client.get(LOOKUP_URL, params=params)
        response.raise_for_status()
        data = response.json()

    results = data.get("results", [])
    if not results:
        raise LookupError(f"App {app_id} not found in the {country} App Store")
    return _parse_app(results[0])


async def suggest(
    *,
    term: str,
    country: str = "us",
    language: str = "en",
    timeout: int = 10000,
) -> list[str]:
    """App Store autocomplete hints for ``term``."""
    headers = {}
    storefront = STOREFRONTS.get(country.lower())
    if storefront:
        headers["X-Apple-Store-Front"] = f"{storefront}-1,29"

    async with httpx.AsyncClient(timeout=_timeout(timeout)) as client:
        response = await client.get(
            HINTS_URL,
            params={"term": term, "clientApplication": "Software"},
            headers=headers,
        )
        response.raise_for_status()

    data = plistlib.loads(response.content)
    return [h["term"] for h in data.get("hints", []) if isinstance(h, dict) and "term" in h]


async def collection(
    *,
    collection: Collection,
    category: Optional[str] = None,
    num: int = 100,
    country: str = "us",
    language: str = "en",
    timeout: int = 10000,
) -> list[Listing]:
    """Fetch an App Store top chart, optionally within one genre."""
    feed = CHART_FEEDS.get(Collection(collection))
    if feed is None:
        raise ConfigurationError(f"Collection {collection} is not available on the App Store")

    logger.debug("Fetching App Store chart %s (genre=%s, country=%s)", feed, category, country)
    path = f"{RSS_BASE}/{country}/rss/{feed}/limit={min(num, MAX_CHART_RESULTS)}"
    if category:
        path += f"/genre={category}"

    async with httpx.AsyncClient(timeout=_timeout(timeout)) as client:
        response = await client.get(f"{path}/json")
        response.raise_for_status()
        data = response.json()

    entries = data.get("feed", {}).get("entry", [])
    if isinstance(entries, dict):
        entries = [entries]
    return [_parse_chart_entry(e) for e in entries]
