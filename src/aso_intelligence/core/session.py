"""Keyword scoring session bound to one marketplace."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Sequence

from . import analyzer
from .executor import RequestExecutor
from .models import Collection, Listing, ScoreResult, StoreConfig, StoreType, SuggestionStrategy
from .stores import get_profile
from .text import extract_keywords

logger = logging.getLogger(__name__)

ANALYSIS_SEARCH_SIZE = 100
ANALYSIS_SAMPLE_SIZE = 10
DEFAULT_SUGGESTIONS = 30


def _default_source(store: StoreType) -> Any:
    if store is StoreType.GPLAY:
        from .clients import gplay

        return gplay
    from .clients import itunes

    return itunes


class KeywordScoringSession:
    """Scores keywords against one marketplace.

    All marketplace calls go through the session's RequestExecutor, so they
    share one pacing gate and the retry policy.

    Args:
        store: ``"gplay"`` or ``"itunes"``.
        config: Request settings. Defaults to ``StoreConfig()``.
        source: DataSource to bind. Defaults to the bundled client for ``store``.
    """

    def __init__(
        self,
        store: StoreType | str,
        config: Optional[StoreConfig] = None,
        source: Any = None,
    ):
        self.profile = get_profile(store)
        self.store = self.profile.store
        self.config = config or StoreConfig()
        self.executor = RequestExecutor(source or _default_source(self.store), self.config)

    def __repr__(self) -> str:
        return f"KeywordScoringSession(store={self.store.value!r}, country={self.config.country!r})"

    # ─── Marketplace lookups ────────────────────────────────────────────────

    async def search(self, term: str, num: int = 10, full_detail: bool = False) -> list[Listing]:
        """Search the store.

        On stores whose search hits are summaries, ``full_detail`` fetches
        each hit through ``get_app``, one paced and retried call per app.
        """
        hits = await self.executor.execute(
            "search",
            term=term,
            num=min(num, self.profile.max_search),
            full_detail=full_detail,
        )
        if not full_detail or self.profile.detailed_search:
            return hits

        logger.debug("Fetching details for %d %s results for %r", len(hits), self.store.value, term)
        return list(await asyncio.gather(*[self.get_app(hit.app_id) for hit in hits]))

    async def get_app(self, app_id: str) -> Listing:
        return await self.executor.execute("app", app_id=app_id)

    async def get_similar_apps(self, app_id: str, full_detail: bool = True) -> list[Listing]:
        return await self.executor.execute("similar", app_id=app_id, full_detail=full_detail)

    async def get_suggestions(self, term: str) -> list[str]:
        return await self.executor.execute("suggest", term=term)

    async def get_collection(
        self,
        collection: Collection,
        category: Optional[str] = None,
        num: Optional[int] = None,
    ) -> list[Listing]:
        """Ranked collection in the session's country."""
        return await self.executor.execute(
            "collection",
            collection=collection,
            category=category,
            num=num or self.profile.max_list,
        )

    # ─── Scoring ────────────────────────────────────────────────────────────

    async def analyze_keyword(self, keyword: str) -> ScoreResult:
        """Difficulty and traffic scores for ``keyword``.

        Fetches up to 100 full-detail search results and scores the top 10.
        Fetch failures that exhaust their retries propagate to the caller.
        """
        logger.info("Analyzing keyword: %s", keyword)
        results = await self.search(keyword, num=ANALYSIS_SEARCH_SIZE, full_detail=True)
        top = results[:ANALYSIS_SAMPLE_SIZE]

        difficulty, traffic = await asyncio.gather(
            asyncio.to_thread(analyzer.calculate_difficulty, keyword, top, self.profile),
            analyzer.calculate_traffic(keyword, top, self),
        )
        return ScoreResult(difficulty=difficulty, traffic=traffic)

    # ─── Keyword discovery ──────────────────────────────────────────────────

    async def suggest(
        self,
        strategy: SuggestionStrategy | str = SuggestionStrategy.CATEGORY,
        app_id: Optional[str] = None,
        apps: Optional[Sequence[str]] = None,
        keywords: Optional[Sequence[str]] = None,
        num: int = DEFAULT_SUGGESTIONS,
    ) -> list[str]:
        """Candidate keywords mined from listings picked by ``strategy``.

        Seed ``keywords`` are excluded from the result.
        """
        logger.debug("Getting suggestions: strategy=%s app_id=%s num=%d", strategy, app_id, num)
        listings = await analyzer.get_apps_by_strategy(
            strategy, self, app_id=app_id, apps=apps, keywords=keywords,
        )

        seeds = set(keywords or [])
        found: list[str] = []
        seen: set[str] = set()
        for listing in listings:
            for kw in extract_keywords(f"{listing.title} {listing.description}"):
                if kw not in seen and kw not in seeds:
                    seen.add(kw)
                    found.append(kw)
        return found[:num]

    async def get_app_keywords(self, app_id: str) -> list[str]:
        listing = await self.get_app(app_id)
        return extract_keywords(f"{listing.title} {listing.description}")
