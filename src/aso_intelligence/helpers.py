"""Convenience entry points built on KeywordScoringSession.

Batch keyword analysis, market opportunity, app comparison and keyword
combinations: the operations the MCP server exposes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from .core.analyzer import (
    analyze_competitive_gap,
    generate_keyword_combinations,
    market_opportunity,
    market_saturation,
)
from .core.models import AppComparison, MarketOpportunity, ScoreResult, StoreConfig, StoreType
from .core.session import ANALYSIS_SEARCH_SIZE, KeywordScoringSession

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = StoreConfig()

BATCH_CONCURRENCY = 3
BATCH_PAUSE_SECONDS = 1.0


def create_gplay_session(config: Optional[StoreConfig] = None) -> KeywordScoringSession:
    return KeywordScoringSession(StoreType.GPLAY, config or DEFAULT_CONFIG)


def create_itunes_session(config: Optional[StoreConfig] = None) -> KeywordScoringSession:
    return KeywordScoringSession(StoreType.ITUNES, config or DEFAULT_CONFIG)


async def analyze_gplay_keyword(keyword: str, config: Optional[StoreConfig] = None) -> ScoreResult:
    return await create_gplay_session(config).analyze_keyword(keyword)


async def analyze_itunes_keyword(keyword: str, config: Optional[StoreConfig] = None) -> ScoreResult:
    return await create_itunes_session(config).analyze_keyword(keyword)


async def analyze_keywords(
    session: KeywordScoringSession,
    keywords: Sequence[str],
    concurrency: int = BATCH_CONCURRENCY,
    pause: float = BATCH_PAUSE_SECONDS,
) -> dict[str, ScoreResult]:
    """Analyze many keywords in chunks of ``concurrency``.

    Keywords within a chunk run concurrently; chunks are separated by
    ``pause`` seconds on top of the session's own request pacing. A keyword
    that fails is logged and left out of the result.
    """
    concurrency = max(1, concurrency)
    chunks = [keywords[i:i + concurrency] for i in range(0, len(keywords), concurrency)]
    results: dict[str, ScoreResult] = {}

    for n, chunk in enumerate(chunks):
        outcomes = await asyncio.gather(
            *[session.analyze_keyword(kw) for kw in chunk],
            return_exceptions=True,
        )
        for keyword, outcome in zip(chunk, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("Error analyzing keyword %r: %s", keyword, outcome)
            else:
                results[keyword] = outcome

        if n < len(chunks) - 1:
            await asyncio.sleep(pause)

    return results


async def compare_apps(session: KeywordScoringSession, app_id_1: str, app_id_2: str) -> AppComparison:
    """Competitive gap of the first app against the second."""
    app1, app2 = await asyncio.gather(session.get_app(app_id_1), session.get_app(app_id_2))
    return AppComparison(app1=app1, app2=app2, analysis=analyze_competitive_gap(app1, [app2]))


def get_keyword_combinations(keywords: Sequence[str], max_length: int = 100) -> list[str]:
    return generate_keyword_combinations(keywords, max_length)


async def calculate_market_opportunity(session: KeywordScoringSession, keyword: str) -> MarketOpportunity:
    """Saturation of the search results combined with the keyword's difficulty and traffic."""
    results = await session.search(keyword, num=ANALYSIS_SEARCH_SIZE, full_detail=True)
    saturation = market_saturation(results)
    analysis = await session.analyze_keyword(keyword)

    return MarketOpportunity(
        opportunity=market_opportunity(saturation, analysis.difficulty.score, analysis.traffic.score),
        saturation=saturation,
        competition=analysis.difficulty.score,
    )
