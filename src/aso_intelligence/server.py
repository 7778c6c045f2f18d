"""ASO Keyword Intelligence MCP Server.

FastMCP server exposing keyword scoring, market analysis and keyword
discovery for Google Play and the App Store.
Run: aso-intelligence-mcp
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .config import get_default_store, load_config
from .core.analyzer import score_keyword_relevancy
from .core.models import ScoreResult, StoreType
from .core.session import KeywordScoringSession
from .core.stores import get_profile
from .helpers import analyze_keywords, calculate_market_opportunity, compare_apps, get_keyword_combinations

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)

# One session per store so that every tool call shares the same pacing gate.
_sessions: dict[StoreType, KeywordScoringSession] = {}


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Configure logging; sessions are created lazily on first use."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    try:
        yield
    finally:
        _sessions.clear()


mcp = FastMCP(
    "ASO Keyword Intelligence",
    instructions="Score app store keywords for difficulty, traffic and market opportunity on Google Play and the App Store, and discover new keywords from competing apps.",
    lifespan=lifespan,
)


def _get_session(store: str = "") -> KeywordScoringSession:
    store_type = get_profile(store.lower()).store if store else get_default_store()
    if store_type not in _sessions:
        _sessions[store_type] = KeywordScoringSession(store_type, load_config())
        logger.info("Created %r", _sessions[store_type])
    return _sessions[store_type]


def _difficulty_label(score: float) -> str:
    if score >= 7:
        return "hard"
    if score >= 4:
        return "moderate"
    return "easy"


def _result_summary(keyword: str, result: ScoreResult) -> str:
    difficulty = result.difficulty.score
    traffic = result.traffic.score
    return (
        f"'{keyword}': difficulty {difficulty:.2f}/10 ({_difficulty_label(difficulty)}), "
        f"traffic {traffic:.2f}/10. "
        f"{result.difficulty.title_matches.exact} of the top apps use the exact phrase in their title."
    )


# ─── Tool 1: Analyze Keyword ─────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def aso_analyze_keyword(keyword: str, store: str = "") -> dict:
    """Difficulty and traffic scores (1-10) for one keyword, with every sub-score.

    Args:
        keyword: Search term to score (e.g., 'habit tracker').
        store: 'gplay' or 'itunes'. Defaults to ASO_STORE or 'gplay'.
    """
    session = _get_session(store)
    result = await session.analyze_keyword(keyword)
    return {
        "keyword": keyword,
        "store": session.store.value,
        "result": result.model_dump(by_alias=True),
        "relevancy": score_keyword_relevancy(keyword),
        "summary": _result_summary(keyword, result),
    }


# ─── Tool 2: Analyze Keywords (batch) ────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def aso_analyze_keywords(keywords: list[str], store: str = "", concurrency: int = 3) -> dict:
    """Score several keywords at once. Keywords that fail are left out.

    Args:
        keywords: Search terms to score.
        store: 'gplay' or 'itunes'.
        concurrency: Keywords analyzed at the same time. Default 3.
    """
    session = _get_session(store)
    results = await analyze_keywords(session, keywords, concurrency=concurrency)
    failed = [kw for kw in keywords if kw not in results]

    ranked = sorted(results.items(), key=lambda kv: kv[1].traffic.score - kv[1].difficulty.score, reverse=True)
    return {
        "store": session.store.value,
        "results": {kw: r.model_dump(by_alias=True) for kw, r in results.items()},
        "failed": failed,
        "summary": f"Scored {len(results)} of {len(keywords)} keywords."
        + (f" Best traffic/difficulty balance: '{ranked[0][0]}'." if ranked else ""),
    }


# ─── Tool 3: Market Opportunity ──────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def aso_market_opportunity(keyword: str, store: str = "") -> dict:
    """Market opportunity (1-10) combining saturation, difficulty and traffic.

    Args:
        keyword: Search term.
        store: 'gplay' or 'itunes'.
    """
    session = _get_session(store)
    opportunity = await calculate_market_opportunity(session, keyword)
    return {
        "keyword": keyword,
        "store": session.store.value,
        **opportunity.model_dump(),
        "summary": f"Opportunity {opportunity.opportunity:.2f}/10, saturation {opportunity.saturation:.1f}/10, competition {opportunity.competition:.2f}/10.",
    }


# ─── Tool 4: Compare Apps ────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def aso_compare_apps(app_id_1: str, app_id_2: str, store: str = "") -> dict:
    """Competitive gap analysis of one app against another.

    Args:
        app_id_1: The app being evaluated (package name or App Store id).
        app_id_2: The competitor.
        store: 'gplay' or 'itunes'.
    """
    comparison = await compare_apps(_get_session(store), app_id_1, app_id_2)
    analysis = comparison.analysis
    return {
        **comparison.model_dump(mode="json", by_alias=True),
        "summary": f"{len(analysis.advantages)} advantage(s), {len(analysis.disadvantages)} disadvantage(s), "
        f"{len(analysis.opportunities)} opportunity(ies) for {comparison.app1.title or app_id_1}.",
    }


# ─── Tool 5: Suggest Keywords ────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def aso_suggest_keywords(
    strategy: str = "category",
    app_id: str = "",
    apps: Optional[list[str]] = None,
    keywords: Optional[list[str]] = None,
    num: int = 30,
    store: str = "",
) -> dict:
    """Discover candidate keywords from related apps.

    Args:
        strategy: 'similar', 'category', 'competition' (need app_id), 'keywords' (needs keywords)
                  or 'arbitrary' (needs apps).
        app_id: Seed app.
        apps: App ids for the 'arbitrary' strategy.
        keywords: Seed keywords; also excluded from the output.
        num: Maximum suggestions. Default 30.
        store: 'gplay' or 'itunes'.
    """
    session = _get_session(store)
    suggestions = await session.suggest(
        strategy=strategy,
        app_id=app_id or None,
        apps=apps,
        keywords=keywords,
        num=num,
    )
    return {
        "strategy": strategy,
        "store": session.store.value,
        "suggestions": suggestions,
        "count": len(suggestions),
        "summary": f"Found {len(suggestions)} keyword suggestion(s) using the '{strategy}' strategy.",
    }


# ─── Tool 6: Keyword Combinations ────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def aso_keyword_combinations(keywords: list[str], max_length: int = 100) -> dict:
    """Multi-word phrases built from consecutive keywords, longest first.

    Args:
        keywords: Ordered keyword list.
        max_length: Maximum phrase length in characters. Default 100.
    """
    combinations = get_keyword_combinations(keywords, max_length)
    return {
        "combinations": combinations,
        "count": len(combinations),
        "summary": f"Generated {len(combinations)} phrase(s) of at most {max_length} characters.",
    }


# ─── Tool 7: Search ──────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def aso_search(term: str, num: int = 10, store: str = "") -> dict:
    """Search the store and list the matching apps.

    Args:
        term: Search term.
        num: Maximum number of results. Default 10.
        store: 'gplay' or 'itunes'.
    """
    session = _get_session(store)
    results = await session.search(term, num=num)
    return {
        "term": term,
        "store": session.store.value,
        "results": [r.model_dump(mode="json", by_alias=True) for r in results],
        "count": len(results),
        "summary": f"Found {len(results)} app(s) matching '{term}'",
    }


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
