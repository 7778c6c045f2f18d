"""Keyword opportunity scoring engine.

Computes the individual sub-scores for a keyword from a sample of competing
listings, combines them into the difficulty and traffic composites, and
provides the market-level analyses built on top of them (saturation,
opportunity, competitive gaps, keyword combinations, candidate discovery).

Everything here is a free function. Functions that need marketplace data
take the fetch callables (or the session) as arguments; none of them call a
data source directly.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Sequence

from .models import (
    AgeScore,
    Collection,
    CompetitiveGap,
    CompetitorScore,
    DifficultyScore,
    InstallsScore,
    LengthScore,
    Listing,
    MatchType,
    RankedScore,
    RatingScore,
    SuggestionStrategy,
    SuggestScore,
    TitleMatchScore,
    TrafficScore,
)
from .normalizer import (
    SCALE_MAX,
    SCALE_MIN,
    aggregate,
    inverse_score,
    inverse_zero_based_score,
    linear_score,
    round_score,
    zero_based_score,
)
from .text import days_since, extract_keywords, match_type

if TYPE_CHECKING:
    from .session import KeywordScoringSession
    from .stores import StoreProfile

logger = logging.getLogger(__name__)

SuggestionFetch = Callable[[str], Awaitable[list[str]]]
CollectionFetch = Callable[[Collection, Optional[str], int], Awaitable[list[Listing]]]

MAX_KEYWORD_LENGTH = 25
COMPETITOR_KEYWORD_DEPTH = 10
AGE_CEILING_DAYS = 500
RANKED_COLLECTION_SIZE = 120
RANK_CEILING = 100
SUGGEST_VOLUME_CEILING = 8000
SUGGEST_VOLUME_PRESENT = 5000
SUGGEST_INDEX_CEILING = 4
SATURATION_MIN_INSTALLS = 10_000

DIFFICULTY_WEIGHTS = (4, 3, 5, 2, 1)
TRAFFIC_WEIGHTS = (8, 3, 2, 1)
OPPORTUNITY_WEIGHTS = (4, 3, 3)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Optional data-source operations each discovery strategy depends on.
_STRATEGY_OPERATIONS = {
    SuggestionStrategy.SIMILAR: "similar",
    SuggestionStrategy.CATEGORY: "collection",
}


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _listing_text(listing: Listing) -> str:
    return f"{listing.title} {listing.description}"


# ─── Difficulty sub-scores ───────────────────────────────────────────────────


def score_title_matches(keyword: str, listings: Sequence[Listing]) -> TitleMatchScore:
    """Weighted share of titles containing the keyword.

    exact = 10, broad = 5, partial = 2.5 points per listing, averaged over the
    sample and held to the 1-10 scale.
    """
    counts = {m: 0 for m in MatchType}
    for listing in listings:
        counts[match_type(keyword, listing.title)] += 1

    if listings:
        raw = (
            10 * counts[MatchType.EXACT]
            + 5 * counts[MatchType.BROAD]
            + 2.5 * counts[MatchType.PARTIAL]
        ) / len(listings)
    else:
        raw = SCALE_MIN

    return TitleMatchScore(
        exact=counts[MatchType.EXACT],
        broad=counts[MatchType.BROAD],
        partial=counts[MatchType.PARTIAL],
        none=counts[MatchType.NONE],
        score=round_score(max(SCALE_MIN, min(SCALE_MAX, raw))),
    )


def score_competitors(keyword: str, listings: Sequence[Listing]) -> CompetitorScore:
    """Count listings whose leading extracted keywords include ``keyword``."""
    count = sum(
        1
        for listing in listings
        if keyword in extract_keywords(_listing_text(listing))[:COMPETITOR_KEYWORD_DEPTH]
    )
    if not listings:
        return CompetitorScore(count=0, score=SCALE_MIN)
    return CompetitorScore(count=count, score=zero_based_score(len(listings), count))


def score_installs(
    listings: Sequence[Listing],
    ceiling: int,
    metric: Callable[[Listing], int],
) -> InstallsScore:
    """Average install (or review) volume against the store's ceiling."""
    avg = _mean([metric(listing) for listing in listings])
    return InstallsScore(avg=avg, score=zero_based_score(ceiling, avg))


def score_rating(listings: Sequence[Listing]) -> RatingScore:
    # Doubled mean rating, deliberately not clamped to the 1-10 scale.
    avg = _mean([listing.score or 0 for listing in listings])
    return RatingScore(avg=avg, score=avg * 2)


def score_age(listings: Sequence[Listing]) -> AgeScore:
    """Days since last update, averaged; stale competition scores high.

    Listings without an update date count from the Unix epoch.
    """
    avg_days = _mean([days_since(listing.updated or _EPOCH) for listing in listings])
    return AgeScore(
        avg_days_since_updated=avg_days,
        score=inverse_zero_based_score(AGE_CEILING_DAYS, avg_days),
    )


def calculate_difficulty(
    keyword: str,
    listings: Sequence[Listing],
    profile: StoreProfile,
) -> DifficultyScore:
    """How hard it is to rank for ``keyword`` against ``listings``."""
    title_matches = score_title_matches(keyword, listings)
    competitors = score_competitors(keyword, listings)
    installs = score_installs(listings, profile.installs_ceiling, profile.installs_metric)
    rating = score_rating(listings)
    age = score_age(listings)

    score = aggregate(
        DIFFICULTY_WEIGHTS,
        [title_matches.score, competitors.score, installs.score, rating.score, age.score],
    )
    return DifficultyScore(
        title_matches=title_matches,
        competitors=competitors,
        installs=installs,
        rating=rating,
        age=age,
        score=score,
    )


# ─── Traffic sub-scores ──────────────────────────────────────────────────────


async def score_suggest_presence(keyword: str, fetch_suggestions: SuggestionFetch) -> SuggestScore:
    """Whether the bare keyword returns any autosuggestion at all."""
    suggestions = await fetch_suggestions(keyword)
    volume = SUGGEST_VOLUME_PRESENT if suggestions else 0
    return SuggestScore(score=zero_based_score(SUGGEST_VOLUME_CEILING, volume))


async def score_suggest_prefix(keyword: str, fetch_suggestions: SuggestionFetch) -> SuggestScore:
    """Shortest prefix of ``keyword`` whose autosuggest list contains it.

    Shorter prefixes and earlier positions score higher. Keywords that do not
    surface within the first ``min(len(keyword), 25)`` characters score 1.
    """
    for length in range(1, min(len(keyword), MAX_KEYWORD_LENGTH) + 1):
        suggestions = await fetch_suggestions(keyword[:length])
        if keyword not in suggestions:
            continue
        index = suggestions.index(keyword)
        length_score = inverse_score(1, MAX_KEYWORD_LENGTH, length)
        index_score = inverse_zero_based_score(SUGGEST_INDEX_CEILING, index)
        return SuggestScore(
            length=length,
            index=index,
            score=aggregate([10, 1], [length_score, index_score]),
        )
    return SuggestScore(score=SCALE_MIN)


async def score_ranked(
    listings: Sequence[Listing],
    fetch_collection: CollectionFetch,
    free_collection: Collection,
    paid_collection: Collection,
    size: int = RANKED_COLLECTION_SIZE,
) -> RankedScore:
    """How many listings appear in their category's top chart, and how high.

    Any failure resolving the charts degrades to ``count=0, score=1``.
    """
    try:
        collections = await asyncio.gather(*[
            fetch_collection(
                free_collection if listing.free else paid_collection,
                listing.genre_id,
                size,
            )
            for listing in listings
        ])

        ranks = []
        for listing, charted in zip(listings, collections):
            ids = [entry.app_id for entry in charted]
            if listing.app_id in ids:
                ranks.append(ids.index(listing.app_id) + 1)
    except Exception as exc:
        logger.warning("Error calculating ranked score: %s", exc)
        return RankedScore(count=0, score=SCALE_MIN)

    if not ranks:
        return RankedScore(count=0, score=SCALE_MIN)

    avg_rank = _mean(ranks)
    count_score = zero_based_score(len(listings), len(ranks))
    rank_score = inverse_score(1, RANK_CEILING, avg_rank)
    return RankedScore(
        count=len(ranks),
        avg_rank=avg_rank,
        score=aggregate([5, 1], [count_score, rank_score]),
    )


def score_length(keyword: str, max_length: int = MAX_KEYWORD_LENGTH) -> LengthScore:
    length = len(keyword)
    return LengthScore(length=length, score=linear_score(1, max_length, length))


async def calculate_traffic(
    keyword: str,
    listings: Sequence[Listing],
    session: KeywordScoringSession,
) -> TrafficScore:
    """How much search volume ``keyword`` likely has."""
    profile = session.profile
    suggest, ranked = await asyncio.gather(
        profile.suggest_scorer(keyword, session.get_suggestions),
        score_ranked(
            listings,
            session.get_collection,
            profile.free_collection,
            profile.paid_collection,
        ),
    )
    installs = score_installs(listings, profile.installs_ceiling, profile.installs_metric)
    length = score_length(keyword)

    score = aggregate(
        TRAFFIC_WEIGHTS,
        [suggest.score, ranked.score, installs.score, length.score],
    )
    return TrafficScore(
        suggest=suggest,
        ranked=ranked,
        installs=installs,
        length=length,
        score=score,
    )


# ─── Market analysis ─────────────────────────────────────────────────────────


def market_saturation(listings: Sequence[Listing], min_installs: int = SATURATION_MIN_INSTALLS) -> float:
    """Share of listings at or above ``min_installs``, scaled to 0-10."""
    if not listings:
        return 0.0
    saturated = sum(1 for listing in listings if (listing.min_installs or 0) >= min_installs)
    return saturated / len(listings) * 10


def market_opportunity(saturation: float, difficulty: float, traffic: float) -> float:
    """Low saturation, low difficulty and high traffic all raise the score."""
    return aggregate(OPPORTUNITY_WEIGHTS, [10 - saturation, 10 - difficulty, traffic])


def analyze_competitive_gap(main: Listing, competitors: Sequence[Listing]) -> CompetitiveGap:
    gap = CompetitiveGap()

    avg_rating = _mean([c.score or 0 for c in competitors])
    rating = main.score or 0
    if rating > avg_rating:
        gap.advantages.append("Higher rating than competitors")
    elif rating < avg_rating:
        gap.disadvantages.append("Lower rating than competitors")

    avg_installs = _mean([c.min_installs or 0 for c in competitors])
    if (main.min_installs or 0) < avg_installs * 0.8:
        gap.opportunities.append("Potential for install growth")

    avg_title_length = _mean([len(c.title) for c in competitors])
    if len(main.title) < avg_title_length * 0.7:
        gap.opportunities.append("Title could be optimized for keywords")

    avg_description_length = _mean([len(c.description) for c in competitors])
    if len(main.description) < avg_description_length * 0.8:
        gap.opportunities.append("Description could be expanded")

    avg_reviews = _mean([c.reviews or 0 for c in competitors])
    if (main.reviews or 0) < avg_reviews * 0.5:
        gap.opportunities.append("Could improve review volume")

    return gap


def generate_keyword_combinations(keywords: Sequence[str], max_length: int = 100) -> list[str]:
    """Every contiguous run of ``keywords`` joined by spaces, up to ``max_length`` chars.

    Phrases are de-duplicated and ordered by word count, longest first; ties
    keep discovery order.
    """
    phrases: list[str] = []
    seen: set[str] = set()
    for start in range(len(keywords)):
        for end in range(start + 1, len(keywords) + 1):
            phrase = " ".join(keywords[start:end])
            if len(phrase) > max_length:
                break
            if phrase and phrase not in seen:
                seen.add(phrase)
                phrases.append(phrase)
    return sorted(phrases, key=lambda p: len(p.split()), reverse=True)


def score_keyword_relevancy(keyword: str) -> float:
    """Heuristic 1-10 fit of a keyword's shape: two or three words score best."""
    length = len(keyword)
    words = len(keyword.split())
    length_score = linear_score(1, MAX_KEYWORD_LENGTH, length * 0.8 if length > 20 else length)
    if words in (2, 3):
        word_score = 10
    elif words == 1:
        word_score = 7
    elif words == 4:
        word_score = 6
    else:
        word_score = 4
    return aggregate([6, 4], [length_score, word_score])


# ─── Candidate discovery ─────────────────────────────────────────────────────


def _unique_by_app_id(groups: Sequence[Sequence[Listing]]) -> list[Listing]:
    seen: set[str] = set()
    unique = []
    for group in groups:
        for listing in group:
            if listing.app_id not in seen:
                seen.add(listing.app_id)
                unique.append(listing)
    return unique


async def get_apps_from_keywords(
    keywords: Sequence[str],
    session: KeywordScoringSession,
) -> list[Listing]:
    searches = await asyncio.gather(*[
        session.search(kw, num=10, full_detail=True) for kw in keywords
    ])
    return _unique_by_app_id(searches)


async def get_apps_by_strategy(
    strategy: SuggestionStrategy,
    session: KeywordScoringSession,
    app_id: Optional[str] = None,
    apps: Optional[Sequence[str]] = None,
    keywords: Optional[Sequence[str]] = None,
) -> list[Listing]:
    """Resolve a suggestion strategy to candidate listings.

    Missing inputs for the chosen strategy, or a data source without the
    operation the strategy needs, give an empty list.
    """
    try:
        strategy = SuggestionStrategy(strategy)
    except ValueError:
        logger.warning("Unknown suggestion strategy: %s", strategy)
        return []
    profile = session.profile

    required = _STRATEGY_OPERATIONS.get(strategy)
    if required and not session.executor.supports(required):
        logger.warning(
            "Strategy %s needs %r, which the %s data source does not provide",
            strategy.value, required, session.store.value,
        )
        return []

    if strategy is SuggestionStrategy.SIMILAR:
        return await session.get_similar_apps(app_id) if app_id else []

    if strategy is SuggestionStrategy.CATEGORY:
        if not app_id:
            return []
        seed = await session.get_app(app_id)
        return await session.get_collection(
            profile.free_collection if seed.free else profile.paid_collection,
            category=seed.genre_id,
            num=RANKED_COLLECTION_SIZE,
        )

    if strategy is SuggestionStrategy.COMPETITION:
        if not app_id:
            return []
        seed = await session.get_app(app_id)
        top_keywords = extract_keywords(_listing_text(seed))[:COMPETITOR_KEYWORD_DEPTH]
        return await get_apps_from_keywords(top_keywords, session)

    if strategy is SuggestionStrategy.KEYWORDS:
        return await get_apps_from_keywords(keywords, session) if keywords else []

    if strategy is SuggestionStrategy.ARBITRARY:
        if not apps:
            return []
        return list(await asyncio.gather(*[session.get_app(a) for a in apps]))

    return []
