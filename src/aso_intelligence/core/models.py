"""Pydantic data models, the shared business objects.

Listings come in from the marketplace data sources; every score produced by
the analyzer is one of the immutable sub-score models below. Field aliases
follow the marketplaces' camelCase so that ``model_dump(by_alias=True)``
produces the public result shape.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StoreType(str, Enum):
    """Supported app marketplaces."""

    GPLAY = "gplay"
    ITUNES = "itunes"


class Collection(str, Enum):
    """Marketplace-curated ranked lists."""

    TOP_FREE = "TOP_FREE"
    TOP_PAID = "TOP_PAID"
    TOP_GROSSING = "TOP_GROSSING"
    TRENDING = "TRENDING"
    TOP_FREE_IOS = "TOP_FREE_IOS"
    TOP_PAID_IOS = "TOP_PAID_IOS"
    TOP_GROSSING_IOS = "TOP_GROSSING_IOS"
    NEW_IOS = "NEW_IOS"


class SuggestionStrategy(str, Enum):
    """How candidate listings are sourced for keyword discovery."""

    SIMILAR = "similar"
    COMPETITION = "competition"
    CATEGORY = "category"
    ARBITRARY = "arbitrary"
    KEYWORDS = "keywords"


class MatchType(str, Enum):
    """How a keyword appears in an app title."""

    EXACT = "exact"
    BROAD = "broad"
    PARTIAL = "partial"
    NONE = "none"


class StoreConfig(BaseModel):
    """Per-session request settings.

    ``cache`` is accepted for compatibility but is a no-op: nothing in the
    package reads it and no response is ever cached.
    """

    country: str = "us"
    language: str = "en"
    throttle: int = Field(20, ge=0, description="Minimum milliseconds between outgoing requests")
    timeout: int = Field(10000, gt=0, description="Per-request timeout hint in milliseconds")
    cache: bool = True


class Listing(BaseModel):
    """A single app listing as returned by a marketplace. Read-only."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    app_id: str = Field(alias="appId")
    title: str = ""
    description: str = ""
    summary: Optional[str] = None
    score: Optional[float] = Field(None, description="Average rating, 0-5")
    free: bool = True
    price: Optional[float] = None
    genre_id: Optional[str] = Field(None, alias="genreId")
    reviews: Optional[int] = None
    min_installs: Optional[int] = Field(None, alias="minInstalls")
    updated: Optional[datetime] = None
    url: Optional[str] = None
    developer: Optional[str] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("app_id", mode="before")
    @classmethod
    def _id_as_str(cls, value):
        return str(value) if isinstance(value, int) else value


# ─── Sub-scores ──────────────────────────────────────────────────────────────


class SubScore(BaseModel):
    """Base for every per-metric score."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    score: float


class TitleMatchScore(SubScore):
    exact: int = 0
    broad: int = 0
    partial: int = 0
    none: int = 0


class CompetitorScore(SubScore):
    count: int


class InstallsScore(SubScore):
    avg: float


class RatingScore(SubScore):
    """Mean rating doubled. Not clamped to the 1-10 scale."""

    avg: float


class AgeScore(SubScore):
    avg_days_since_updated: float = Field(alias="avgDaysSinceUpdated")


class SuggestScore(SubScore):
    length: Optional[int] = None
    index: Optional[int] = None


class RankedScore(SubScore):
    count: int = 0
    avg_rank: Optional[float] = Field(None, alias="avgRank")


class LengthScore(SubScore):
    length: int


# ─── Composites ──────────────────────────────────────────────────────────────


class DifficultyScore(BaseModel):
    """How hard it is to rank for a keyword."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title_matches: TitleMatchScore = Field(alias="titleMatches")
    competitors: CompetitorScore
    installs: InstallsScore
    rating: RatingScore
    age: AgeScore
    score: float


class TrafficScore(BaseModel):
    """How much search volume a keyword likely has."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    suggest: SuggestScore
    ranked: RankedScore
    installs: InstallsScore
    length: LengthScore
    score: float


class ScoreResult(BaseModel):
    """Final output of one keyword analysis."""

    model_config = ConfigDict(frozen=True)

    difficulty: DifficultyScore
    traffic: TrafficScore


# ─── Market analysis ─────────────────────────────────────────────────────────


class CompetitiveGap(BaseModel):
    """Heuristic comparison of one listing against a competitor set."""

    advantages: list[str] = Field(default_factory=list)
    disadvantages: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)


class AppComparison(BaseModel):
    app1: Listing
    app2: Listing
    analysis: CompetitiveGap


class MarketOpportunity(BaseModel):
    """Composite market opportunity for a keyword."""

    opportunity: float = Field(description="1-10, higher = better opportunity")
    saturation: float = Field(ge=0.0, le=10.0, description="Share of established apps, scaled to 0-10")
    competition: float = Field(description="Difficulty composite score")
