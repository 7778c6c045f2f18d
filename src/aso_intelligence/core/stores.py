"""Marketplace variants.

Google Play and the App Store expose different data (installs vs. review
counts, chart names, autosuggest behaviour), so each store gets one
StoreProfile that a session picks up at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from .analyzer import SuggestionFetch, score_suggest_prefix, score_suggest_presence
from .errors import ConfigurationError
from .models import Collection, Listing, StoreType, SuggestScore


def _installs(listing: Listing) -> int:
    return listing.min_installs or 0


def _reviews(listing: Listing) -> int:
    return listing.reviews or 0


@dataclass(frozen=True)
class StoreProfile:
    store: StoreType
    max_search: int
    max_list: int
    installs_ceiling: int
    installs_metric: Callable[[Listing], int]
    free_collection: Collection
    paid_collection: Collection
    suggest_scorer: Callable[[str, SuggestionFetch], Awaitable[SuggestScore]]
    # Search hits already carry installs, dates and descriptions.
    detailed_search: bool


GOOGLE_PLAY = StoreProfile(
    store=StoreType.GPLAY,
    max_search=250,
    max_list=120,
    installs_ceiling=1_000_000,
    installs_metric=_installs,
    free_collection=Collection.TOP_FREE,
    paid_collection=Collection.TOP_PAID,
    suggest_scorer=score_suggest_prefix,
    detailed_search=False,
)

APP_STORE = StoreProfile(
    store=StoreType.ITUNES,
    max_search=200,
    max_list=100,
    installs_ceiling=100_000,
    installs_metric=_reviews,
    free_collection=Collection.TOP_FREE_IOS,
    paid_collection=Collection.TOP_PAID_IOS,
    suggest_scorer=score_suggest_presence,
    detailed_search=True,
)

STORE_PROFILES: dict[StoreType, StoreProfile] = {
    StoreType.GPLAY: GOOGLE_PLAY,
    StoreType.ITUNES: APP_STORE,
}


def get_profile(store: StoreType | str) -> StoreProfile:
    try:
        return STORE_PROFILES[StoreType(store)]
    except ValueError:
        raise ConfigurationError(f"Unknown store: {store!r}. Use 'gplay' or 'itunes'.") from None
