"""
Shared fixtures: listing builders and an in-memory marketplace DataSource.

No test touches the network; every session is bound to a StubSource.
"""

from datetime import datetime, timedelta, timezone

import pytest

from aso_intelligence.core.models import Listing, StoreConfig


def make_listing(app_id="com.example.app", **fields):
    defaults = {
        "title": "Example App",
        "description": "",
        "score": 4.0,
        "free": True,
        "genre_id": "HEALTH_AND_FITNESS",
        "reviews": 1000,
        "min_installs": 100_000,
        "updated": datetime.now(timezone.utc) - timedelta(days=10),
    }
    defaults.update(fields)
    return Listing(app_id=app_id, **defaults)


class StubSource:
    """Marketplace stand-in. Records every call; has no ``similar`` operation."""

    def __init__(self, listings=None, search_results=None, suggestions=None, charts=None, apps=None):
        self.listings = listings or []
        self.search_results = search_results or {}
        self.suggestions = suggestions or {}
        self.charts = charts or {}
        self.apps = {a.app_id: a for a in apps or []}
        self.calls = []

    async def search(self, *, term, num, full_detail, **kwargs):
        self.calls.append(("search", {"term": term, "num": num, "full_detail": full_detail, **kwargs}))
        return self.search_results.get(term, self.listings)[:num]

    async def app(self, *, app_id, **kwargs):
        self.calls.append(("app", {"app_id": app_id, **kwargs}))
        if app_id in self.apps:
            return self.apps[app_id]
        for group in [self.listings, *self.search_results.values()]:
            for listing in group:
                if listing.app_id == app_id:
                    return listing
        raise LookupError(f"App {app_id} not found")

    async def suggest(self, *, term, **kwargs):
        self.calls.append(("suggest", {"term": term, **kwargs}))
        return self.suggestions.get(term, [])

    async def collection(self, *, collection, category=None, num=100, **kwargs):
        self.calls.append(("collection", {"collection": collection, "category": category, "num": num, **kwargs}))
        return self.charts.get(collection, [])[:num]

    def calls_to(self, operation):
        return [params for op, params in self.calls if op == operation]


class SimilarStubSource(StubSource):
    def __init__(self, similar=None, **kwargs):
        super().__init__(**kwargs)
        self.similar_apps = similar or []

    async def similar(self, *, app_id, full_detail=True, **kwargs):
        self.calls.append(("similar", {"app_id": app_id, "full_detail": full_detail, **kwargs}))
        return self.similar_apps


@pytest.fixture
def fast_config():
    """Config with pacing disabled so tests do not wait between calls."""
    return StoreConfig(throttle=0)
