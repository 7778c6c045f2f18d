"""
Unit tests for batch analysis, market opportunity and app comparison helpers.
"""

from unittest.mock import AsyncMock, call

import pytest

from aso_intelligence import helpers
from aso_intelligence.core.models import StoreType
from aso_intelligence.core.session import KeywordScoringSession

from conftest import StubSource, make_listing


class FailingKeywordSource(StubSource):
    """Search fails for one term only."""

    def __init__(self, bad_term, **kwargs):
        super().__init__(**kwargs)
        self.bad_term = bad_term

    async def search(self, *, term, **kwargs):
        if term == self.bad_term:
            self.calls.append(("search", {"term": term, **kwargs}))
            raise ConnectionError(f"cannot search {term}")
        return await super().search(term=term, **kwargs)


def _session(source, fast_config):
    return KeywordScoringSession("gplay", fast_config, source=source)


class TestAnalyzeKeywords:
    @pytest.mark.asyncio
    async def test_failed_keyword_is_omitted(self, fast_config):
        source = FailingKeywordSource("broken", listings=[make_listing()])
        session = _session(source, fast_config)

        results = await helpers.analyze_keywords(session, ["yoga", "broken", "sleep"], pause=0)

        assert set(results) == {"yoga", "sleep"}
        assert len([c for c in source.calls_to("search") if c["term"] == "broken"]) == 3

    @pytest.mark.asyncio
    async def test_pauses_between_chunks_only(self, fast_config, monkeypatch):
        sleep = AsyncMock()
        monkeypatch.setattr(helpers.asyncio, "sleep", sleep)
        session = _session(StubSource(listings=[make_listing()]), fast_config)

        keywords = [f"kw{i}" for i in range(7)]
        results = await helpers.analyze_keywords(session, keywords)

        assert len(results) == 7
        assert sleep.await_args_list == [call(1.0), call(1.0)]

    @pytest.mark.asyncio
    async def test_empty_batch(self, fast_config):
        session = _session(StubSource(), fast_config)
        assert await helpers.analyze_keywords(session, []) == {}


class TestMarketOpportunity:
    @pytest.mark.asyncio
    async def test_opportunity_fields(self, fast_config):
        listings = [make_listing(f"a{i}", min_installs=1_000_000 if i < 4 else 500) for i in range(10)]
        session = _session(StubSource(listings=listings), fast_config)

        result = await helpers.calculate_market_opportunity(session, "fitness")

        assert result.saturation == pytest.approx(4.0)
        assert 1 <= result.opportunity <= 10
        assert 1 <= result.competition <= 10

    @pytest.mark.asyncio
    async def test_empty_market(self, fast_config):
        session = _session(StubSource(), fast_config)
        result = await helpers.calculate_market_opportunity(session, "nothing here")
        assert result.saturation == 0


class TestCompareApps:
    @pytest.mark.asyncio
    async def test_gap_is_for_first_app(self, fast_config):
        mine = make_listing("mine", title="Fit", score=3.0, min_installs=100, reviews=5)
        theirs = make_listing(
            "theirs", title="Fitness Tracker Pro", description="Workout logging", score=4.5,
            min_installs=1_000_000, reviews=10_000,
        )
        session = _session(StubSource(apps=[mine, theirs]), fast_config)

        comparison = await helpers.compare_apps(session, "mine", "theirs")

        assert comparison.app1.app_id == "mine"
        assert comparison.app2.app_id == "theirs"
        assert "Lower rating than competitors" in comparison.analysis.disadvantages
        assert "Potential for install growth" in comparison.analysis.opportunities


class TestFactories:
    def test_store_specific_sessions(self):
        assert helpers.create_gplay_session().store is StoreType.GPLAY
        assert helpers.create_itunes_session().store is StoreType.ITUNES

    def test_keyword_combinations(self):
        assert helpers.get_keyword_combinations(["sleep", "sounds"]) == ["sleep sounds", "sleep", "sounds"]
