"""
Unit tests for the MCP tool functions, run against a stubbed session.
"""

import pytest

from aso_intelligence import server
from aso_intelligence.core.errors import ConfigurationError
from aso_intelligence.core.models import StoreType
from aso_intelligence.core.session import KeywordScoringSession

from conftest import StubSource, make_listing


@pytest.fixture
def stub_session(fast_config, monkeypatch):
    apps = [make_listing("mine", title="Fit"), make_listing("theirs", title="Fitness Tracker Pro")]
    source = StubSource(
        listings=[make_listing(f"com.fit.{i}", title="Fitness App") for i in range(10)],
        apps=apps,
    )
    session = KeywordScoringSession(StoreType.GPLAY, fast_config, source=source)
    monkeypatch.setattr(server, "_sessions", {StoreType.GPLAY: session})
    monkeypatch.delenv("ASO_STORE", raising=False)
    return session


class TestTools:
    @pytest.mark.asyncio
    async def test_analyze_keyword(self, stub_session):
        out = await server.aso_analyze_keyword("fitness app")

        assert out["store"] == "gplay"
        assert set(out["result"]) == {"difficulty", "traffic"}
        assert "titleMatches" in out["result"]["difficulty"]
        assert "10 of the top apps" in out["summary"]

    @pytest.mark.asyncio
    async def test_analyze_keywords(self, stub_session):
        out = await server.aso_analyze_keywords(["fitness", "fitness app"], concurrency=5)
        assert set(out["results"]) == {"fitness", "fitness app"}
        assert out["failed"] == []

    @pytest.mark.asyncio
    async def test_market_opportunity(self, stub_session):
        out = await server.aso_market_opportunity("fitness app")
        assert set(out) >= {"opportunity", "saturation", "competition", "summary"}

    @pytest.mark.asyncio
    async def test_compare_apps(self, stub_session):
        out = await server.aso_compare_apps("mine", "theirs")
        assert out["app1"]["appId"] == "mine"
        assert "Title could be optimized for keywords" in out["analysis"]["opportunities"]

    @pytest.mark.asyncio
    async def test_suggest_keywords(self, stub_session):
        out = await server.aso_suggest_keywords(strategy="arbitrary", apps=["theirs"])
        assert out["suggestions"] == ["fitness", "tracker", "pro"]
        assert out["count"] == 3

    @pytest.mark.asyncio
    async def test_keyword_combinations(self):
        out = await server.aso_keyword_combinations(["habit", "tracker"])
        assert out["combinations"] == ["habit tracker", "habit", "tracker"]

    @pytest.mark.asyncio
    async def test_search(self, stub_session):
        out = await server.aso_search("fitness", num=3)
        assert out["count"] == 3
        assert out["results"][0]["appId"] == "com.fit.0"


def test_unknown_store_argument(stub_session):
    with pytest.raises(ConfigurationError):
        server._get_session("blackberry")


def test_difficulty_labels():
    assert server._difficulty_label(8) == "hard"
    assert server._difficulty_label(5) == "moderate"
    assert server._difficulty_label(2) == "easy"
