"""Tests for stage 2 relevance reranking."""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, Mock

from talentrank.models.ranking import RerankMethod
from talentrank.services.errors import ConfigurationError
from talentrank.services.relevance_reranker import RelevanceReranker, RerankService

from conftest import make_profile


def rerank_service_returning(results):
    service = Mock()
    service.rerank = AsyncMock(return_value=results)
    return service


def failing_rerank_service(error):
    service = Mock()
    service.rerank = AsyncMock(side_effect=error)
    return service


class TestRerankService:
    """Test cases for the hosted rerank client."""

    @pytest.mark.asyncio
    async def test_posts_batch_and_parses_results(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"results": [
                {"index": 1, "relevance_score": 0.8},
                {"index": 0, "relevance_score": 0.1},
            ]})

        service = RerankService(
            api_key="key-123",
            api_url="https://rerank.test/v1/rerank",
            model="rerank-english-v3.0",
            transport=httpx.MockTransport(handler),
        )

        results = await service.rerank(["doc a", "doc b"], "go engineer")

        assert results == [
            {"index": 1, "relevance_score": 0.8},
            {"index": 0, "relevance_score": 0.1},
        ]
        assert captured["auth"] == "Bearer key-123"
        assert captured["body"] == {
            "model": "rerank-english-v3.0",
            "query": "go engineer",
            "documents": ["doc a", "doc b"],
            "top_n": 2,
        }

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503, json={"message": "busy"}))
        service = RerankService(api_key="k", api_url="https://rerank.test", transport=transport)

        with pytest.raises(httpx.HTTPStatusError):
            await service.rerank(["doc"], "q")

    @pytest.mark.asyncio
    async def test_malformed_body_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"unexpected": True}))
        service = RerankService(api_key="k", api_url="https://rerank.test", transport=transport)

        with pytest.raises(ValueError):
            await service.rerank(["doc"], "q")

    def test_missing_key_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            RerankService(api_key="").ensure_configured()


class TestRelevanceReranker:
    """Test cases for RelevanceReranker."""

    @pytest.mark.asyncio
    async def test_threshold_filtering_and_rerank_order(self):
        pool = [make_profile(f"p{i}") for i in range(4)]
        service = rerank_service_returning([
            {"index": 2, "relevance_score": 0.91},
            {"index": 0, "relevance_score": 0.005},
            {"index": 3, "relevance_score": 0.0049},
            {"index": 1, "relevance_score": 0.0001},
        ])

        ranked, method = await RelevanceReranker(service, relevance_threshold=0.005).rerank(pool, {}, "q")

        assert method == RerankMethod.RERANK
        assert [r.id for r in ranked] == ["p2", "p0"]
        assert [r.relevance_score for r in ranked] == [0.91, 0.005]
        assert not any(r.score_is_synthetic for r in ranked)

    @pytest.mark.asyncio
    async def test_each_passing_candidate_appears_once(self):
        pool = [make_profile(f"p{i}") for i in range(3)]
        service = rerank_service_returning([
            {"index": 0, "relevance_score": 0.4},
            {"index": 0, "relevance_score": 0.3},
            {"index": 7, "relevance_score": 0.9},
            {"index": 2, "relevance_score": 0.2},
        ])

        ranked, _ = await RelevanceReranker(service, relevance_threshold=0.005).rerank(pool, {}, "q")

        assert [r.id for r in ranked] == ["p0", "p2"]

    @pytest.mark.asyncio
    async def test_zero_matches_is_not_fallback(self):
        pool = [make_profile("p0"), make_profile("p1")]
        service = rerank_service_returning([
            {"index": 0, "relevance_score": 0.001},
            {"index": 1, "relevance_score": 0.0},
        ])

        ranked, method = await RelevanceReranker(service, relevance_threshold=0.005).rerank(pool, {}, "q")

        assert ranked == []
        assert method == RerankMethod.RERANK

    @pytest.mark.asyncio
    async def test_documents_sent_in_pool_order(self):
        pool = [make_profile("p0", full_name="Zed"), make_profile("p1", full_name="Amy")]
        service = rerank_service_returning([])

        await RelevanceReranker(service).rerank(pool, {"p1": "resume"}, "the query")

        documents, query = service.rerank.call_args.args
        assert query == "the query"
        assert documents[0].startswith("Name: Zed")
        assert documents[1].startswith("Name: Amy")
        assert documents[1].endswith("Resume Summary: resume")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pool_size", [1, 5, 12, 30])
    async def test_fallback_scores(self, pool_size):
        pool = [make_profile(f"p{i}") for i in range(pool_size)]
        service = failing_rerank_service(httpx.ConnectError("unreachable"))

        ranked, method = await RelevanceReranker(
            service, fallback_count=12, fallback_score_start=0.5, fallback_score_step=0.01
        ).rerank(pool, {}, "q")

        assert method == RerankMethod.FALLBACK_NO_RERANK
        assert len(ranked) == min(12, pool_size)
        assert [r.id for r in ranked] == [p.id for p in pool[:12]]
        assert ranked[0].relevance_score == pytest.approx(0.5)
        for previous, current in zip(ranked, ranked[1:]):
            assert previous.relevance_score - current.relevance_score == pytest.approx(0.01)
        assert all(r.score_is_synthetic for r in ranked)

    @pytest.mark.asyncio
    async def test_fallback_skips_threshold(self):
        pool = [make_profile(f"p{i}") for i in range(3)]
        service = failing_rerank_service(httpx.ReadTimeout("timed out"))

        ranked, _ = await RelevanceReranker(
            service, relevance_threshold=0.9, fallback_score_start=0.5, fallback_score_step=0.01
        ).rerank(pool, {}, "q")

        assert len(ranked) == 3

    @pytest.mark.asyncio
    async def test_ranked_candidate_fields(self):
        profile = make_profile("p0", bio="bio text", skills=["Go", "Rust"])
        service = rerank_service_returning([{"index": 0, "relevance_score": 0.7}])

        ranked, _ = await RelevanceReranker(service).rerank([profile], {"p0": "resume text"}, "q")

        candidate = ranked[0]
        assert candidate.id == "p0"
        assert candidate.profile == profile
        assert candidate.summary == "resume text"
        assert candidate.skills == ["Go", "Rust"]
        assert candidate.model_dump(by_alias=True)["relevanceScore"] == 0.7
