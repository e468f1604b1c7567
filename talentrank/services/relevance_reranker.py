"""Stage 2: cross-encoder reranking with a deterministic fallback."""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from ..config import get_settings
from ..models.ranking import CandidateProfile, RankedCandidate, RerankMethod
from .errors import ConfigurationError
from .profile_enricher import ResolvedCandidate, ResumeSummaryMap, resolve_candidate

logger = logging.getLogger(__name__)


class RerankService:
    """Client for a hosted Cohere-compatible rerank API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.rerank_api_key
        self.api_url = api_url or settings.rerank_api_url
        self.model = model or settings.rerank_model
        self.timeout_seconds = timeout_seconds or settings.rerank_timeout_seconds
        self._transport = transport

    def ensure_configured(self) -> None:
        """
        Raises:
            ConfigurationError: If no API key is configured
        """
        if not self.api_key:
            raise ConfigurationError("Rerank API key not configured.")

    async def rerank(self, documents: Sequence[str], query: str) -> List[Dict[str, Any]]:
        """
        Score every document against the query in one batch call.

        Args:
            documents: Composite candidate documents
            query: Composed query text

        Returns:
            List of {"index", "relevance_score"} dicts in the service's order

        Raises:
            ConfigurationError: If no API key is configured
            httpx.HTTPError: On transport failure, timeout or non-2xx status
            ValueError: If the response body is malformed
        """
        self.ensure_configured()

        payload = {
            "model": self.model,
            "query": query,
            "documents": list(documents),
            "top_n": len(documents),
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = await client.post(self.api_url, json=payload, headers=headers)
            response.raise_for_status()
            body = response.json()

        results = body.get("results")
        if not isinstance(results, list):
            raise ValueError("Rerank response is missing 'results'")

        return [
            {"index": int(item["index"]), "relevance_score": float(item["relevance_score"])}
            for item in results
        ]


class RelevanceReranker:
    """Ranks the enriched pool and filters near-zero relevance noise."""

    def __init__(
        self,
        rerank_service: Optional[RerankService] = None,
        relevance_threshold: Optional[float] = None,
        fallback_count: Optional[int] = None,
        fallback_score_start: Optional[float] = None,
        fallback_score_step: Optional[float] = None,
    ):
        settings = get_settings()
        self.rerank_service = rerank_service or RerankService()
        self.relevance_threshold = (
            relevance_threshold if relevance_threshold is not None else settings.rerank_relevance_threshold
        )
        self.fallback_count = fallback_count if fallback_count is not None else settings.fallback_result_count
        self.fallback_score_start = (
            fallback_score_start if fallback_score_start is not None else settings.fallback_score_start
        )
        self.fallback_score_step = (
            fallback_score_step if fallback_score_step is not None else settings.fallback_score_step
        )

    async def rerank(
        self,
        candidates: Sequence[CandidateProfile],
        summaries: ResumeSummaryMap,
        query: str,
    ) -> Tuple[List[RankedCandidate], RerankMethod]:
        """
        Rerank the pool against the query.

        Zero results after threshold filtering is a valid outcome. Only a
        failed rerank call switches to the synthetic fallback ordering.

        Args:
            candidates: Pool from stage 1, in retrieval order
            summaries: Resume summary map from the enricher
            query: Composed query text

        Returns:
            Tuple of (ranked candidates, method used)
        """
        resolved = [resolve_candidate(candidate, summaries) for candidate in candidates]
        if not resolved:
            return [], RerankMethod.RERANK

        try:
            results = await self.rerank_service.rerank([r.document for r in resolved], query)
        except Exception as e:
            logger.error(f"Reranking failed, using stage 1 order as fallback: {e!r}")
            ranked = self.fallback_ranking(resolved)
            logger.info(f"Stage 2 fallback_no_rerank: {len(ranked)} ranked results")
            return ranked, RerankMethod.FALLBACK_NO_RERANK

        ranked = self.apply_threshold(resolved, results)
        logger.info(
            f"Stage 2 rerank: {len(ranked)}/{len(results)} results at or above {self.relevance_threshold}"
        )
        return ranked, RerankMethod.RERANK

    def apply_threshold(
        self,
        resolved: Sequence[ResolvedCandidate],
        results: Sequence[Dict[str, Any]],
    ) -> List[RankedCandidate]:
        """Drop results below the threshold and map the rest back, keeping rerank order."""
        ranked: List[RankedCandidate] = []
        seen = set()
        for result in results:
            index = result["index"]
            score = result["relevance_score"]
            if score < self.relevance_threshold:
                continue
            if index in seen or not 0 <= index < len(resolved):
                logger.warning(f"Ignoring unexpected rerank result index {index}")
                continue
            seen.add(index)
            ranked.append(self._to_ranked(resolved[index], score, synthetic=False))
        return ranked

    def fallback_ranking(self, resolved: Sequence[ResolvedCandidate]) -> List[RankedCandidate]:
        """Keep the first candidates in pool order with descending synthetic scores."""
        return [
            self._to_ranked(
                candidate,
                round(self.fallback_score_start - position * self.fallback_score_step, 6),
                synthetic=True,
            )
            for position, candidate in enumerate(resolved[: self.fallback_count])
        ]

    @staticmethod
    def _to_ranked(candidate: ResolvedCandidate, score: float, synthetic: bool) -> RankedCandidate:
        profile = candidate.profile
        return RankedCandidate(
            id=profile.id,
            profile=profile,
            summary=candidate.summary,
            skills=list(profile.skills),
            relevance_score=score,
            score_is_synthetic=synthetic,
        )
