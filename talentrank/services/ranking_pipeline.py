"""Two-stage candidate ranking pipeline."""

import logging
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models.ranking import ConversationTurn, JobContext, RankCandidatesResponse, RerankMethod
from . import conversation_tracker
from .candidate_retriever import CandidateRetriever
from .profile_enricher import ProfileEnricher
from .profile_store import ProfileStore
from .query_composer import compose_query, validate_query
from .relevance_reranker import RelevanceReranker

logger = logging.getLogger(__name__)


class RankingPipeline:
    """
    Turns a recruiter query into a ranked list of candidates.

    Query composition -> candidate retrieval -> resume enrichment ->
    relevance reranking -> conversation update. Every call is independent;
    the only state carried between requests is the history the caller
    passes in and gets back.
    """

    def __init__(
        self,
        db: Session,
        retriever: Optional[CandidateRetriever] = None,
        enricher: Optional[ProfileEnricher] = None,
        reranker: Optional[RelevanceReranker] = None,
    ):
        self.settings = get_settings()
        self.store = ProfileStore(db)
        self.retriever = retriever or CandidateRetriever(self.store)
        self.enricher = enricher or ProfileEnricher(self.store)
        self.reranker = reranker or RelevanceReranker()

    def _load_job_context(self, job_id: Optional[str]) -> Optional[JobContext]:
        if not job_id:
            return None
        try:
            return self.store.get_job_context(job_id)
        except SQLAlchemyError as e:
            logger.warning(f"Job lookup failed for {job_id}, continuing without job context: {e}")
            return None

    async def rank(
        self,
        raw_query: str,
        job_id: Optional[str] = None,
        history: Optional[Sequence[ConversationTurn]] = None,
    ) -> RankCandidatesResponse:
        """
        Run the full pipeline for one request.

        Args:
            raw_query: Free-text recruiter query
            job_id: Optional job posting to scope the search
            history: Caller-held conversation history

        Returns:
            Ranked candidates, the updated history and a stage trace

        Raises:
            ValidationError: If the query is blank
            ConfigurationError: If the rerank credential is missing
            RetrievalError: If the full-scan tier fails
        """
        validate_query(raw_query)
        self.reranker.rerank_service.ensure_configured()
        history = list(history or [])

        job_context = self._load_job_context(job_id)
        query = compose_query(
            raw_query,
            history=history,
            job_context=job_context,
            context_turns=self.settings.history_context_turns,
        )

        retrieval = await self.retriever.retrieve(query, pool_size=self.settings.candidate_pool_size)
        if retrieval.is_empty:
            return RankCandidatesResponse(
                candidates=[],
                conversation_history=conversation_tracker.record_user_turn(history, raw_query),
                pipeline=conversation_tracker.build_trace(retrieval.method, 0, RerankMethod.SKIPPED, 0),
            )

        summaries = self.enricher.enrich(retrieval.candidates)
        ranked, rerank_method = await self.reranker.rerank(retrieval.candidates, summaries, query)

        trace = conversation_tracker.build_trace(
            retrieval.method, len(retrieval.candidates), rerank_method, len(ranked)
        )
        logger.info(f"Pipeline complete: stage1={trace.stage1}, stage2={trace.stage2}")

        return RankCandidatesResponse(
            candidates=ranked,
            conversation_history=conversation_tracker.record(history, raw_query, len(ranked)),
            pipeline=trace,
        )
