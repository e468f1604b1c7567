"""Stage 1: bounded candidate pool retrieval with tiered fallback."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..models.ranking import CandidateProfile, RetrievalMethod
from ..models.user import UserType
from .cyborgdb_service import CyborgDBService
from .errors import RetrievalError
from .profile_store import ProfileStore
from .vector_service import EmbeddingService

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 50


class RetrievalState(str, Enum):
    """Where retrieval ended up."""
    VECTOR_TIER = "vector_tier"
    FULL_SCAN_TIER = "full_scan_tier"
    TERMINAL_EMPTY = "terminal_empty"


@dataclass
class RetrievalResult:
    """Candidate pool plus the tier that produced it."""
    candidates: List[CandidateProfile] = field(default_factory=list)
    method: RetrievalMethod = RetrievalMethod.FULL_SCAN
    state: RetrievalState = RetrievalState.TERMINAL_EMPTY

    @property
    def is_empty(self) -> bool:
        return self.state == RetrievalState.TERMINAL_EMPTY


class CandidateRetriever:
    """
    Obtain the candidate pool for a composed query.

    Tiers are attempted in order and the first non-empty one wins:

    1. vector search over the applicant profile index (failures are logged
       and fall through)
    2. full scan of applicant profiles (failures are fatal)

    If the full scan is also empty the result is terminal-empty and the
    caller must skip reranking.
    """

    def __init__(
        self,
        store: ProfileStore,
        embedding_service: Optional[EmbeddingService] = None,
        vector_store: Optional[CyborgDBService] = None,
    ):
        self.store = store
        self.embedding_service = embedding_service or EmbeddingService()
        self.vector_store = vector_store or CyborgDBService()

    async def retrieve(self, query: str, pool_size: int = DEFAULT_POOL_SIZE) -> RetrievalResult:
        """
        Run the retrieval state machine.

        Args:
            query: Composed query text
            pool_size: Upper bound on the pool size

        Returns:
            RetrievalResult describing the pool and the tier used

        Raises:
            RetrievalError: If the full-scan tier fails
        """
        candidates = await self._vector_tier(query, pool_size)
        if candidates:
            logger.info(f"Stage 1 vector_search: {len(candidates)} candidates")
            return RetrievalResult(candidates, RetrievalMethod.VECTOR_SEARCH, RetrievalState.VECTOR_TIER)

        candidates = self._full_scan_tier(pool_size)
        if candidates:
            logger.info(f"Stage 1 full_scan: {len(candidates)} candidates")
            return RetrievalResult(candidates, RetrievalMethod.FULL_SCAN, RetrievalState.FULL_SCAN_TIER)

        logger.info("Stage 1 found no applicants at all")
        return RetrievalResult([], RetrievalMethod.FULL_SCAN, RetrievalState.TERMINAL_EMPTY)

    async def _vector_tier(self, query: str, pool_size: int) -> List[CandidateProfile]:
        """Similarity search then bulk profile resolution. Never raises."""
        try:
            query_vector = await self.embedding_service.embed(query)
            matches = await self.vector_store.similarity_search(
                query_vector,
                k=pool_size,
                filters={"user_type": UserType.APPLICANT.value},
            )

            ordered_ids: List[str] = []
            for match in matches:
                profile_id = match.get("id")
                if profile_id and profile_id not in ordered_ids:
                    ordered_ids.append(profile_id)
            if not ordered_ids:
                logger.warning("Vector search returned no matches, using full scan")
                return []

            profiles = self.store.get_profiles_by_ids(ordered_ids)
            if not profiles:
                logger.warning("Vector search matches did not resolve to profiles, using full scan")
                return []

            # Keep similarity order rather than store order
            position = {profile_id: i for i, profile_id in enumerate(ordered_ids)}
            profiles.sort(key=lambda p: position.get(p.id, len(position)))
            return profiles[:pool_size]

        except Exception as e:
            logger.warning(f"Vector search failed, using full scan: {e!r}")
            return []

    def _full_scan_tier(self, pool_size: int) -> List[CandidateProfile]:
        try:
            return self.store.list_applicants(pool_size)
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch candidates: {e}")
            raise RetrievalError(f"Failed to fetch candidates: {e}")
