"""Candidate ranking API endpoints for recruiters."""

import logging
import time
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..middleware.auth import get_current_user
from ..models.database import UserDB
from ..models.ranking import (
    RankCandidatesRequest,
    RankCandidatesResponse,
    RecentJob,
    SearchSuggestionsResponse,
)
from ..services.candidate_retriever import CandidateRetriever
from ..services.cyborgdb_service import CyborgDBService
from ..services.errors import ConfigurationError, RetrievalError, ValidationError
from ..services.profile_store import ProfileStore
from ..services.ranking_pipeline import RankingPipeline
from ..services.relevance_reranker import RelevanceReranker
from ..services.vector_service import EmbeddingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rank-candidates", tags=["ranking"])

SUGGESTED_PROMPTS = [
    "Find full-stack developers with React and Node.js experience",
    "Senior data scientists with Python and machine learning background",
    "Marketing professionals with digital marketing expertise",
    "UX/UI designers with e-commerce and mobile app experience",
]


@lru_cache()
def get_embedding_service() -> EmbeddingService:
    """Shared embedding service so the model loads once per process."""
    return EmbeddingService()


@lru_cache()
def get_vector_store() -> CyborgDBService:
    """Shared CyborgDB service so the index loads once per process."""
    return CyborgDBService()


def get_ranking_pipeline(db: Session = Depends(get_db)) -> RankingPipeline:
    """Build a pipeline bound to the request's database session."""
    store = ProfileStore(db)
    retriever = CandidateRetriever(store, get_embedding_service(), get_vector_store())
    return RankingPipeline(db, retriever=retriever, reranker=RelevanceReranker())


@router.post("", response_model=RankCandidatesResponse)
async def rank_candidates(
    rank_request: RankCandidatesRequest,
    current_user: UserDB = Depends(get_current_user),
    pipeline: RankingPipeline = Depends(get_ranking_pipeline),
) -> RankCandidatesResponse:
    """
    Rank applicant profiles against a free-text query.

    Degraded retrieval or reranking is reported only through the
    ``pipeline`` trace; the status code stays 200.

    Raises:
        HTTPException: 400 for a blank query, 500 for missing configuration
            or an unrecoverable retrieval failure
    """
    try:
        start_time = time.time()

        response = await pipeline.rank(
            raw_query=rank_request.query,
            job_id=rank_request.job_id,
            history=rank_request.conversation_history,
        )

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Ranking completed for user {current_user.id}: "
            f"{len(response.candidates)} results in {elapsed_ms:.2f}ms"
        )
        return response

    except ValidationError as e:
        logger.warning(f"Invalid ranking request from user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except ConfigurationError as e:
        logger.error(f"Ranking unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
    except RetrievalError as e:
        logger.error(f"Ranking failed for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch candidates. Please try again."
        )
    except Exception as e:
        logger.exception(f"Ranking failed for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )


@router.get("", response_model=SearchSuggestionsResponse)
async def get_search_suggestions(
    current_user: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SearchSuggestionsResponse:
    """Return the caller's recent jobs and canned prompts for quick searches."""
    try:
        jobs = ProfileStore(db).get_recent_jobs(current_user.id, limit=5)
    except Exception as e:
        logger.error(f"Failed to load recent jobs for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

    return SearchSuggestionsResponse(
        recent_jobs=[RecentJob.model_validate(job) for job in jobs],
        suggested_prompts=SUGGESTED_PROMPTS,
    )
