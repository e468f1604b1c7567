"""Models package initialization."""

from .user import UserRole, UserType
from .ranking import (
    RetrievalMethod,
    RerankMethod,
    ConversationTurn,
    JobContext,
    CandidateProfile,
    RankedCandidate,
    PipelineTrace,
    RankCandidatesRequest,
    RankCandidatesResponse,
    RecentJob,
    SearchSuggestionsResponse,
)
from .database import Base, UserDB, UserProfileDB, ResumeDB, JobDB

__all__ = [
    # Enums
    "UserRole",
    "UserType",
    "RetrievalMethod",
    "RerankMethod",
    # Pydantic models
    "ConversationTurn",
    "JobContext",
    "CandidateProfile",
    "RankedCandidate",
    "PipelineTrace",
    "RankCandidatesRequest",
    "RankCandidatesResponse",
    "RecentJob",
    "SearchSuggestionsResponse",
    # SQLAlchemy models
    "Base",
    "UserDB",
    "UserProfileDB",
    "ResumeDB",
    "JobDB",
]
