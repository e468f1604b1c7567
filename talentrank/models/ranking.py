"""Ranking pipeline models for the TalentRank service."""

from typing import Optional, List, Literal
from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum


class RetrievalMethod(str, Enum):
    """Stage 1 retrieval tier that produced the candidate pool."""
    VECTOR_SEARCH = "vector_search"
    FULL_SCAN = "full_scan"


class RerankMethod(str, Enum):
    """Stage 2 ranking path."""
    RERANK = "rerank"
    FALLBACK_NO_RERANK = "fallback_no_rerank"
    SKIPPED = "skipped"


class ConversationTurn(BaseModel):
    """A single conversation turn."""
    role: Literal["user", "assistant"] = Field(..., description="Who produced the turn")
    content: str = Field(..., description="Turn text")


class JobContext(BaseModel):
    """Job posting details used to enrich the query string."""
    title: str
    description: str = ""
    required_skills: List[str] = Field(default_factory=list)


class CandidateProfile(BaseModel):
    """Searchable applicant profile as exposed to callers (no embedding)."""
    id: str
    full_name: Optional[str] = None
    location: Optional[str] = None
    availability_status: Optional[str] = None
    job_title: Optional[str] = None
    experience_level: Optional[str] = None
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list)

    class Config:
        from_attributes = True  # For SQLAlchemy model conversion


class RankedCandidate(BaseModel):
    """Pipeline output unit."""
    id: str = Field(..., description="Candidate identifier")
    profile: CandidateProfile = Field(..., description="Full candidate profile")
    summary: str = Field(default="", description="Resolved resume summary or bio")
    skills: List[str] = Field(default_factory=list, description="Candidate skill list")
    relevance_score: float = Field(..., alias="relevanceScore", description="Stage-dependent relevance score")
    score_is_synthetic: bool = Field(
        default=False,
        alias="scoreIsSynthetic",
        description="True when the score only preserves display order and carries no relevance meaning",
    )

    class Config:
        populate_by_name = True


class PipelineTrace(BaseModel):
    """Human-readable summary of both ranking stages."""
    stage1: str
    stage2: str


class RankCandidatesRequest(BaseModel):
    """Ranking request body."""
    query: Optional[str] = Field(default=None, description="Free-text recruiter query")
    job_id: Optional[str] = Field(default=None, alias="jobId", description="Optional job to scope the search")
    conversation_history: List[ConversationTurn] = Field(
        default_factory=list, alias="conversationHistory", description="Caller-held conversation history"
    )

    class Config:
        populate_by_name = True


class RankCandidatesResponse(BaseModel):
    """Ranking response body."""
    candidates: List[RankedCandidate] = Field(..., description="Ranked candidates")
    conversation_history: List[ConversationTurn] = Field(..., alias="conversationHistory")
    pipeline: PipelineTrace = Field(..., description="Stage trace for observability")

    class Config:
        populate_by_name = True


class RecentJob(BaseModel):
    """Short job summary used for search suggestions."""
    id: str
    title: str
    industry: Optional[str] = None
    job_seniority: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SearchSuggestionsResponse(BaseModel):
    """Quick-search suggestions for the recruiter."""
    recent_jobs: List[RecentJob] = Field(..., alias="recentJobs")
    suggested_prompts: List[str] = Field(..., alias="suggestedPrompts")

    class Config:
        populate_by_name = True
