"""Attach the most recent resume summary to each candidate in the pool."""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError

from ..models.ranking import CandidateProfile
from .profile_store import ProfileStore

logger = logging.getLogger(__name__)

ResumeSummaryMap = Dict[str, str]

NO_RESUME_SUMMARY = "No resume summary available."
NOT_AVAILABLE = "N/A"

# A source reads one value from (profile, resume summary or None)
FieldSource = Callable[[CandidateProfile, Optional[str]], Optional[str]]


def _resume(profile: CandidateProfile, resume_summary: Optional[str]) -> Optional[str]:
    return resume_summary


def _attr(name: str) -> FieldSource:
    return lambda profile, resume_summary: getattr(profile, name)


def _skills(profile: CandidateProfile, resume_summary: Optional[str]) -> Optional[str]:
    return ", ".join(profile.skills) if profile.skills else None


# Composite document lines: (label, ordered sources, default)
DOCUMENT_FIELDS: List[Tuple[str, List[FieldSource], str]] = [
    ("Name", [_attr("full_name")], NOT_AVAILABLE),
    ("Location", [_attr("location")], NOT_AVAILABLE),
    ("Availability", [_attr("availability_status")], NOT_AVAILABLE),
    ("Title", [_attr("job_title")], NOT_AVAILABLE),
    ("Experience Level", [_attr("experience_level")], NOT_AVAILABLE),
    ("Bio", [_attr("bio")], ""),
    ("Skills", [_skills], NOT_AVAILABLE),
    ("Resume Summary", [_resume], NO_RESUME_SUMMARY),
]

# Summary shown to callers
SUMMARY_SOURCES: List[FieldSource] = [_resume, _attr("bio")]


def resolve_field(
    profile: CandidateProfile,
    resume_summary: Optional[str],
    sources: Sequence[FieldSource],
    default: str,
) -> str:
    """Return the first non-empty value from ``sources``, else ``default``."""
    for source in sources:
        value = source(profile, resume_summary)
        if value:
            return value
    return default


@dataclass(frozen=True)
class ResolvedCandidate:
    """Candidate with every display and document field resolved once."""
    profile: CandidateProfile
    summary: str
    document: str


def resolve_candidate(profile: CandidateProfile, summaries: ResumeSummaryMap) -> ResolvedCandidate:
    """Resolve the caller summary and the composite rerank document."""
    resume_summary = summaries.get(profile.id)
    lines = [
        f"{label}: {resolve_field(profile, resume_summary, sources, default)}"
        for label, sources, default in DOCUMENT_FIELDS
    ]
    return ResolvedCandidate(
        profile=profile,
        summary=resolve_field(profile, resume_summary, SUMMARY_SOURCES, ""),
        document="\n".join(lines),
    )


class ProfileEnricher:
    """Builds the per-request resume summary map."""

    def __init__(self, store: ProfileStore):
        self.store = store

    def enrich(self, candidates: Sequence[CandidateProfile]) -> ResumeSummaryMap:
        """
        Map each candidate id to the summary of their latest resume.

        Resumes arrive newest first, so the first one seen per user wins.
        A failed fetch yields an empty map.

        Args:
            candidates: Candidate pool

        Returns:
            Mapping of user id to summary text
        """
        candidate_ids = [c.id for c in candidates]
        try:
            resumes = self.store.get_resumes_for_users(candidate_ids)
        except SQLAlchemyError as e:
            logger.warning(f"Resume lookup failed, continuing without summaries: {e}")
            return {}

        summaries: ResumeSummaryMap = {}
        for resume in resumes:
            if resume.user_id in summaries:
                continue
            feedback = resume.feedback if isinstance(resume.feedback, dict) else {}
            summaries[resume.user_id] = feedback.get("summary") or ""

        logger.info(f"Resolved resume summaries for {len(summaries)}/{len(candidate_ids)} candidates")
        return summaries
