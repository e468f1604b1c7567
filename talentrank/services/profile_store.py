"""Read-only access to profiles, resumes and jobs."""

import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..models.database import UserProfileDB, ResumeDB, JobDB
from ..models.ranking import CandidateProfile, JobContext
from ..models.user import UserType

logger = logging.getLogger(__name__)


def to_candidate_profile(row: UserProfileDB) -> CandidateProfile:
    """Convert a profile row to the caller-facing model, dropping the embedding."""
    return CandidateProfile(
        id=row.id,
        full_name=row.full_name,
        location=row.location,
        availability_status=row.availability_status,
        job_title=row.job_title,
        experience_level=row.experience_level,
        bio=row.bio,
        skills=list(row.skills or []),
    )


class ProfileStore:
    """Thin query layer over the profile, resume and job tables."""

    def __init__(self, db: Session):
        self.db = db

    def get_profiles_by_ids(self, profile_ids: Sequence[str]) -> List[CandidateProfile]:
        """
        Bulk lookup of applicant profiles by identifier.

        Args:
            profile_ids: Identifiers to resolve

        Returns:
            Resolved profiles; unknown ids are dropped
        """
        if not profile_ids:
            return []
        rows = (
            self.db.query(UserProfileDB)
            .filter(UserProfileDB.id.in_(list(profile_ids)))
            .all()
        )
        return [to_candidate_profile(row) for row in rows]

    def list_applicants(self, limit: int) -> List[CandidateProfile]:
        """Fetch up to ``limit`` applicant profiles in store order."""
        rows = (
            self.db.query(UserProfileDB)
            .filter(UserProfileDB.user_type == UserType.APPLICANT)
            .limit(limit)
            .all()
        )
        return [to_candidate_profile(row) for row in rows]

    def get_resumes_for_users(self, user_ids: Sequence[str]) -> List[ResumeDB]:
        """Fetch every resume owned by ``user_ids``, newest upload first."""
        if not user_ids:
            return []
        return (
            self.db.query(ResumeDB)
            .filter(ResumeDB.user_id.in_(list(user_ids)))
            .order_by(ResumeDB.uploaded_at.desc())
            .all()
        )

    def get_job_context(self, job_id: str) -> Optional[JobContext]:
        """
        Load the job posting used to enrich a query.

        Returns:
            JobContext, or None if the job does not exist
        """
        job = self.db.query(JobDB).filter(JobDB.id == job_id).first()
        if job is None:
            logger.info(f"Job {job_id} not found, composing query without job context")
            return None
        return JobContext(
            title=job.title,
            description=job.description or "",
            required_skills=list(job.required_skills or []),
        )

    def get_recent_jobs(self, user_id: str, limit: int = 5) -> List[JobDB]:
        """Fetch a recruiter's most recently created jobs."""
        return (
            self.db.query(JobDB)
            .filter(JobDB.user_id == user_id)
            .order_by(JobDB.created_at.desc())
            .limit(limit)
            .all()
        )
