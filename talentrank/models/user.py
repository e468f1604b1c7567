"""User models for the TalentRank service."""

from enum import Enum


class UserRole(str, Enum):
    """Account role enumeration."""
    RECRUITER = "recruiter"
    APPLICANT = "applicant"


class UserType(str, Enum):
    """Profile type enumeration. Only applicants are searchable."""
    APPLICANT = "applicant"
    EMPLOYER = "employer"
