"""SQLAlchemy database models for the TalentRank service."""

from sqlalchemy import Column, String, DateTime, Boolean, Enum as SQLEnum, Text, JSON, ForeignKey
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
import uuid

from .user import UserRole, UserType

Base = declarative_base()


def generate_uuid():
    """Generate a UUID string."""
    return str(uuid.uuid4())


class UserDB(Base):
    """Account that can call the API."""
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=generate_uuid)
    email = Column(String, unique=True, nullable=False, index=True)
    role = Column(SQLEnum(UserRole), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class UserProfileDB(Base):
    """Searchable person profile. The pipeline only reads these rows."""
    __tablename__ = "user_profiles"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_type = Column(SQLEnum(UserType), nullable=False, index=True)
    full_name = Column(String, nullable=True)
    location = Column(String, nullable=True)
    availability_status = Column(String, nullable=True)
    job_title = Column(String, nullable=True)
    experience_level = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    skills = Column(JSON, nullable=True)  # Ordered list of strings, duplicates allowed
    embedding = Column(JSON, nullable=True)  # Raw vector, never exposed to callers

    def __repr__(self):
        return f"<UserProfile(id={self.id}, full_name={self.full_name}, user_type={self.user_type})>"


class ResumeDB(Base):
    """Uploaded resume with its generated feedback."""
    __tablename__ = "resumes"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, ForeignKey("user_profiles.id"), nullable=False, index=True)
    feedback = Column(JSON, nullable=True)  # {"summary": ..., ...}
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<Resume(id={self.id}, user_id={self.user_id}, uploaded_at={self.uploaded_at})>"


class JobDB(Base):
    """Job posting used to scope a ranking request."""
    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    required_skills = Column(JSON, nullable=True)
    industry = Column(String, nullable=True)
    job_seniority = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Job(id={self.id}, title={self.title}, user_id={self.user_id})>"
