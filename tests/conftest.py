"""Shared fixtures for the TalentRank test suite."""

import os
from datetime import datetime, timedelta, timezone

# Configure the app for testing BEFORE importing it
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RERANK_API_KEY"] = "test-rerank-key"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DEBUG"] = "false"

from talentrank.config import get_settings
get_settings.cache_clear()

import numpy as np
import pytest
from unittest.mock import AsyncMock, Mock
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from main import app
from talentrank.database import engine, get_db
from talentrank.models.database import Base, UserDB, UserProfileDB, ResumeDB, JobDB
from talentrank.models.ranking import CandidateProfile
from talentrank.models.user import UserRole, UserType
from talentrank.services.auth import auth_service

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def recruiter(db_session):
    """Active recruiter account."""
    user = UserDB(
        id="recruiter-1",
        email="recruiter@example.com",
        role=UserRole.RECRUITER,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def auth_headers(recruiter):
    token = auth_service.create_access_token({"sub": recruiter.id})
    return {"Authorization": f"Bearer {token}"}


def make_profile(profile_id, **overrides):
    """Build a CandidateProfile with sensible defaults."""
    data = {
        "id": profile_id,
        "full_name": f"Candidate {profile_id}",
        "location": "Berlin",
        "availability_status": "available",
        "job_title": "Backend Engineer",
        "experience_level": "senior",
        "bio": f"Bio of {profile_id}",
        "skills": ["Go", "PostgreSQL"],
    }
    data.update(overrides)
    return CandidateProfile(**data)


def add_applicant(db, profile_id, **overrides):
    """Insert an applicant profile row."""
    data = {
        "id": profile_id,
        "user_type": UserType.APPLICANT,
        "full_name": f"Candidate {profile_id}",
        "job_title": "Backend Engineer",
        "bio": f"Bio of {profile_id}",
        "skills": ["Go", "PostgreSQL"],
        "embedding": [0.1, 0.2, 0.3],
    }
    data.update(overrides)
    row = UserProfileDB(**data)
    db.add(row)
    db.commit()
    return row


def add_resume(db, user_id, summary, uploaded_at, resume_id=None):
    """Insert a resume row with a feedback summary."""
    row = ResumeDB(
        id=resume_id or f"resume-{user_id}-{uploaded_at.isoformat()}",
        user_id=user_id,
        feedback={"summary": summary} if summary is not None else None,
        uploaded_at=uploaded_at,
    )
    db.add(row)
    db.commit()
    return row


def add_job(db, job_id, user_id, created_at=None, **overrides):
    """Insert a job posting row."""
    data = {
        "id": job_id,
        "user_id": user_id,
        "title": "Senior Go Engineer",
        "description": "Build payment APIs",
        "required_skills": ["Go", "gRPC"],
        "industry": "Fintech",
        "job_seniority": "senior",
        "created_at": created_at or datetime.now(timezone.utc),
    }
    data.update(overrides)
    row = JobDB(**data)
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def base_time():
    return datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def one_day():
    return timedelta(days=1)


@pytest.fixture
def embedding_service():
    """Embedding service stub returning a fixed unit vector."""
    service = Mock()
    service.embed = AsyncMock(return_value=np.array([1.0, 0.0, 0.0]))
    return service


@pytest.fixture
def vector_store():
    """Vector store stub with no matches by default."""
    store = Mock()
    store.similarity_search = AsyncMock(return_value=[])
    store.health_check = AsyncMock(return_value=True)
    return store
