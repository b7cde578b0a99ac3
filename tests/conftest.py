"""Pytest configuration for placement backend tests."""

import os
from datetime import datetime, timedelta
from typing import Generator
from uuid import uuid4

import pytest
from hypothesis import settings as hypothesis_settings, Verbosity
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from placement_backend.core.base import Base
from placement_backend.models import Application, Job, Student
from placement_backend.models.application_status import ApplicationStatus


class PropertyTestConfig:
    """Hypothesis profiles for the property-based tests."""
    
    MIN_ITERATIONS = 100
    MAX_ITERATIONS = 500
    DEADLINE = 5000  # milliseconds per example; each one touches SQLite
    
    @classmethod
    def configure_hypothesis(cls):
        hypothesis_settings.register_profile(
            "default",
            max_examples=cls.MIN_ITERATIONS,
            deadline=cls.DEADLINE,
            print_blob=True,
        )
        hypothesis_settings.register_profile(
            "ci",
            max_examples=cls.MIN_ITERATIONS,
            deadline=cls.DEADLINE,
            verbosity=Verbosity.quiet,
            database=None,
            derandomize=True,
            print_blob=True,
        )
        hypothesis_settings.register_profile(
            "dev",
            max_examples=cls.MAX_ITERATIONS,
            deadline=None,
            verbosity=Verbosity.verbose,
            print_blob=True,
        )
        hypothesis_settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


PropertyTestConfig.configure_hypothesis()


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        path = str(item.fspath)
        if "property_based" in path:
            item.add_marker(pytest.mark.property_test)
        elif "test_api" in path:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


def make_engine():
    """In-memory SQLite engine shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def session_factory() -> Generator[sessionmaker, None, None]:
    engine = make_engine()
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    """Provide a database session backed by a fresh in-memory schema."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def recruiter_user_id():
    return uuid4()


@pytest.fixture
def make_job(db_session, recruiter_user_id):
    """Factory for approved, open job postings."""
    def _make_job(**overrides) -> Job:
        values = {
            "recruiter_id": recruiter_user_id,
            "title": "Backend Engineer",
            "description": "Build APIs for the placement portal",
            "job_type": "full-time",
            "location": "Bengaluru",
            "skills_required": ["python", "sql"],
            "min_cgpa": 7.0,
            "max_backlogs": 0,
            "branches": ["CSE", "IT"],
            "graduation_years": [2025],
            "application_deadline": datetime.utcnow() + timedelta(days=14),
            "approval_status": "approved",
            "is_active": True,
        }
        values.update(overrides)
        job = Job(**values)
        db_session.add(job)
        db_session.commit()
        db_session.refresh(job)
        return job
    
    return _make_job


@pytest.fixture
def make_student(db_session):
    """Factory for eligible students."""
    counter = {"n": 0}
    
    def _make_student(**overrides) -> Student:
        counter["n"] += 1
        values = {
            "user_id": uuid4(),
            "registration_number": f"REG{counter['n']:05d}",
            "first_name": "Asha",
            "last_name": f"Rao{counter['n']}",
            "branch": "CSE",
            "cgpa": 8.2,
            "backlogs": 0,
            "graduation_year": 2025,
            "skills": ["python", "fastapi", "postgresql"],
            "projects": [{"title": "Placement tracker", "description": "CRUD app", "technologies": ["python"]}],
            "internships": [{"company_name": "Acme", "role": "Intern", "duration": "3 months"}],
        }
        values.update(overrides)
        student = Student(**values)
        db_session.add(student)
        db_session.commit()
        db_session.refresh(student)
        return student
    
    return _make_student


@pytest.fixture
def make_application(db_session):
    """Factory for applications in any status, bypassing the lifecycle service."""
    def _make_application(job: Job, student: Student, status=ApplicationStatus.APPLIED, **overrides) -> Application:
        values = {
            "job_id": job.id,
            "student_id": student.id,
            "recruiter_id": job.recruiter_id,
            "status": ApplicationStatus(status).value,
        }
        values.update(overrides)
        application = Application(**values)
        db_session.add(application)
        db_session.commit()
        db_session.refresh(application)
        return application
    
    return _make_application


@pytest.fixture
def job(make_job):
    return make_job()


@pytest.fixture
def student(make_student):
    return make_student()
