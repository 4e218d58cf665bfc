"""Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import os
from datetime import datetime, timezone
from typing import Callable, Generator, List, Optional

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set required environment variables for tests BEFORE importing package modules
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

from survey_hub.models.database import Base, enable_sqlite_foreign_keys
from survey_hub.models.survey import Survey, Segment, Question
from survey_hub.models.response import Response, Answer
from survey_hub.schemas.survey import SurveyCreate
from survey_hub.services.survey_repository import SurveyRepository


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine with SQLite in-memory database.

    Yields:
        Engine: SQLAlchemy engine for testing

    Note:
        StaticPool keeps a single connection so the API tests (which run
        handlers in a worker thread) see the same in-memory database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session.

    Args:
        db_engine: Test database engine fixture

    Yields:
        Session: SQLAlchemy session for testing
    """
    TestSessionLocal = sessionmaker(
        bind=db_engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )

    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()


@pytest.fixture
def repository(db_session) -> SurveyRepository:
    """Repository bound to the test session."""
    return SurveyRepository(db_session)


@pytest.fixture
def failing_question_insert():
    """Make every Question insert fail as if the database had gone away."""
    def raise_operational_error(mapper, connection, target):
        raise OperationalError("INSERT INTO questions", {}, Exception("database is locked"))

    event.listen(Question, "before_insert", raise_operational_error)
    yield
    event.remove(Question, "before_insert", raise_operational_error)


@pytest.fixture
def survey_payload() -> SurveyCreate:
    """Two segments with two questions each; one question has custom labels."""
    return SurveyCreate(
        title="Conference feedback",
        description="Post-event questionnaire",
        segments=[
            {
                "title": "Organisation",
                "questions": [
                    {"text": "Venue quality?"},
                    {"text": "Schedule respected?", "rating_labels": ["Never", "Rarely", "Sometimes", "Often", "Always"]},
                ],
            },
            {
                "title": "Content",
                "questions": [
                    {"text": "Talk relevance?"},
                    {"text": "Speaker expertise?"},
                ],
            },
        ],
    )


@pytest.fixture
def stored_survey(repository, survey_payload) -> Survey:
    """The survey_payload persisted through the repository."""
    return repository.create_survey(survey_payload)


def build_survey(
    segments: List[List[str]],
    survey_id: str = "survey-1",
    title: str = "Test survey",
) -> Survey:
    """Build an unsaved survey tree; question ids are '<segment>-<question>'.

    Args:
        segments: One list of question texts per segment
    """
    return Survey(
        id=survey_id,
        title=title,
        is_active=True,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        segments=[
            Segment(
                id=f"{survey_id}-seg{segment_index}",
                title=f"Segment {segment_index + 1}",
                order=segment_index,
                questions=[
                    Question(
                        id=f"{survey_id}-q{segment_index}-{question_index}",
                        text=text,
                        order=question_index,
                    )
                    for question_index, text in enumerate(texts)
                ],
            )
            for segment_index, texts in enumerate(segments)
        ],
    )


def build_response(
    survey_id: str,
    ratings: dict,
    submitted_at: Optional[datetime] = None,
    response_id: Optional[str] = None,
    name: Optional[str] = None,
    email: Optional[str] = None,
) -> Response:
    """Build an unsaved response from a {question_id: rating} mapping."""
    return Response(
        id=response_id,
        survey_id=survey_id,
        respondent_name=name,
        respondent_email=email,
        submitted_at=submitted_at or datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
        answers=[
            Answer(question_id=question_id, rating=rating)
            for question_id, rating in ratings.items()
        ],
    )


@pytest.fixture
def make_survey() -> Callable[..., Survey]:
    """Factory for unsaved survey trees (see build_survey)."""
    return build_survey


@pytest.fixture
def make_response() -> Callable[..., Response]:
    """Factory for unsaved responses (see build_response)."""
    return build_response
