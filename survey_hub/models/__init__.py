"""Database models and session management.

This package contains all SQLAlchemy ORM models and database utilities.
"""

from survey_hub.models.database import Base, engine, SessionLocal, get_db
from survey_hub.models.survey import Survey, Segment, Question
from survey_hub.models.response import Response, Answer

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "Survey",
    "Segment",
    "Question",
    "Response",
    "Answer",
]
