"""Pydantic schemas for survey definitions.

Creation payloads (from the admin UI or from default survey YAML files)
and the read models returned by the API. Segment and question order are
never supplied by callers: they are assigned from list position.
"""

import json
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from survey_hub.services.rating_scale import RATING_LABEL_COUNT


class QuestionCreate(BaseModel):
    """A rated question in a survey creation payload.

    Attributes:
        text: Question text
        rating_labels: Five labels for ratings 1..5, or None for the defaults.
            A JSON-encoded array string is accepted as well.
    """
    text: str = Field(..., min_length=1, description="Question text")
    rating_labels: Optional[List[str]] = Field(None, description="Five rating labels")

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        """Reject whitespace-only question text."""
        if not v.strip():
            raise ValueError("Question text cannot be empty")
        return v.strip()

    @field_validator("rating_labels", mode="before")
    @classmethod
    def decode_label_string(cls, v):
        """Accept labels sent as a JSON array string."""
        if isinstance(v, str):
            if not v.strip():
                return None
            try:
                return json.loads(v)
            except ValueError:
                raise ValueError("rating_labels must be a JSON array of strings")
        return v

    @field_validator("rating_labels")
    @classmethod
    def exactly_five_labels(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Ensure a custom label set has one non-empty label per rating."""
        if v is None:
            return v
        if len(v) != RATING_LABEL_COUNT:
            raise ValueError(f"rating_labels must contain exactly {RATING_LABEL_COUNT} labels")
        labels = [label.strip() for label in v]
        if any(not label for label in labels):
            raise ValueError("rating_labels cannot contain empty labels")
        return labels


class SegmentCreate(BaseModel):
    """A segment in a survey creation payload.

    Attributes:
        title: Segment title
        questions: Questions in display order (at least one)
    """
    title: str = Field(..., min_length=1, description="Segment title")
    questions: List[QuestionCreate] = Field(..., min_length=1, description="Questions in order")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        """Reject whitespace-only segment titles."""
        if not v.strip():
            raise ValueError("Segment title cannot be empty")
        return v.strip()


class SurveyCreate(BaseModel):
    """Survey creation payload.

    Attributes:
        title: Survey title
        description: Optional description
        is_active: Whether the survey accepts responses
        segments: Segments in display order (at least one)
    """
    title: str = Field(..., min_length=1, description="Survey title")
    description: Optional[str] = Field(None, description="Survey description")
    is_active: bool = Field(True, description="Whether the survey accepts responses")
    segments: List[SegmentCreate] = Field(..., min_length=1, description="Segments in order")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        """Reject whitespace-only survey titles."""
        if not v.strip():
            raise ValueError("Survey title cannot be empty")
        return v.strip()

    @field_validator("description")
    @classmethod
    def blank_description_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Store empty descriptions as NULL."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def question_count(self) -> int:
        """Total number of questions across segments."""
        return sum(len(segment.questions) for segment in self.segments)


class QuestionOut(BaseModel):
    """Question as returned by the API."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    text: str
    order: int
    rating_labels: List[str] = Field(validation_alias="labels")


class SegmentOut(BaseModel):
    """Segment as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    order: int
    questions: List[QuestionOut]


class SurveyOut(BaseModel):
    """Survey with its full segment/question tree."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    segments: List[SegmentOut]
    response_count: int = 0


class DeleteSurveyOut(BaseModel):
    """Result of a cascading survey deletion."""
    success: bool = True
    survey_id: str
    deleted_segments: int
    deleted_questions: int
    deleted_responses: int
    deleted_answers: int


class SeedResultOut(BaseModel):
    """Result of seeding the default surveys."""
    message: str
    created: int
    surveys: List[SurveyOut]


class InitStatusOut(BaseModel):
    """Whether any survey exists yet."""
    initialized: bool
    surveys: List[SurveyOut]
