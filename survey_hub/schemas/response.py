"""Pydantic schemas for survey submissions."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from survey_hub.services.rating_scale import MAX_RATING, MIN_RATING


class AnswerIn(BaseModel):
    """One rating in a submission.

    Attributes:
        question_id: Identifier of the question being rated
        rating: Integer rating 1..5
    """
    question_id: str = Field(..., min_length=1, description="Question identifier")
    rating: int = Field(..., strict=True, ge=MIN_RATING, le=MAX_RATING, description="Integer rating 1..5")


class ResponseCreate(BaseModel):
    """A respondent's submission.

    At most one answer per question is accepted; a payload that rates the
    same question twice is rejected as a whole.
    """
    respondent_name: Optional[str] = Field(None, max_length=255)
    respondent_email: Optional[str] = Field(None, max_length=320)
    answers: List[AnswerIn] = Field(default_factory=list)

    @field_validator("respondent_name", "respondent_email")
    @classmethod
    def blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty identity fields as not provided."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def one_answer_per_question(self):
        """Reject submissions that answer a question more than once."""
        seen = set()
        duplicates = []
        for answer in self.answers:
            if answer.question_id in seen:
                duplicates.append(answer.question_id)
            seen.add(answer.question_id)
        if duplicates:
            raise ValueError(f"Duplicate answers for questions: {', '.join(sorted(set(duplicates)))}")
        return self


class AnswerOut(BaseModel):
    """Answer as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    question_id: str
    rating: int


class ResponseOut(BaseModel):
    """Response with its answers."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    survey_id: str
    respondent_name: Optional[str] = None
    respondent_email: Optional[str] = None
    submitted_at: datetime
    answers: List[AnswerOut]
