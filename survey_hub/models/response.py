"""Response and Answer models for storing survey submissions.

Each response is one respondent's submission against a survey. Responses
are append-only: they are created with their answers in one transaction
and never updated.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from survey_hub.models.database import Base, generate_id


class Response(Base):
    """Model for one respondent's submission.

    Responses are deleted when the parent survey is deleted (CASCADE);
    deleting a response never affects the survey.

    Attributes:
        id: Primary key (UUID string)
        survey_id: Foreign key to surveys table
        respondent_name: Optional respondent name
        respondent_email: Optional respondent email
        submitted_at: When the response was submitted
        answers: Answers in this submission
    """

    __tablename__ = "responses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    survey_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("surveys.id", ondelete="CASCADE"),
        nullable=False,
        comment="Foreign key to surveys table"
    )
    respondent_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    respondent_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When the response was submitted"
    )

    survey: Mapped["Survey"] = relationship("Survey", back_populates="responses")
    answers: Mapped[List["Answer"]] = relationship(
        "Answer",
        back_populates="response",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        # Responses are always read per survey, newest first
        Index("idx_response_survey_submitted", "survey_id", "submitted_at"),
    )

    def answer_for(self, question_id: str) -> Optional["Answer"]:
        """Return the answer to a question, looked up by question id."""
        for answer in self.answers:
            if answer.question_id == question_id:
                return answer
        return None

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Response(id={self.id}, survey_id={self.survey_id}, "
            f"answers={len(self.answers)})>"
        )


class Answer(Base):
    """Model for one rating given to one question within a response.

    Attributes:
        id: Primary key (UUID string)
        response_id: Foreign key to responses table
        question_id: Foreign key to questions table
        rating: Integer rating 1..5
    """

    __tablename__ = "answers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    response_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("responses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to responses table"
    )
    question_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to questions table"
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    response: Mapped["Response"] = relationship("Response", back_populates="answers")
    question: Mapped["Question"] = relationship("Question")

    __table_args__ = (
        UniqueConstraint("response_id", "question_id", name="uq_answer_per_question"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_answer_rating_range"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Answer(id={self.id}, question_id={self.question_id}, "
            f"rating={self.rating})>"
        )
