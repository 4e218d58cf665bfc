"""Survey, Segment and Question models.

A survey is a write-once tree: the survey owns its ordered segments, each
segment owns its ordered questions. The whole tree is created in a single
transaction and removed together when the survey is deleted.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from survey_hub.models.database import Base, generate_id
from survey_hub.services.rating_scale import parse_rating_labels


class Survey(Base):
    """Model for a rated questionnaire.

    Attributes:
        id: Primary key (UUID string)
        title: Survey title shown to respondents
        description: Optional introduction text
        is_active: Whether the survey accepts responses
        created_at: Creation timestamp
        segments: Ordered segments (by Segment.order)
        responses: Responses submitted against this survey
    """

    __tablename__ = "surveys"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Survey title"
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Optional survey description"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Whether the survey accepts responses"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When the survey was created"
    )

    segments: Mapped[List["Segment"]] = relationship(
        "Segment",
        back_populates="survey",
        cascade="all, delete-orphan",
        order_by="Segment.order",
    )
    responses: Mapped[List["Response"]] = relationship(
        "Response",
        back_populates="survey",
        cascade="all, delete-orphan",
    )

    def iter_questions(self):
        """Yield (segment, question) pairs in display order."""
        for segment in self.segments:
            for question in segment.questions:
                yield segment, question

    def question_ids(self) -> set:
        """Identifiers of every question in the survey."""
        return {question.id for _, question in self.iter_questions()}

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Survey(id={self.id}, title={self.title!r}, "
            f"segments={len(self.segments)})>"
        )


class Segment(Base):
    """Model for a titled group of questions within a survey.

    Attributes:
        id: Primary key (UUID string)
        survey_id: Foreign key to surveys table
        title: Segment title
        order: Zero-based position, unique within the survey
        questions: Ordered questions (by Question.order)
    """

    __tablename__ = "segments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    survey_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("surveys.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to surveys table"
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Zero-based display order within the survey"
    )

    survey: Mapped["Survey"] = relationship("Survey", back_populates="segments")
    questions: Mapped[List["Question"]] = relationship(
        "Question",
        back_populates="segment",
        cascade="all, delete-orphan",
        order_by="Question.order",
    )

    __table_args__ = (
        UniqueConstraint("survey_id", "order", name="uq_segment_order"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Segment(id={self.id}, order={self.order}, title={self.title!r})>"


class Question(Base):
    """Model for a single rated prompt.

    Attributes:
        id: Primary key (UUID string)
        segment_id: Foreign key to segments table
        text: Question text
        order: Zero-based position, unique within the segment
        rating_labels: JSON array of five labels, or NULL for the defaults
    """

    __tablename__ = "questions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    segment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("segments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to segments table"
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Zero-based display order within the segment"
    )
    rating_labels: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="JSON array of five rating labels"
    )

    segment: Mapped["Segment"] = relationship("Segment", back_populates="questions")

    __table_args__ = (
        UniqueConstraint("segment_id", "order", name="uq_question_order"),
    )

    @property
    def labels(self) -> List[str]:
        """The five rating labels, falling back to the default set."""
        return parse_rating_labels(self.rating_labels)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Question(id={self.id}, order={self.order}, segment_id={self.segment_id})>"
