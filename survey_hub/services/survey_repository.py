"""Data access for surveys and responses.

This module is the only place that reads or writes survey data. Each
write (survey tree, response with its answers, cascading deletion) is a
single transaction: it either commits as a whole or is rolled back.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from survey_hub.models.survey import Survey, Segment, Question
from survey_hub.models.response import Response, Answer
from survey_hub.schemas.survey import SurveyCreate
from survey_hub.schemas.response import ResponseCreate
from survey_hub.services.rating_scale import serialize_rating_labels
from survey_hub.logging_config import get_logger

logger = get_logger(__name__)


class SurveyNotFoundError(Exception):
    """Raised when a survey id does not exist in the store."""

    def __init__(self, survey_id: str):
        super().__init__(f"Survey not found: {survey_id}")
        self.survey_id = survey_id


class ResponseNotFoundError(Exception):
    """Raised when a response id does not exist in the store."""

    def __init__(self, response_id: str):
        super().__init__(f"Response not found: {response_id}")
        self.response_id = response_id


class SubmissionValidationError(Exception):
    """Raised when a submission is rejected before anything is written."""
    pass


class StoreError(Exception):
    """Raised when the database fails during a read or write."""
    pass


@dataclass
class SurveyDeletion:
    """Counts of rows removed by a cascading survey deletion."""
    survey_id: str
    deleted_segments: int
    deleted_questions: int
    deleted_responses: int
    deleted_answers: int


class SurveyRepository:
    """Read and write surveys and responses through a SQLAlchemy session.

    Usage:
        repository = SurveyRepository(db)
        survey = repository.get_survey_with_tree(survey_id)
        responses = repository.get_responses_for_survey(survey_id)
    """

    def __init__(self, db: Session):
        """Initialize repository.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _tree_query(self):
        return select(Survey).options(
            selectinload(Survey.segments).selectinload(Segment.questions)
        )

    def list_surveys(self) -> List[Survey]:
        """All surveys with their trees, newest first."""
        try:
            return list(
                self.db.execute(
                    self._tree_query().order_by(Survey.created_at.desc())
                ).scalars().all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to list surveys: {e}")
            raise StoreError("Failed to list surveys") from e

    def get_survey_with_tree(self, survey_id: str) -> Survey:
        """Load a survey with its ordered segments and questions.

        Raises:
            SurveyNotFoundError: If no survey has this id
            StoreError: If the query fails
        """
        try:
            survey = self.db.execute(
                self._tree_query().where(Survey.id == survey_id)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load survey: {e}", extra={"survey_id": survey_id})
            raise StoreError("Failed to load survey") from e

        if survey is None:
            raise SurveyNotFoundError(survey_id)
        return survey

    def find_survey_by_title(self, title: str) -> Optional[Survey]:
        """Return the first survey with exactly this title, if any."""
        try:
            return self.db.execute(
                select(Survey).where(Survey.title == title).limit(1)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up survey by title: {e}")
            raise StoreError("Failed to look up survey") from e

    def get_responses_for_survey(self, survey_id: str) -> List[Response]:
        """Responses owned by one survey, newest first, answers attached.

        Only rows whose survey_id equals ``survey_id`` are returned.
        """
        try:
            return list(
                self.db.execute(
                    select(Response)
                    .where(Response.survey_id == survey_id)
                    .options(selectinload(Response.answers))
                    .order_by(Response.submitted_at.desc(), Response.id.desc())
                ).scalars().all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load responses: {e}", extra={"survey_id": survey_id})
            raise StoreError("Failed to load responses") from e

    def count_responses(self, survey_ids: Optional[List[str]] = None) -> Dict[str, int]:
        """Number of responses per survey id (surveys without any are omitted)."""
        query = select(Response.survey_id, func.count(Response.id)).group_by(Response.survey_id)
        if survey_ids is not None:
            query = query.where(Response.survey_id.in_(survey_ids))
        try:
            return {survey_id: count for survey_id, count in self.db.execute(query).all()}
        except SQLAlchemyError as e:
            logger.error(f"Failed to count responses: {e}")
            raise StoreError("Failed to count responses") from e

    def get_response(self, response_id: str) -> Response:
        """Load a single response with its answers.

        Raises:
            ResponseNotFoundError: If no response has this id
        """
        try:
            response = self.db.execute(
                select(Response)
                .where(Response.id == response_id)
                .options(selectinload(Response.answers))
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load response: {e}", extra={"response_id": response_id})
            raise StoreError("Failed to load response") from e

        if response is None:
            raise ResponseNotFoundError(response_id)
        return response

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_survey(self, schema: SurveyCreate) -> Survey:
        """Create a survey and its whole segment/question tree atomically.

        Orders are assigned from list position (zero-based), which keeps them
        unique and contiguous within each parent.

        Raises:
            StoreError: If the insert fails (nothing is written)
        """
        survey = Survey(
            title=schema.title,
            description=schema.description,
            is_active=schema.is_active,
            segments=[
                Segment(
                    title=segment.title,
                    order=segment_index,
                    questions=[
                        Question(
                            text=question.text,
                            order=question_index,
                            rating_labels=serialize_rating_labels(question.rating_labels),
                        )
                        for question_index, question in enumerate(segment.questions)
                    ],
                )
                for segment_index, segment in enumerate(schema.segments)
            ],
        )

        try:
            self.db.add(survey)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create survey {schema.title!r}: {e}")
            raise StoreError("Failed to create survey") from e

        logger.info(
            f"Created survey {schema.title!r} with {len(schema.segments)} segments "
            f"and {schema.question_count} questions",
            extra={"survey_id": survey.id},
        )
        return self.get_survey_with_tree(survey.id)

    def create_response(self, survey_id: str, submission: ResponseCreate) -> Response:
        """Store one respondent's submission with its answers.

        Raises:
            SurveyNotFoundError: If the survey does not exist
            SubmissionValidationError: If the survey is closed or an answer
                references a question outside this survey
            StoreError: If the insert fails (nothing is written)
        """
        survey = self.get_survey_with_tree(survey_id)

        if not survey.is_active:
            raise SubmissionValidationError("Survey is not accepting responses")

        known_questions = survey.question_ids()
        unknown = sorted(
            {answer.question_id for answer in submission.answers} - known_questions
        )
        if unknown:
            raise SubmissionValidationError(
                f"Answers reference questions outside this survey: {', '.join(unknown)}"
            )

        response = Response(
            survey_id=survey.id,
            respondent_name=submission.respondent_name,
            respondent_email=submission.respondent_email,
            answers=[
                Answer(question_id=answer.question_id, rating=answer.rating)
                for answer in submission.answers
            ],
        )

        try:
            self.db.add(response)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to store response: {e}", extra={"survey_id": survey_id})
            raise StoreError("Failed to store response") from e

        logger.info(
            f"Stored response with {len(submission.answers)} answers",
            extra={"survey_id": survey_id, "response_id": response.id},
        )
        return response

    def delete_response(self, response_id: str) -> None:
        """Delete one response and its answers; the survey is untouched."""
        response = self.get_response(response_id)
        try:
            self.db.delete(response)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete response: {e}", extra={"response_id": response_id})
            raise StoreError("Failed to delete response") from e

        logger.info("Deleted response", extra={"response_id": response_id})

    def delete_survey(self, survey_id: str) -> SurveyDeletion:
        """Delete a survey and everything it owns.

        Cascades explicitly along both ownership paths in one transaction:
        responses -> answers, then segments -> questions.

        Raises:
            SurveyNotFoundError: If the survey does not exist
            StoreError: If the deletion fails (nothing is removed)
        """
        survey = self.get_survey_with_tree(survey_id)
        responses = self.get_responses_for_survey(survey_id)

        deletion = SurveyDeletion(
            survey_id=survey_id,
            deleted_segments=len(survey.segments),
            deleted_questions=sum(len(segment.questions) for segment in survey.segments),
            deleted_responses=len(responses),
            deleted_answers=sum(len(response.answers) for response in responses),
        )

        try:
            for response in responses:
                self.db.delete(response)
            self.db.flush()
            self.db.delete(survey)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete survey: {e}", extra={"survey_id": survey_id})
            raise StoreError("Failed to delete survey") from e

        logger.info(
            f"Deleted survey with {deletion.deleted_segments} segments, "
            f"{deletion.deleted_questions} questions, {deletion.deleted_responses} responses "
            f"and {deletion.deleted_answers} answers",
            extra={"survey_id": survey_id},
        )
        return deletion
