"""Integration tests for database operations.

These tests verify the complete database layer including:
- Survey tree creation and ordering
- Response creation and submission checks
- Cascade delete of surveys and responses
- Constraints enforced by the schema itself
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from survey_hub.models.survey import Survey, Segment, Question
from survey_hub.models.response import Response, Answer
from survey_hub.schemas.response import ResponseCreate
from survey_hub.services.analytics import compute_analytics
from survey_hub.services.rating_scale import DEFAULT_RATING_LABELS
from survey_hub.services.survey_repository import (
    ResponseNotFoundError,
    StoreError,
    SubmissionValidationError,
    SurveyNotFoundError,
)


def count(db_session, model) -> int:
    return db_session.execute(select(func.count()).select_from(model)).scalar_one()


def rate_all(survey: Survey, rating: int, **identity) -> ResponseCreate:
    return ResponseCreate(
        answers=[{"question_id": q.id, "rating": rating} for _, q in survey.iter_questions()],
        **identity,
    )


class TestSurveyTree:
    """Integration tests for survey creation and loading."""

    def test_create_survey_assigns_order(self, stored_survey):
        assert stored_survey.id
        assert [s.order for s in stored_survey.segments] == [0, 1]
        assert [s.title for s in stored_survey.segments] == ["Organisation", "Content"]
        for segment in stored_survey.segments:
            assert [q.order for q in segment.questions] == list(range(len(segment.questions)))

    def test_tree_reloads_in_order(self, repository, stored_survey, db_session):
        db_session.expunge_all()

        survey = repository.get_survey_with_tree(stored_survey.id)

        texts = [q.text for _, q in survey.iter_questions()]
        assert texts == ["Venue quality?", "Schedule respected?", "Talk relevance?", "Speaker expertise?"]

    def test_rating_labels_persist(self, stored_survey):
        venue, schedule = stored_survey.segments[0].questions
        assert venue.labels == list(DEFAULT_RATING_LABELS)
        assert schedule.labels == ["Never", "Rarely", "Sometimes", "Often", "Always"]

    def test_unknown_survey(self, repository):
        with pytest.raises(SurveyNotFoundError) as exc_info:
            repository.get_survey_with_tree("does-not-exist")
        assert exc_info.value.survey_id == "does-not-exist"

    def test_list_surveys_newest_first(self, repository, survey_payload, db_session):
        older = repository.create_survey(survey_payload)
        older.created_at = datetime(2025, 1, 1, tzinfo=timezone.utc)
        db_session.commit()
        newer = repository.create_survey(survey_payload.model_copy(update={"title": "Second"}))

        assert [s.id for s in repository.list_surveys()] == [newer.id, older.id]

    def test_find_survey_by_title(self, repository, stored_survey):
        assert repository.find_survey_by_title("Conference feedback").id == stored_survey.id
        assert repository.find_survey_by_title("Missing") is None

    def test_failed_insert_leaves_nothing_behind(self, repository, survey_payload, db_session, failing_question_insert):
        """A failure mid-tree rolls back the survey and its segments too."""
        with pytest.raises(StoreError, match="Failed to create survey"):
            repository.create_survey(survey_payload)

        assert count(db_session, Survey) == 0
        assert count(db_session, Segment) == 0
        assert count(db_session, Question) == 0

    def test_duplicate_segment_order_rejected(self, db_session, stored_survey):
        db_session.add(Segment(survey_id=stored_survey.id, title="Clash", order=0))
        with pytest.raises(IntegrityError):
            db_session.commit()


class TestResponses:
    """Integration tests for storing responses."""

    def test_create_response(self, repository, stored_survey):
        response = repository.create_response(
            stored_survey.id,
            rate_all(stored_survey, 4, respondent_name="Ada", respondent_email="ada@example.org"),
        )

        assert response.id
        assert response.survey_id == stored_survey.id
        assert response.respondent_name == "Ada"
        assert len(response.answers) == 4
        assert response.submitted_at is not None

    def test_anonymous_response(self, repository, stored_survey):
        response = repository.create_response(stored_survey.id, rate_all(stored_survey, 3))
        assert response.respondent_name is None
        assert response.respondent_email is None

    def test_response_to_unknown_survey(self, repository):
        with pytest.raises(SurveyNotFoundError):
            repository.create_response("nope", ResponseCreate())

    def test_answer_to_foreign_question_rejected(self, repository, stored_survey, db_session):
        submission = ResponseCreate(answers=[{"question_id": "elsewhere", "rating": 3}])

        with pytest.raises(SubmissionValidationError, match="elsewhere"):
            repository.create_response(stored_survey.id, submission)
        assert count(db_session, Response) == 0

    def test_inactive_survey_rejects_submissions(self, repository, stored_survey, db_session):
        stored_survey.is_active = False
        db_session.commit()

        with pytest.raises(SubmissionValidationError, match="not accepting"):
            repository.create_response(stored_survey.id, rate_all(stored_survey, 2))

    def test_responses_filtered_by_survey(self, repository, survey_payload):
        first = repository.create_survey(survey_payload)
        second = repository.create_survey(survey_payload.model_copy(update={"title": "Other"}))
        repository.create_response(first.id, rate_all(first, 5))
        repository.create_response(first.id, rate_all(first, 4))
        repository.create_response(second.id, rate_all(second, 1))

        responses = repository.get_responses_for_survey(first.id)

        assert len(responses) == 2
        assert all(r.survey_id == first.id for r in responses)
        assert repository.count_responses() == {first.id: 2, second.id: 1}

    def test_responses_newest_first(self, repository, stored_survey, db_session):
        early = repository.create_response(stored_survey.id, rate_all(stored_survey, 1))
        late = repository.create_response(stored_survey.id, rate_all(stored_survey, 2))
        early.submitted_at = datetime.now(timezone.utc) - timedelta(days=1)
        db_session.commit()

        assert [r.id for r in repository.get_responses_for_survey(stored_survey.id)] == [late.id, early.id]

    def test_duplicate_answer_rejected_by_schema(self, db_session, stored_survey):
        """The store itself refuses two answers to one question in a response."""
        question_id = stored_survey.segments[0].questions[0].id
        db_session.add(Response(
            survey_id=stored_survey.id,
            answers=[
                Answer(question_id=question_id, rating=2),
                Answer(question_id=question_id, rating=5),
            ],
        ))
        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_out_of_range_rating_rejected_by_schema(self, db_session, stored_survey):
        question_id = stored_survey.segments[0].questions[0].id
        db_session.add(Response(
            survey_id=stored_survey.id,
            answers=[Answer(question_id=question_id, rating=9)],
        ))
        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_analytics_over_stored_responses(self, repository, stored_survey):
        for rating in (2, 4, 4):
            repository.create_response(stored_survey.id, rate_all(stored_survey, rating))

        report = compute_analytics(stored_survey, repository.get_responses_for_survey(stored_survey.id))

        assert report.total_responses == 3
        assert report.overall_average == 3.33
        assert report.overall_distribution == {1: 0, 2: 4, 3: 0, 4: 8, 5: 0}


class TestDeletion:
    """Integration tests for cascading deletes."""

    def test_delete_survey_cascades(self, repository, stored_survey, db_session):
        """Deleting a survey removes its tree, responses and answers."""
        repository.create_response(stored_survey.id, rate_all(stored_survey, 5))
        repository.create_response(stored_survey.id, rate_all(stored_survey, 3))

        deletion = repository.delete_survey(stored_survey.id)

        assert deletion.deleted_segments == 2
        assert deletion.deleted_questions == 4
        assert deletion.deleted_responses == 2
        assert deletion.deleted_answers == 8
        for model in (Survey, Segment, Question, Response, Answer):
            assert count(db_session, model) == 0
        with pytest.raises(SurveyNotFoundError):
            repository.get_survey_with_tree(stored_survey.id)

    def test_delete_survey_leaves_other_surveys(self, repository, survey_payload, db_session):
        doomed = repository.create_survey(survey_payload)
        kept = repository.create_survey(survey_payload.model_copy(update={"title": "Kept"}))
        repository.create_response(doomed.id, rate_all(doomed, 1))
        repository.create_response(kept.id, rate_all(kept, 5))

        repository.delete_survey(doomed.id)

        assert count(db_session, Survey) == 1
        assert len(repository.get_responses_for_survey(kept.id)) == 1
        assert count(db_session, Answer) == 4

    def test_delete_unknown_survey(self, repository):
        with pytest.raises(SurveyNotFoundError):
            repository.delete_survey("nope")

    def test_delete_response_keeps_survey(self, repository, stored_survey, db_session):
        response = repository.create_response(stored_survey.id, rate_all(stored_survey, 4))

        repository.delete_response(response.id)

        assert count(db_session, Response) == 0
        assert count(db_session, Answer) == 0
        assert count(db_session, Question) == 4
        with pytest.raises(ResponseNotFoundError):
            repository.get_response(response.id)

    def test_database_level_cascade(self, db_session, stored_survey, repository):
        """Foreign keys alone remove answers when a response row is deleted."""
        response = repository.create_response(stored_survey.id, rate_all(stored_survey, 2))
        db_session.expunge_all()

        db_session.execute(Response.__table__.delete().where(Response.id == response.id))
        db_session.commit()

        assert count(db_session, Answer) == 0
