"""Unit tests for the aggregation engine.

Surveys and responses are plain unsaved ORM objects; no database is needed.
"""

import re
from datetime import datetime, timedelta, timezone

import pytest

from survey_hub.services.analytics import (
    as_utc,
    collect_ratings,
    compute_analytics,
    responses_per_day,
)
from survey_hub.services.rating_scale import round_rating


ZERO_DISTRIBUTION = {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}


class TestComputeAnalytics:
    """Tests for compute_analytics."""

    def test_single_question_three_responses(self, make_survey, make_response):
        """Ratings [2, 4, 4] average to 3.33 with matching distribution."""
        survey = make_survey([["How was it?"]])
        question_id = survey.segments[0].questions[0].id
        responses = [make_response(survey.id, {question_id: rating}) for rating in (2, 4, 4)]

        report = compute_analytics(survey, responses)
        stats = report.question(question_id)

        assert stats.average_rating == 3.33
        assert stats.distribution == {1: 0, 2: 1, 3: 0, 4: 2, 5: 0}
        assert stats.total_answers == 3
        assert report.total_responses == 3
        assert report.segment_analytics[0].average_rating == 3.33
        assert report.overall_average == 3.33

    def test_zero_responses(self, make_survey):
        """A survey without responses reports zeros everywhere."""
        survey = make_survey([["Q1", "Q2"], ["Q3"]])

        report = compute_analytics(survey, [])

        assert report.total_responses == 0
        assert report.overall_average == 0
        assert report.overall_distribution == ZERO_DISTRIBUTION
        assert report.response_data == []
        for segment in report.segment_analytics:
            assert segment.average_rating == 0
            for question in segment.question_analytics:
                assert question.average_rating == 0
                assert question.total_answers == 0
                assert question.distribution == ZERO_DISTRIBUTION

    def test_segment_and_overall_pooling(self, make_survey, make_response):
        """Segment averages pool their questions; overall pools everything."""
        survey = make_survey([["A", "B"], ["C"]])
        a, b = (q.id for q in survey.segments[0].questions)
        c = survey.segments[1].questions[0].id
        responses = [
            make_response(survey.id, {a: 5, b: 4, c: 1}),
            make_response(survey.id, {a: 3, c: 2}),
        ]

        report = compute_analytics(survey, responses)

        assert report.segment_analytics[0].average_rating == round_rating((5 + 4 + 3) / 3)
        assert report.segment_analytics[1].average_rating == 1.5
        assert report.overall_average == round_rating((5 + 4 + 3 + 1 + 2) / 5)
        assert report.overall_distribution == {1: 1, 2: 1, 3: 1, 4: 1, 5: 1}

    def test_preserves_segment_and_question_order(self, make_survey):
        survey = make_survey([["A", "B"], ["C", "D", "E"]])

        report = compute_analytics(survey, [])

        assert [s.segment_id for s in report.segment_analytics] == [s.id for s in survey.segments]
        assert [q.question_text for q in report.segment_analytics[1].question_analytics] == ["C", "D", "E"]

    def test_responses_from_other_surveys_are_ignored(self, make_survey, make_response):
        """Only responses owned by the target survey are counted."""
        survey = make_survey([["Q"]])
        question_id = survey.segments[0].questions[0].id
        responses = [
            make_response(survey.id, {question_id: 5}),
            make_response("another-survey", {question_id: 1}),
        ]

        report = compute_analytics(survey, responses)

        assert report.total_responses == 1
        assert report.question(question_id).distribution == {1: 0, 2: 0, 3: 0, 4: 0, 5: 1}

    def test_answers_to_foreign_questions_are_ignored(self, make_survey, make_response):
        survey = make_survey([["Q"]])
        question_id = survey.segments[0].questions[0].id
        response = make_response(survey.id, {question_id: 4, "not-in-survey": 1})

        report = compute_analytics(survey, [response])

        assert report.overall_distribution == {1: 0, 2: 0, 3: 0, 4: 1, 5: 0}

    def test_repeated_answer_counts_once(self, make_survey, make_response):
        """A second answer to the same question in one response is ignored."""
        survey = make_survey([["Q"]])
        question_id = survey.segments[0].questions[0].id
        response = make_response(survey.id, {question_id: 2})
        response.answers.append(type(response.answers[0])(question_id=question_id, rating=5))

        ratings = collect_ratings(survey, [response])

        assert ratings[question_id] == [2]

    def test_distribution_sums_to_total_answers(self, make_survey, make_response):
        survey = make_survey([["A", "B", "C"]])
        ids = [q.id for q in survey.segments[0].questions]
        responses = [
            make_response(survey.id, {ids[0]: 1, ids[1]: 5}),
            make_response(survey.id, {ids[0]: 3}),
            make_response(survey.id, {ids[0]: 3, ids[1]: 2, ids[2]: 4}),
        ]

        report = compute_analytics(survey, responses)

        for question in report.segment_analytics[0].question_analytics:
            assert sum(question.distribution.values()) == question.total_answers

    def test_is_pure(self, make_survey, make_response):
        """Same inputs give the same report; inputs are not modified."""
        survey = make_survey([["Q"]])
        question_id = survey.segments[0].questions[0].id
        responses = [make_response(survey.id, {question_id: 3})]

        first = compute_analytics(survey, responses)
        second = compute_analytics(survey, responses)

        assert first == second
        assert len(responses[0].answers) == 1
        assert survey.segments[0].questions[0].text == "Q"


class TestTimeSeries:
    """Tests for responses-per-day bucketing."""

    def test_same_day_responses_share_one_entry(self, make_survey, make_response):
        survey = make_survey([["Q"]])
        question_id = survey.segments[0].questions[0].id
        moment = datetime(2026, 5, 4, 9, 30, tzinfo=timezone.utc)
        responses = [
            make_response(survey.id, {question_id: 4}, submitted_at=moment),
            make_response(survey.id, {question_id: 5}, submitted_at=moment),
        ]

        report = compute_analytics(survey, responses)

        assert [(d.date, d.count) for d in report.response_data] == [("2026-05-04", 2)]

    def test_dates_ascending_without_gaps_filled(self, make_response):
        base = datetime(2026, 5, 10, 8, 0, tzinfo=timezone.utc)
        responses = [
            make_response("s", {}, submitted_at=base + timedelta(days=3)),
            make_response("s", {}, submitted_at=base),
            make_response("s", {}, submitted_at=base + timedelta(days=3, hours=2)),
        ]

        series = responses_per_day(responses)

        assert [(d.date, d.count) for d in series] == [("2026-05-10", 1), ("2026-05-13", 2)]
        assert all(re.fullmatch(r"\d{4}-\d{2}-\d{2}", d.date) for d in series)

    def test_dates_use_utc(self, make_response):
        """A late-evening submission east of UTC falls on the previous UTC day."""
        paris_summer = timezone(timedelta(hours=2))
        response = make_response("s", {}, submitted_at=datetime(2026, 6, 2, 1, 0, tzinfo=paris_summer))

        assert responses_per_day([response])[0].date == "2026-06-01"

    def test_naive_timestamps_are_taken_as_utc(self):
        naive = datetime(2026, 6, 2, 23, 59)
        assert as_utc(naive) == datetime(2026, 6, 2, 23, 59, tzinfo=timezone.utc)


class TestReportLookup:
    """Tests for AnalyticsReport.question."""

    def test_unknown_question_raises_key_error(self, make_survey):
        report = compute_analytics(make_survey([["Q"]]), [])
        with pytest.raises(KeyError):
            report.question("missing")
