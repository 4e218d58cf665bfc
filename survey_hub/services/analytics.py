"""Aggregation of survey responses into an analytics report.

``compute_analytics`` is a pure function over an already-loaded survey tree
and its responses: it reads no data of its own and mutates nothing. The
export formatter reuses ``collect_ratings`` and the report itself so that
its statistics sheet can never disagree with the analytics view.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Dict, Iterable, List

from survey_hub.models.survey import Survey
from survey_hub.models.response import Response
from survey_hub.schemas.analytics import (
    AnalyticsReport,
    DailyResponseCount,
    QuestionAnalytics,
    SegmentAnalytics,
)
from survey_hub.services.rating_scale import (
    is_valid_rating,
    mean_rating,
    rating_distribution,
)
from survey_hub.logging_config import get_logger

logger = get_logger(__name__)


def as_utc(moment: datetime) -> datetime:
    """Return moment in UTC; naive values are taken to already be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def responses_for(survey: Survey, responses: Iterable[Response]) -> List[Response]:
    """Keep only the responses owned by this survey."""
    return [response for response in responses if response.survey_id == survey.id]


def collect_ratings(survey: Survey, responses: Iterable[Response]) -> Dict[str, List[int]]:
    """Gather the ratings given to each question of the survey.

    Answers are matched by question id. Answers to questions outside the
    survey, out-of-range ratings, and repeated answers to the same question
    within one response (only the first counts) are ignored.

    Returns:
        Mapping of every question id in the survey to its list of ratings
    """
    ratings: Dict[str, List[int]] = {question.id: [] for _, question in survey.iter_questions()}

    for response in responses_for(survey, responses):
        answered = set()
        for answer in response.answers:
            if answer.question_id not in ratings or answer.question_id in answered:
                continue
            if not is_valid_rating(answer.rating):
                logger.warning(
                    f"Ignoring out-of-range rating {answer.rating!r}",
                    extra={"survey_id": survey.id, "response_id": response.id},
                )
                continue
            answered.add(answer.question_id)
            ratings[answer.question_id].append(answer.rating)

    return ratings


def responses_per_day(responses: Iterable[Response]) -> List[DailyResponseCount]:
    """Count responses per UTC calendar date, ascending; empty days are omitted."""
    counts = Counter(
        as_utc(response.submitted_at).strftime("%Y-%m-%d") for response in responses
    )
    return [DailyResponseCount(date=day, count=counts[day]) for day in sorted(counts)]


def compute_analytics(survey: Survey, responses: Iterable[Response]) -> AnalyticsReport:
    """Compute per-question, per-segment and overall statistics.

    Args:
        survey: Survey with its full, ordered segment/question tree
        responses: Responses of the survey with their answers; responses
            belonging to any other survey are ignored

    Returns:
        AnalyticsReport. Averages are rounded half-up to 2 decimals and are
        0 when there is nothing to average; distributions always hold the
        five rating keys.

    Example:
        >>> report = compute_analytics(survey, repository.get_responses_for_survey(survey.id))
        >>> report.overall_average
        3.33
    """
    owned = responses_for(survey, responses)
    ratings = collect_ratings(survey, owned)

    segment_analytics = []
    all_ratings: List[int] = []

    for segment in survey.segments:
        segment_ratings: List[int] = []
        question_analytics = []

        for question in segment.questions:
            question_ratings = ratings[question.id]
            segment_ratings.extend(question_ratings)
            question_analytics.append(
                QuestionAnalytics(
                    question_id=question.id,
                    question_text=question.text,
                    average_rating=mean_rating(question_ratings),
                    total_answers=len(question_ratings),
                    distribution=rating_distribution(question_ratings),
                )
            )

        all_ratings.extend(segment_ratings)
        segment_analytics.append(
            SegmentAnalytics(
                segment_id=segment.id,
                segment_title=segment.title,
                average_rating=mean_rating(segment_ratings),
                question_analytics=question_analytics,
            )
        )

    report = AnalyticsReport(
        survey_id=survey.id,
        survey_title=survey.title,
        total_responses=len(owned),
        overall_average=mean_rating(all_ratings),
        overall_distribution=rating_distribution(all_ratings),
        segment_analytics=segment_analytics,
        response_data=responses_per_day(owned),
    )

    logger.debug(
        f"Computed analytics over {report.total_responses} responses "
        f"and {len(all_ratings)} ratings",
        extra={"survey_id": survey.id},
    )
    return report
