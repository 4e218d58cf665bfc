"""Pydantic schemas for data validation.

This package contains all Pydantic models for survey definitions,
submissions and analytics output.
"""

from survey_hub.schemas.survey import (
    QuestionCreate,
    SegmentCreate,
    SurveyCreate,
    QuestionOut,
    SegmentOut,
    SurveyOut,
    DeleteSurveyOut,
    SeedResultOut,
    InitStatusOut,
)
from survey_hub.schemas.response import (
    AnswerIn,
    ResponseCreate,
    AnswerOut,
    ResponseOut,
)
from survey_hub.schemas.analytics import (
    QuestionAnalytics,
    SegmentAnalytics,
    DailyResponseCount,
    AnalyticsReport,
    AccessLinkOut,
)

__all__ = [
    "QuestionCreate",
    "SegmentCreate",
    "SurveyCreate",
    "QuestionOut",
    "SegmentOut",
    "SurveyOut",
    "DeleteSurveyOut",
    "SeedResultOut",
    "InitStatusOut",
    "AnswerIn",
    "ResponseCreate",
    "AnswerOut",
    "ResponseOut",
    "QuestionAnalytics",
    "SegmentAnalytics",
    "DailyResponseCount",
    "AnalyticsReport",
    "AccessLinkOut",
]
