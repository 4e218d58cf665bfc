"""Pydantic schemas for the analytics report and access links."""

from typing import Dict, List

from pydantic import BaseModel, Field


class QuestionAnalytics(BaseModel):
    """Statistics for a single question."""
    question_id: str
    question_text: str
    average_rating: float = Field(description="Mean rating rounded to 2 decimals, 0 if unanswered")
    total_answers: int
    distribution: Dict[int, int] = Field(description="Count per rating 1..5")


class SegmentAnalytics(BaseModel):
    """Statistics for a segment and each of its questions."""
    segment_id: str
    segment_title: str
    average_rating: float
    question_analytics: List[QuestionAnalytics]


class DailyResponseCount(BaseModel):
    """Number of responses submitted on one UTC calendar date."""
    date: str = Field(description="YYYY-MM-DD")
    count: int


class AnalyticsReport(BaseModel):
    """Derived statistics for one survey."""
    survey_id: str
    survey_title: str
    total_responses: int
    overall_average: float
    overall_distribution: Dict[int, int]
    segment_analytics: List[SegmentAnalytics]
    response_data: List[DailyResponseCount]

    def question(self, question_id: str) -> QuestionAnalytics:
        """Look up a question's statistics by id.

        Raises:
            KeyError: If the question is not part of the report
        """
        for segment in self.segment_analytics:
            for question in segment.question_analytics:
                if question.question_id == question_id:
                    return question
        raise KeyError(question_id)


class AccessLinkOut(BaseModel):
    """Respondent link and its QR code."""
    qr_code: str = Field(description="PNG image as a data: URL")
    url: str
