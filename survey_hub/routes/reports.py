"""Read-side endpoints: analytics report and spreadsheet export."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from survey_hub.models.database import get_db
from survey_hub.schemas.analytics import AnalyticsReport
from survey_hub.services.analytics import compute_analytics
from survey_hub.services.export import (
    XLSX_MEDIA_TYPE,
    build_workbook,
    export_filename,
    format_export,
)
from survey_hub.services.survey_repository import SurveyRepository
from survey_hub.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/surveys")


@router.get("/{survey_id}/analytics", response_model=AnalyticsReport)
def get_analytics(survey_id: str, db: Session = Depends(get_db)) -> AnalyticsReport:
    """Averages, rating distributions and daily response counts for a survey."""
    repository = SurveyRepository(db)
    survey = repository.get_survey_with_tree(survey_id)
    responses = repository.get_responses_for_survey(survey_id)
    return compute_analytics(survey, responses)


@router.get("/{survey_id}/export")
def export_survey(survey_id: str, db: Session = Depends(get_db)) -> Response:
    """Download responses, question catalogue and statistics as .xlsx."""
    repository = SurveyRepository(db)
    survey = repository.get_survey_with_tree(survey_id)
    responses = repository.get_responses_for_survey(survey_id)

    content = build_workbook(format_export(survey, responses))
    filename = export_filename(survey_id, datetime.now(timezone.utc).date())

    logger.info(
        f"Exported {len(responses)} responses ({len(content)} bytes)",
        extra={"survey_id": survey_id},
    )
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
