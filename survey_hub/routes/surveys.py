"""Survey definition endpoints: list, create, read and delete surveys."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from survey_hub.models.database import get_db
from survey_hub.models.survey import Survey
from survey_hub.schemas.survey import DeleteSurveyOut, SurveyCreate, SurveyOut
from survey_hub.services.survey_repository import SurveyRepository


router = APIRouter(prefix="/api/surveys")


def survey_out(survey: Survey, response_count: int = 0) -> SurveyOut:
    """Serialize a survey tree together with its response count."""
    return SurveyOut.model_validate(survey).model_copy(update={"response_count": response_count})


@router.get("", response_model=List[SurveyOut])
def list_surveys(db: Session = Depends(get_db)) -> List[SurveyOut]:
    """List all surveys, newest first, with their trees and response counts."""
    repository = SurveyRepository(db)
    surveys = repository.list_surveys()
    counts = repository.count_responses([survey.id for survey in surveys])
    return [survey_out(survey, counts.get(survey.id, 0)) for survey in surveys]


@router.post("", response_model=SurveyOut, status_code=201)
def create_survey(payload: SurveyCreate, db: Session = Depends(get_db)) -> SurveyOut:
    """Create a survey with its segments and questions in one transaction.

    Returns:
        SurveyOut: The created survey (201)

    Raises:
        ValidationError: Missing title, segment title or question text (422)
        StoreError: Database failure; nothing is written (500)
    """
    survey = SurveyRepository(db).create_survey(payload)
    return survey_out(survey)


@router.get("/{survey_id}", response_model=SurveyOut)
def get_survey(survey_id: str, db: Session = Depends(get_db)) -> SurveyOut:
    """Get a survey with all segments and questions (404 if missing)."""
    repository = SurveyRepository(db)
    survey = repository.get_survey_with_tree(survey_id)
    counts = repository.count_responses([survey.id])
    return survey_out(survey, counts.get(survey.id, 0))


@router.delete("/{survey_id}", response_model=DeleteSurveyOut)
def delete_survey(survey_id: str, db: Session = Depends(get_db)) -> DeleteSurveyOut:
    """Delete a survey, its segments, questions, responses and answers."""
    deletion = SurveyRepository(db).delete_survey(survey_id)
    return DeleteSurveyOut(
        survey_id=deletion.survey_id,
        deleted_segments=deletion.deleted_segments,
        deleted_questions=deletion.deleted_questions,
        deleted_responses=deletion.deleted_responses,
        deleted_answers=deletion.deleted_answers,
    )
