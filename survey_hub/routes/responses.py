"""Response endpoints: submit a response, list and delete responses."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from survey_hub.models.database import get_db
from survey_hub.schemas.response import ResponseCreate, ResponseOut
from survey_hub.services.survey_repository import SurveyRepository

router = APIRouter(prefix="/api")


@router.post("/surveys/{survey_id}/submit", response_model=ResponseOut, status_code=201)
def submit_response(
    survey_id: str,
    payload: ResponseCreate,
    db: Session = Depends(get_db),
) -> ResponseOut:
    """Submit one respondent's answers.

    Raises:
        SurveyNotFoundError: Unknown survey (404)
        SubmissionValidationError: Closed survey or foreign question ids (422)
    """
    response = SurveyRepository(db).create_response(survey_id, payload)
    return ResponseOut.model_validate(response)


@router.get("/surveys/{survey_id}/responses", response_model=List[ResponseOut])
def list_responses(survey_id: str, db: Session = Depends(get_db)) -> List[ResponseOut]:
    """All responses of a survey, newest first, with their answers."""
    repository = SurveyRepository(db)
    repository.get_survey_with_tree(survey_id)
    return [
        ResponseOut.model_validate(response)
        for response in repository.get_responses_for_survey(survey_id)
    ]


@router.delete("/responses/{response_id}")
def delete_response(response_id: str, db: Session = Depends(get_db)) -> dict:
    """Delete a single response; its survey is left untouched."""
    SurveyRepository(db).delete_response(response_id)
    return {"success": True, "response_id": response_id}
