"""Default survey seeding endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from survey_hub.models.database import get_db
from survey_hub.routes.surveys import survey_out
from survey_hub.schemas.survey import InitStatusOut, SeedResultOut
from survey_hub.services.survey_loader import get_survey_loader, seed_default_surveys
from survey_hub.services.survey_repository import SurveyRepository

router = APIRouter(prefix="/api/init")


@router.post("", response_model=SeedResultOut, status_code=201)
def initialize_surveys(db: Session = Depends(get_db)) -> SeedResultOut:
    """Create the default surveys that do not exist yet."""
    created = seed_default_surveys(SurveyRepository(db), get_survey_loader())
    return SeedResultOut(
        message="Surveys initialized",
        created=len(created),
        surveys=[survey_out(survey) for survey in created],
    )


@router.get("", response_model=InitStatusOut)
def initialization_status(db: Session = Depends(get_db)) -> InitStatusOut:
    """Whether any survey exists, with the current survey list."""
    repository = SurveyRepository(db)
    surveys = repository.list_surveys()
    counts = repository.count_responses([survey.id for survey in surveys])
    return InitStatusOut(
        initialized=len(surveys) > 0,
        surveys=[survey_out(survey, counts.get(survey.id, 0)) for survey in surveys],
    )
