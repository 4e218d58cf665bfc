"""Respondent link and QR code endpoint."""

from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from survey_hub.config import get_settings
from survey_hub.models.database import get_db
from survey_hub.schemas.analytics import AccessLinkOut
from survey_hub.services.access_link import (
    build_access_url,
    encode_as_scannable_image,
    to_data_url,
)
from survey_hub.services.survey_repository import SurveyRepository

router = APIRouter(prefix="/api/surveys")


def request_origin(request: Request) -> str:
    """Origin respondents should use: configured public URL or the request's own."""
    settings = get_settings()
    if settings.public_base_url:
        return settings.public_base_url
    return f"{request.url.scheme}://{request.url.netloc}"


@router.get("/{survey_id}/qrcode", response_model=AccessLinkOut)
def get_qr_code(
    survey_id: str,
    request: Request,
    size: Optional[int] = Query(None, ge=50, le=2000, description="Image size in pixels"),
    output_format: str = Query("json", alias="format", pattern="^(json|png)$", description="json or png"),
    db: Session = Depends(get_db),
) -> Union[AccessLinkOut, Response]:
    """Respondent URL of a survey and its QR code.

    Returns the PNG as a data URL inside JSON, or the raw image with
    ``format=png``.
    """
    SurveyRepository(db).get_survey_with_tree(survey_id)

    settings = get_settings()
    url = build_access_url(request_origin(request), survey_id)
    png = encode_as_scannable_image(
        url,
        size=size or settings.qr_code_size,
        margin=settings.qr_code_margin,
        dark_color=settings.qr_code_dark_color,
        light_color=settings.qr_code_light_color,
    )

    if output_format == "png":
        return Response(content=png, media_type="image/png")
    return AccessLinkOut(qr_code=to_data_url(png), url=url)
