"""Spreadsheet export of a survey and its responses.

The export is built in two steps. ``format_export`` lays out three sheets
as plain rows (raw answers, question catalogue, statistics), and
``build_workbook`` encodes them as an .xlsx document with openpyxl.
Statistics come from ``compute_analytics``, so the sheet always matches
the analytics view for the same data.
"""

from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
from typing import Iterable, List, Union

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from survey_hub.models.survey import Segment, Survey
from survey_hub.models.response import Response
from survey_hub.services.analytics import as_utc, compute_analytics, responses_for
from survey_hub.services.rating_scale import RATING_VALUES
from survey_hub.logging_config import get_logger

logger = get_logger(__name__)

Cell = Union[str, int, float, None]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

RESPONSES_SHEET = "Responses"
QUESTIONS_SHEET = "Questions"
ANALYSIS_SHEET = "Analysis"

ANONYMOUS = "Anonymous"
MISSING = "-"
TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M:%S"

RESPONSE_HEADERS = ["#", "Name", "Email", "Submission date"]
QUESTION_HEADERS = ["Segment", "Question number", "Question text"]
ANALYSIS_HEADERS = ["Segment", "Question", "Average"] + [str(rating) for rating in RATING_VALUES]


class ExportGenerationError(Exception):
    """Raised when the spreadsheet document cannot be encoded."""
    pass


@dataclass
class Sheet:
    """One named table of the exported document.

    Attributes:
        name: Sheet title
        rows: Header row followed by data rows
        column_widths: Character widths per column, applied left to right
    """
    name: str
    rows: List[List[Cell]]
    column_widths: List[int] = field(default_factory=list)

    @property
    def header(self) -> List[Cell]:
        return self.rows[0]

    @property
    def data_rows(self) -> List[List[Cell]]:
        return self.rows[1:]


def question_number(index: int) -> str:
    """Label for the index-th (zero-based) question of a segment: Q1, Q2..."""
    return f"Q{index + 1}"


def column_label(segment: Segment, index: int) -> str:
    """Raw-answers column header, e.g. 'ORG - Q3'."""
    return f"{segment.title[:3].upper()} - {question_number(index)}"


def format_timestamp(moment) -> str:
    """Submission timestamp as shown in the export (UTC)."""
    return as_utc(moment).strftime(TIMESTAMP_FORMAT)


def _responses_sheet(survey: Survey, responses: List[Response]) -> Sheet:
    header: List[Cell] = list(RESPONSE_HEADERS)
    columns = []
    for segment in survey.segments:
        for index, question in enumerate(segment.questions):
            header.append(column_label(segment, index))
            columns.append(question.id)

    rows: List[List[Cell]] = [header]
    for number, response in enumerate(responses, start=1):
        row: List[Cell] = [
            number,
            response.respondent_name or ANONYMOUS,
            response.respondent_email or MISSING,
            format_timestamp(response.submitted_at),
        ]
        for question_id in columns:
            answer = response.answer_for(question_id)
            row.append(answer.rating if answer is not None else MISSING)
        rows.append(row)

    widths = [25 if i < len(RESPONSE_HEADERS) else 10 for i in range(len(header))]
    return Sheet(name=RESPONSES_SHEET, rows=rows, column_widths=widths)


def _questions_sheet(survey: Survey) -> Sheet:
    rows: List[List[Cell]] = [list(QUESTION_HEADERS)]
    for segment in survey.segments:
        for index, question in enumerate(segment.questions):
            rows.append([segment.title, question_number(index), question.text])
    return Sheet(name=QUESTIONS_SHEET, rows=rows, column_widths=[25, 12, 80])


def _analysis_sheet(survey: Survey, responses: List[Response]) -> Sheet:
    report = compute_analytics(survey, responses)
    rows: List[List[Cell]] = [list(ANALYSIS_HEADERS)]
    for segment, segment_stats in zip(survey.segments, report.segment_analytics):
        for index, stats in enumerate(segment_stats.question_analytics):
            rows.append(
                [segment.title, question_number(index), stats.average_rating]
                + [stats.distribution[rating] for rating in RATING_VALUES]
            )
    return Sheet(name=ANALYSIS_SHEET, rows=rows, column_widths=[25, 12, 10, 8, 8, 8, 8, 8])


def format_export(survey: Survey, responses: Iterable[Response]) -> List[Sheet]:
    """Lay out the export document for a survey.

    Args:
        survey: Fully loaded survey (the caller has already handled not-found)
        responses: Responses of the survey with their answers

    Returns:
        Three sheets in fixed order: raw answers (newest response first),
        question catalogue, statistics per question
    """
    owned = sorted(
        responses_for(survey, responses),
        key=lambda response: (as_utc(response.submitted_at), response.id or ""),
        reverse=True,
    )
    return [
        _responses_sheet(survey, owned),
        _questions_sheet(survey),
        _analysis_sheet(survey, owned),
    ]


def build_workbook(sheets: List[Sheet]) -> bytes:
    """Encode sheets as an .xlsx document.

    Raises:
        ExportGenerationError: If openpyxl fails to build or save the workbook
    """
    try:
        wb = Workbook()
        wb.remove(wb.active)

        for sheet in sheets:
            ws = wb.create_sheet(sheet.name)
            for row in sheet.rows:
                ws.append(row)
            for cell in ws[1]:
                cell.font = Font(bold=True)
            for index, width in enumerate(sheet.column_widths, start=1):
                ws.column_dimensions[get_column_letter(index)].width = width
            ws.freeze_panes = "A2"

        buf = BytesIO()
        wb.save(buf)
    except Exception as e:
        logger.error(f"Failed to build workbook: {e}", exc_info=True)
        raise ExportGenerationError(f"Spreadsheet generation failed: {e}") from e

    return buf.getvalue()


def export_filename(survey_id: str, today: date) -> str:
    """Attachment filename, e.g. survey-<id>-2026-10-19.xlsx."""
    return f"survey-{survey_id}-{today.isoformat()}.xlsx"
