"""Respondent links and their QR codes.

The link for a survey is a pure function of the public origin and the
survey id. QR codes are rendered with the ``qrcode`` library (Pillow
backend); any encoder failure is raised as ``QRCodeGenerationError``.
"""

import base64
import io
from urllib.parse import quote

import qrcode
from qrcode.constants import ERROR_CORRECT_M
from PIL import Image

from survey_hub.logging_config import get_logger

logger = get_logger(__name__)


class QRCodeGenerationError(Exception):
    """Raised when a QR code image cannot be produced."""
    pass


def build_access_url(base_origin: str, survey_id: str) -> str:
    """Build the respondent-facing URL of a survey.

    Args:
        base_origin: Scheme and host, e.g. "https://surveys.example.org"
        survey_id: Survey identifier

    Returns:
        URL of the form "<origin>/?form=<survey_id>"

    Example:
        >>> build_access_url("https://surveys.example.org/", "abc")
        'https://surveys.example.org/?form=abc'
    """
    return f"{base_origin.rstrip('/')}/?form={quote(survey_id, safe='')}"


def encode_as_scannable_image(
    url: str,
    size: int,
    margin: int,
    dark_color: str,
    light_color: str,
) -> bytes:
    """Render a URL as a square PNG QR code.

    Args:
        url: Text to encode
        size: Width and height of the image in pixels
        margin: Quiet-zone width in modules
        dark_color: Module colour, e.g. "#1f2937"
        light_color: Background colour, e.g. "#ffffff"

    Returns:
        PNG image bytes

    Raises:
        QRCodeGenerationError: If the encoder fails or the arguments are invalid
    """
    if size <= 0:
        raise QRCodeGenerationError(f"QR code size must be positive, got {size}")
    if margin < 0:
        raise QRCodeGenerationError(f"QR code margin cannot be negative, got {margin}")

    try:
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECT_M,
            box_size=10,
            border=margin,
        )
        qr.add_data(url)
        qr.make(fit=True)

        img = qr.make_image(fill_color=dark_color, back_color=light_color)
        img = img.resize((size, size), Image.Resampling.NEAREST)

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
    except Exception as e:
        logger.error(f"QR code generation failed for {url[:50]}: {e}")
        raise QRCodeGenerationError(f"QR code generation failed: {e}") from e

    logger.debug(f"Generated {size}px QR code for {url[:50]}")
    return buffer.getvalue()


def to_data_url(png_bytes: bytes) -> str:
    """Wrap PNG bytes as a data: URL for direct use in an <img> tag."""
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")
