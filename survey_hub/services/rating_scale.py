"""Five-point rating scale shared by questions, analytics and export.

Ratings are integers 1..5. Each question may carry its own five labels,
stored as a JSON array string; anything that does not decode to exactly
five strings falls back to ``DEFAULT_RATING_LABELS``.
"""

import json
import math
from typing import Dict, List, Optional, Sequence

from survey_hub.logging_config import get_logger

logger = get_logger(__name__)


MIN_RATING = 1
MAX_RATING = 5
RATING_VALUES = tuple(range(MIN_RATING, MAX_RATING + 1))
RATING_LABEL_COUNT = len(RATING_VALUES)

DEFAULT_RATING_LABELS = (
    "Très insuffisant",
    "Insuffisant",
    "Satisfaisant",
    "Très satisfaisant",
    "Excellent",
)


def is_valid_rating(value: int) -> bool:
    """Return True if value is an integer on the 1..5 scale."""
    return isinstance(value, int) and not isinstance(value, bool) and value in RATING_VALUES


def is_valid_label_set(labels: object) -> bool:
    """Return True if labels is a sequence of exactly five strings."""
    return (
        isinstance(labels, (list, tuple))
        and len(labels) == RATING_LABEL_COUNT
        and all(isinstance(label, str) for label in labels)
    )


def parse_rating_labels(raw: Optional[str]) -> List[str]:
    """Decode stored rating labels, falling back to the default set.

    Args:
        raw: JSON array string as stored on the question row, or None

    Returns:
        A new list of five labels

    Example:
        >>> parse_rating_labels('["Bad", "Poor", "Fair", "Good", "Great"]')
        ['Bad', 'Poor', 'Fair', 'Good', 'Great']
        >>> parse_rating_labels("not json")[0]
        'Très insuffisant'
    """
    if not raw:
        return list(DEFAULT_RATING_LABELS)

    try:
        labels = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Malformed rating labels, using defaults: {raw[:50]!r}")
        return list(DEFAULT_RATING_LABELS)

    if not is_valid_label_set(labels):
        logger.warning(f"Rating labels are not five strings, using defaults: {raw[:50]!r}")
        return list(DEFAULT_RATING_LABELS)

    return list(labels)


def serialize_rating_labels(labels: Optional[Sequence[str]]) -> Optional[str]:
    """Encode rating labels for storage.

    Args:
        labels: Five labels, or None to store nothing (defaults apply on read)

    Returns:
        JSON array string, or None

    Raises:
        ValueError: If labels is not exactly five strings
    """
    if labels is None:
        return None
    if not is_valid_label_set(labels):
        raise ValueError(f"Rating labels must be exactly {RATING_LABEL_COUNT} strings")
    return json.dumps(list(labels), ensure_ascii=False)


def empty_distribution() -> Dict[int, int]:
    """Return a zero-filled count for every rating value."""
    return {rating: 0 for rating in RATING_VALUES}


def round_rating(value: float) -> float:
    """Round half-up to two decimals (3.335 -> 3.34, never banker's rounding)."""
    return math.floor(value * 100 + 0.5) / 100


def mean_rating(ratings: Sequence[int]) -> float:
    """Rounded arithmetic mean of ratings, 0 for an empty sequence."""
    if not ratings:
        return 0
    return round_rating(sum(ratings) / len(ratings))


def rating_distribution(ratings: Sequence[int]) -> Dict[int, int]:
    """Count occurrences of each rating value; all five keys always present."""
    distribution = empty_distribution()
    for rating in ratings:
        if rating in distribution:
            distribution[rating] += 1
    return distribution
