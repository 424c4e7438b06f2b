"""Free-text date parsing for the date input.

Two tiers, tried in order:

1. ISO calendar text (``2024-03-15``, optionally followed by a time part) is
   accepted as-is, whatever the culture's own layout is.
2. Positional: the text must hold exactly three runs of ASCII digits, which
   are mapped to year, month and day using the culture's inferred field order.
   Whatever sits between them (separators, "г.", "年") is ignored.

Malformed input yields ``None``; only an unknown culture code raises.
"""

from __future__ import annotations

import re
from datetime import date

import structlog

from tracker_i18n.dates.format_inference import field_order
from tracker_i18n.models.dates import DAY, MONTH, YEAR, to_iso

logger = structlog.get_logger(__name__)

TWO_DIGIT_YEAR_PIVOT = 50
MIN_YEAR = 1900
MAX_YEAR = 2200

_ISO_RE = re.compile(r"^([0-9]{4})-([0-9]{1,2})-([0-9]{1,2})(?:[T ].*)?$")
# Runs of ASCII digits; literals such as "г." or "年" are skipped
_DIGIT_RUN_RE = re.compile(r"[0-9]+")


def expand_year(year: int, digits: int, pivot: int = TWO_DIGIT_YEAR_PIVOT) -> int:
    """Expand a year written with at most two digits around *pivot*."""
    if digits > 2:
        return year
    return 2000 + year if year < pivot else 1900 + year


def _parse_iso(match: re.Match[str]) -> date | None:
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def _parse_positional(
    text: str,
    culture_code: str,
    *,
    pivot: int,
    min_year: int,
    max_year: int,
) -> date | None:
    groups = _DIGIT_RUN_RE.findall(text)
    if len(groups) != 3:
        return None

    order = field_order(culture_code)
    if sorted(order) != sorted((YEAR, MONTH, DAY)):
        return None
    values = dict(zip(order, groups))

    year = expand_year(int(values[YEAR]), len(values[YEAR]), pivot)
    month = int(values[MONTH])
    day = int(values[DAY])

    if not (min_year <= year <= max_year):
        return None
    if not (1 <= month <= 12) or not (1 <= day <= 31):
        return None
    try:
        return date(year, month, day)
    except ValueError:
        # Day out of range for the month, e.g. Feb 30
        return None


def parse_date_value(
    raw_text: str,
    culture_code: str,
    *,
    pivot: int = TWO_DIGIT_YEAR_PIVOT,
    min_year: int = MIN_YEAR,
    max_year: int = MAX_YEAR,
) -> date | None:
    """Parse *raw_text* into a ``date``, or ``None`` when it is not a full date.

    Raises ``UnknownCultureError`` for a culture code that does not resolve,
    whatever the text.
    """
    field_order(culture_code)
    text = (raw_text or "").strip()
    if not text:
        return None

    iso_match = _ISO_RE.match(text)
    if iso_match:
        # ISO-shaped text is never reinterpreted positionally
        parsed = _parse_iso(iso_match)
    else:
        parsed = _parse_positional(
            text, culture_code, pivot=pivot, min_year=min_year, max_year=max_year,
        )
    if parsed is None:
        logger.debug("date_text_unparsable", raw_text=text, culture=culture_code)
    return parsed


def parse_date_text(
    raw_text: str,
    culture_code: str,
    *,
    pivot: int = TWO_DIGIT_YEAR_PIVOT,
    min_year: int = MIN_YEAR,
    max_year: int = MAX_YEAR,
) -> str | None:
    """Parse *raw_text* into a canonical ``YYYY-MM-DD`` string, or ``None``."""
    parsed = parse_date_value(
        raw_text, culture_code, pivot=pivot, min_year=min_year, max_year=max_year,
    )
    return to_iso(parsed) if parsed is not None else None
