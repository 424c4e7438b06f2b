"""Derive a culture's numeric date layout and localized calendar names.

Nothing here hardcodes per-locale patterns: the layout is read from the
culture's CLDR data through Babel by walking the parts of its short numeric
date pattern (year, month, day and the literals between them) in the order the
locale writes them.
"""

from __future__ import annotations

from datetime import date
from functools import lru_cache

import structlog
from babel import Locale, UnknownLocaleError
from babel.dates import (
    format_date,
    get_day_names,
    get_month_names,
    match_skeleton,
    tokenize_pattern,
)

from tracker_i18n.errors import UnknownCultureError
from tracker_i18n.models.dates import DAY, MONTH, YEAR, FormatPattern

logger = structlog.get_logger(__name__)

REFERENCE_DATE = date(2020, 1, 15)

# Numeric year, 2-digit month, 2-digit day
_NUMERIC_DATE_SKELETON = "yMMdd"

# CLDR field letters that carry the year, month and day
_FIELD_MAP = {
    "y": YEAR,
    "Y": YEAR,
    "u": YEAR,
    "M": MONTH,
    "L": MONTH,
    "d": DAY,
}


@lru_cache(maxsize=None)
def get_locale(culture_code: str) -> Locale:
    """Resolve a culture code such as ``it-IT`` or ``en_US`` to a Babel locale."""
    try:
        return Locale.parse(culture_code.replace("-", "_"))
    except (UnknownLocaleError, ValueError, TypeError) as e:
        raise UnknownCultureError(culture_code) from e


def _numeric_date_pattern(locale: Locale) -> str:
    skeletons = locale.datetime_skeletons
    matched = match_skeleton(_NUMERIC_DATE_SKELETON, skeletons)
    if matched is not None:
        return skeletons[matched].pattern
    return locale.date_formats["short"].pattern


@lru_cache(maxsize=None)
def infer_pattern(culture_code: str) -> FormatPattern:
    """Return the culture's date layout, e.g. ``mm/dd/yyyy`` for ``en-US``.

    Raises ``UnknownCultureError`` for codes that do not resolve to a locale.
    """
    locale = get_locale(culture_code)
    cldr_pattern = _numeric_date_pattern(locale)
    tokens: list[str] = []
    for kind, value in tokenize_pattern(cldr_pattern):
        if kind == "chars":
            tokens.append(value)
        elif kind == "field":
            letter = value[0]
            if letter in _FIELD_MAP:
                tokens.append(_FIELD_MAP[letter])
            # Other fields (era, weekday) are not part of the input layout

    pattern = FormatPattern(_trim_literals(tokens))
    if sorted(pattern.fields) != sorted((YEAR, MONTH, DAY)):
        logger.warning("incomplete_date_pattern", culture=culture_code, cldr_pattern=cldr_pattern)
    logger.debug(
        "date_pattern_inferred",
        culture=culture_code,
        cldr_pattern=cldr_pattern,
        pattern=str(pattern),
        sample=format_date(REFERENCE_DATE, cldr_pattern, locale=locale),
    )
    return pattern


def _trim_literals(tokens: list[str]) -> list[str]:
    # Whitespace left at either end after dropping unused fields
    if tokens and tokens[0] not in (YEAR, MONTH, DAY):
        tokens[0] = tokens[0].lstrip()
    if tokens and tokens[-1] not in (YEAR, MONTH, DAY):
        tokens[-1] = tokens[-1].rstrip()
    return [t for t in tokens if t]


def field_order(culture_code: str) -> tuple[str, ...]:
    """Field tokens in the order the culture writes them."""
    return infer_pattern(culture_code).fields


def format_date_text(value: date, pattern: FormatPattern | str) -> str:
    """Render *value* through *pattern*; the inverse of the positional parser."""
    if isinstance(pattern, str):
        pattern = FormatPattern.parse(pattern)
    parts: list[str] = []
    for token in pattern:
        if token == YEAR:
            parts.append(f"{value.year:04d}")
        elif token == MONTH:
            parts.append(f"{value.month:02d}")
        elif token == DAY:
            parts.append(f"{value.day:02d}")
        else:
            parts.append(token)
    return "".join(parts)


def format_long_date(value: date, culture_code: str) -> str:
    """Long localized date, e.g. ``January 15, 2020``."""
    return format_date(value, format="long", locale=get_locale(culture_code))


@lru_cache(maxsize=None)
def month_names(culture_code: str, width: str = "wide") -> tuple[str, ...]:
    """Stand-alone month names, January first."""
    names = get_month_names(width, context="stand-alone", locale=get_locale(culture_code))
    return tuple(names[m] for m in range(1, 13))


@lru_cache(maxsize=None)
def weekday_names(culture_code: str, width: str = "abbreviated") -> tuple[str, ...]:
    """Stand-alone weekday names, Sunday first to match the calendar grid."""
    # CLDR indexes weekdays Monday=0 .. Sunday=6
    names = get_day_names(width, context="stand-alone", locale=get_locale(culture_code))
    return (names[6],) + tuple(names[i] for i in range(6))
