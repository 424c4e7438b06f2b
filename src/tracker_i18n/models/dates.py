"""Date-input data types: format patterns, calendar cells and field state."""

from __future__ import annotations

import re
from datetime import date
from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator

YEAR = "yyyy"
MONTH = "mm"
DAY = "dd"
FIELD_TOKENS = (YEAR, MONTH, DAY)

_FIELD_RE = re.compile(r"yyyy|mm|dd")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$", re.ASCII)


class FormatPattern:
    """Ordered field tokens and literal separators describing a date layout.

    ``str(FormatPattern(("mm", "/", "dd", "/", "yyyy")))`` is ``"mm/dd/yyyy"``.
    """

    __slots__ = ("_tokens",)

    def __init__(self, tokens: tuple[str, ...] | list[str]):
        merged: list[str] = []
        for token in tokens:
            if not token:
                continue
            # Adjacent literals collapse into one separator
            if token not in FIELD_TOKENS and merged and merged[-1] not in FIELD_TOKENS:
                merged[-1] += token
            else:
                merged.append(token)
        self._tokens = tuple(merged)

    @classmethod
    def parse(cls, text: str) -> "FormatPattern":
        """Read the string form back, e.g. ``"dd.mm.yyyy"``."""
        tokens: list[str] = []
        pos = 0
        for match in _FIELD_RE.finditer(text):
            if match.start() > pos:
                tokens.append(text[pos:match.start()])
            tokens.append(match.group(0))
            pos = match.end()
        if pos < len(text):
            tokens.append(text[pos:])
        return cls(tokens)

    @property
    def tokens(self) -> tuple[str, ...]:
        return self._tokens

    @property
    def fields(self) -> tuple[str, ...]:
        """Field tokens only, in the order the locale writes them."""
        return tuple(t for t in self._tokens if t in FIELD_TOKENS)

    @property
    def separators(self) -> tuple[str, ...]:
        return tuple(t for t in self._tokens if t not in FIELD_TOKENS)

    @staticmethod
    def is_field(token: str) -> bool:
        return token in FIELD_TOKENS

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __str__(self) -> str:
        return "".join(self._tokens)

    def __repr__(self) -> str:
        return f"FormatPattern({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FormatPattern):
            return self._tokens == other._tokens
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._tokens)


def parse_iso_date(value: str | None) -> date | None:
    """Parse a strict ``YYYY-MM-DD`` string. Returns ``None`` when invalid."""
    if not value:
        return None
    match = _ISO_DATE_RE.match(value)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def to_iso(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


class CalendarCell(BaseModel):
    """One day in the 6x7 calendar grid."""

    model_config = ConfigDict(frozen=True)

    day: int
    iso_date: str
    in_current_month: bool
    is_today: bool = False
    is_selected: bool = False
    is_disabled: bool = False


class DateFieldState(BaseModel):
    """Mutable state of one date-input widget instance.

    ``raw_text`` is what the user typed and may lag behind ``canonical_value``
    mid-keystroke. ``canonical_value`` is always a real calendar date or
    ``None``.
    """

    model_config = ConfigDict(validate_assignment=True)

    raw_text: str = ""
    canonical_value: str | None = None
    is_open: bool = False
    view_year: int = Field(default_factory=lambda: date.today().year)
    view_month: int = Field(default_factory=lambda: date.today().month - 1, ge=0, le=11)

    @field_validator("canonical_value")
    @classmethod
    def _real_calendar_date(cls, value: str | None) -> str | None:
        if value is None:
            return None
        if parse_iso_date(value) is None:
            raise ValueError(f"not a calendar date in YYYY-MM-DD form: {value!r}")
        return value
