"""Shape validation of raw date text against a format pattern."""

from __future__ import annotations

import re
from functools import lru_cache

from tracker_i18n.models.dates import FormatPattern


@lru_cache(maxsize=256)
def shape_regex(pattern: FormatPattern) -> re.Pattern[str]:
    """Compile ``dd/mm/yyyy`` into ``\\d{1,2}/\\d{1,2}/\\d{1,4}``."""
    parts = [
        rf"\d{{1,{len(token)}}}" if FormatPattern.is_field(token) else re.escape(token)
        for token in pattern
    ]
    # ASCII only: the parser reads ASCII digits
    return re.compile("".join(parts), re.ASCII)


def matches_shape(raw_text: str, pattern: FormatPattern | str) -> bool:
    """Whether *raw_text* is shaped like *pattern*.

    Empty text always matches; whether a value is required is a separate
    check.
    """
    if not raw_text:
        return True
    if isinstance(pattern, str):
        pattern = FormatPattern.parse(pattern)
    return shape_regex(pattern).fullmatch(raw_text) is not None
