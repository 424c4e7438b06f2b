"""Fixed-size month grid for the date picker popup."""

from __future__ import annotations

from datetime import date, timedelta

from tracker_i18n.models.dates import CalendarCell, parse_iso_date, to_iso

GRID_ROWS = 6
GRID_COLUMNS = 7
GRID_SIZE = GRID_ROWS * GRID_COLUMNS


def grid_start(year: int, month: int) -> date:
    """The Sunday on or before the 1st of *month* (0-11)."""
    first = date(year, month + 1, 1)
    # date.weekday(): Monday=0 .. Sunday=6
    return first - timedelta(days=(first.weekday() + 1) % 7)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move a (year, 0-11 month) view by *delta* months."""
    index = year * 12 + month + delta
    return index // 12, index % 12


def build_grid(
    year: int,
    month: int,
    selected_iso: str | None = None,
    min_iso: str | None = None,
    max_iso: str | None = None,
    *,
    today: date | None = None,
) -> list[CalendarCell]:
    """Build the 42 cells shown for *month* (0-11) of *year*.

    Leading and trailing cells borrowed from the neighbouring months are
    always disabled. In-month cells are disabled only when strictly outside
    ``[min_iso, max_iso]``. Unparsable bounds or selection are ignored.
    """
    if not 0 <= month <= 11:
        raise ValueError(f"month must be in 0..11, got {month}")

    today = today or date.today()
    selected = parse_iso_date(selected_iso)
    lower = parse_iso_date(min_iso)
    upper = parse_iso_date(max_iso)

    start = grid_start(year, month)
    cells: list[CalendarCell] = []
    for offset in range(GRID_SIZE):
        current = start + timedelta(days=offset)
        in_month = current.year == year and current.month == month + 1
        out_of_range = (lower is not None and current < lower) or (
            upper is not None and current > upper
        )
        cells.append(
            CalendarCell(
                day=current.day,
                iso_date=to_iso(current),
                in_current_month=in_month,
                is_today=current == today,
                is_selected=in_month and current == selected,
                is_disabled=not in_month or out_of_range,
            )
        )
    return cells
