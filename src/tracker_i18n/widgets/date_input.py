"""Locale-aware date input with a popup calendar.

Implements the value-accessor contract of the surrounding form layer
(``write_value``, ``register_on_change``, ``register_on_touched``,
``set_disabled``). The canonical value is always ``YYYY-MM-DD`` or ``None``;
what the user sees and types follows the active culture's layout.

Month names, weekday names, the format pattern and the display text are
computed values. A culture change recomputes all of them from the same culture
read and never touches the canonical value; writing the canonical value only
recomputes the display text.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable

import structlog

from tracker_i18n.config import Settings
from tracker_i18n.dates.calendar_grid import build_grid, shift_month
from tracker_i18n.dates.format_inference import (
    format_date_text,
    format_long_date,
    get_locale,
    infer_pattern,
    month_names,
    weekday_names,
)
from tracker_i18n.dates.parsing import parse_date_text
from tracker_i18n.dates.validation import matches_shape
from tracker_i18n.environment import Environment, InMemoryEnvironment
from tracker_i18n.errors import UnknownCultureError
from tracker_i18n.models.dates import (
    CalendarCell,
    DateFieldState,
    FormatPattern,
    parse_iso_date,
)
from tracker_i18n.reactive.signals import Computed, Effect, Signal
from tracker_i18n.translations.store import TranslationStore

from .form_control import FormControl, ValidationErrors

logger = structlog.get_logger(__name__)

FORMAT_ERROR = "dateFormat"
MIN_ERROR = "minDate"
MAX_ERROR = "maxDate"
REQUIRED_ERROR = "required"


def _noop(*_args: Any) -> None:
    return None


class DateInput:
    """One date field: typed text, a canonical value and a calendar popup."""

    def __init__(
        self,
        store: TranslationStore,
        *,
        min_date: str | None = None,
        max_date: str | None = None,
        required: bool = False,
        placeholder: str | None = None,
        control: FormControl | None = None,
        environment: Environment | None = None,
        settings: Settings | None = None,
        today: Callable[[], date] = date.today,
    ):
        for name, bound in (("min_date", min_date), ("max_date", max_date)):
            if bound is not None and parse_iso_date(bound) is None:
                raise ValueError(f"{name} must be a YYYY-MM-DD date, got {bound!r}")

        self._store = store
        self._settings = settings or Settings()
        self._env = environment or InMemoryEnvironment()
        self._today = today
        self.min_date = min_date
        self.max_date = max_date
        self.required = required
        self._placeholder = placeholder

        now = today()
        self._state = DateFieldState(view_year=now.year, view_month=now.month - 1)
        self._canonical: Signal[str | None] = Signal(None, name="canonical_value")
        self._disabled = False
        self._touched = False
        self._listener_handles: list[int] = []

        self._on_change: Callable[[str | None], None] = _noop
        self._on_touched: Callable[[], None] = _noop
        self._control: FormControl | None = None

        self._culture: Computed[str] = Computed(self._resolve_culture, name="culture")
        self.format_pattern: Computed[FormatPattern] = Computed(
            lambda: infer_pattern(self._culture.get()), name="format_pattern",
        )
        self.month_names: Computed[tuple[str, ...]] = Computed(
            lambda: month_names(self._culture.get()), name="month_names",
        )
        self.weekday_names: Computed[tuple[str, ...]] = Computed(
            lambda: weekday_names(self._culture.get()), name="weekday_names",
        )
        self.display_text: Computed[str] = Computed(self._render_display_text, name="display_text")

        self._culture_effect = Effect(self._sync_raw_text_to_culture, name="date_input_culture")

        if control is not None:
            self.attach(control)

    # ── Value accessor ──────────────────────────────────────────────────

    def write_value(self, value: str | None) -> None:
        """Set the value from the form layer without emitting ``on_change``."""
        if value and parse_iso_date(value) is None:
            logger.warning("date_input_invalid_write", value=value)
            value = None
        value = value or None
        self._set_canonical(value)
        self._state.raw_text = self.display_text.peek()
        # Text typed earlier is gone; bounds apply to written values too
        self._set_error(FORMAT_ERROR, None)
        self._validate_value(value)
        if value:
            self._move_view_to(value)

    def register_on_change(self, fn: Callable[[str | None], None]) -> None:
        self._on_change = fn

    def register_on_touched(self, fn: Callable[[], None]) -> None:
        self._on_touched = fn

    def set_disabled(self, is_disabled: bool) -> None:
        self._disabled = is_disabled
        if is_disabled:
            self.close()

    def attach(self, control: FormControl) -> None:
        """Bind to a parent form control: its value flows in, changes flow out."""
        self._control = control
        self.register_on_change(control.set_value)
        self.register_on_touched(control.mark_as_touched)
        self.write_value(control.value)

    # ── State ───────────────────────────────────────────────────────────

    @property
    def state(self) -> DateFieldState:
        return self._state

    @property
    def canonical_value(self) -> str | None:
        return self._canonical.peek()

    @property
    def raw_text(self) -> str:
        return self._state.raw_text

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    @property
    def disabled(self) -> bool:
        return self._disabled

    @property
    def culture(self) -> str:
        return self._culture.peek()

    @property
    def placeholder(self) -> str:
        return self._placeholder or str(self.format_pattern.get())

    # ── Typing ──────────────────────────────────────────────────────────

    def on_input(self, raw_text: str) -> None:
        """Handle a keystroke: parse when possible, flag a wrong layout."""
        if self._disabled:
            return
        self._state.raw_text = raw_text

        if not raw_text.strip():
            self._set_error(FORMAT_ERROR, None)
            self._commit(None)
            return

        iso = self._parse(raw_text)
        if iso is not None:
            self._set_error(FORMAT_ERROR, None)
            self._move_view_to(iso)
            self._commit(iso)
            return

        pattern = self.format_pattern.peek()
        if len(raw_text) >= len(str(pattern)) and not matches_shape(raw_text, pattern):
            self._set_error(FORMAT_ERROR, {"expected": str(pattern), "actual": raw_text})
        else:
            # Still typing
            self._set_error(FORMAT_ERROR, None)
        self._commit(None)

    def on_blur(self) -> None:
        self._touched = True
        self._on_touched()
        if self._canonical.peek() is not None:
            self._state.raw_text = self.display_text.peek()
            return
        pattern = self.format_pattern.peek()
        raw_text = self._state.raw_text
        if raw_text.strip() and not matches_shape(raw_text, pattern):
            self._set_error(FORMAT_ERROR, {"expected": str(pattern), "actual": raw_text})

    # ── Popup ───────────────────────────────────────────────────────────

    def open(self) -> None:
        if self._disabled or self._state.is_open:
            return
        self._state.is_open = True
        canonical = self._canonical.peek()
        if canonical is not None:
            self._move_view_to(canonical)
        self._listener_handles = [
            self._env.add_document_listener("click", self._on_document_click),
            self._env.add_document_listener("keydown", self._on_document_keydown),
        ]

    def close(self) -> None:
        self._state.is_open = False
        for handle in self._listener_handles:
            self._env.remove_document_listener(handle)
        self._listener_handles = []

    def toggle(self) -> None:
        if self._state.is_open:
            self.close()
        else:
            self.open()

    def previous_month(self) -> None:
        self._state.view_year, self._state.view_month = shift_month(
            self._state.view_year, self._state.view_month, -1,
        )

    def next_month(self) -> None:
        self._state.view_year, self._state.view_month = shift_month(
            self._state.view_year, self._state.view_month, 1,
        )

    @property
    def view_title(self) -> str:
        return f"{self.month_names.get()[self._state.view_month]} {self._state.view_year}"

    @property
    def grid(self) -> list[CalendarCell]:
        return build_grid(
            self._state.view_year,
            self._state.view_month,
            self._canonical.peek(),
            self.min_date,
            self.max_date,
            today=self._today(),
        )

    def select_cell(self, cell: CalendarCell) -> None:
        if self._disabled or cell.is_disabled:
            return
        self._set_error(FORMAT_ERROR, None)
        self._commit(cell.iso_date)
        self._state.raw_text = self.display_text.peek()
        self.close()

    def day_aria_label(self, cell: CalendarCell) -> str:
        return format_long_date(parse_iso_date(cell.iso_date), self._culture.get())

    # ── Validation display ──────────────────────────────────────────────

    @property
    def has_error(self) -> bool:
        control = self._control
        if control is None or not control.errors:
            return False
        return control.dirty or control.touched or self._touched

    @property
    def error_message(self) -> str:
        errors = self._control.errors if self._control is not None else None
        if not errors:
            return ""
        translate = self._store.translate
        if REQUIRED_ERROR in errors:
            return translate("validation.required")
        if MIN_ERROR in errors:
            return translate("validation.minDate", {"min": self._format_iso(errors[MIN_ERROR]["min"])})
        if MAX_ERROR in errors:
            return translate("validation.maxDate", {"max": self._format_iso(errors[MAX_ERROR]["max"])})
        if FORMAT_ERROR in errors:
            return translate("validation.dateFormat", {"format": errors[FORMAT_ERROR]["expected"]})
        return translate("validation.invalidValue")

    # ── Lifecycle ───────────────────────────────────────────────────────

    def destroy(self) -> None:
        """Release document listeners and reactive effects."""
        self.close()
        self._culture_effect.dispose()

    # ── Internal ────────────────────────────────────────────────────────

    def _resolve_culture(self) -> str:
        code = self._store.current_language.get()
        try:
            get_locale(code)
        except UnknownCultureError:
            logger.warning("date_input_unknown_culture", culture=code, fallback=self._settings.default_culture)
            return self._settings.default_culture
        return code

    def _render_display_text(self) -> str:
        canonical = self._canonical.get()
        if canonical is None:
            return ""
        return format_date_text(parse_iso_date(canonical), self.format_pattern.get())

    def _sync_raw_text_to_culture(self) -> None:
        self._culture.get()
        if self._canonical.peek() is not None:
            self._state.raw_text = self.display_text.peek()

    def _parse(self, raw_text: str) -> str | None:
        return parse_date_text(
            raw_text,
            self._culture.peek(),
            pivot=self._settings.two_digit_year_pivot,
            min_year=self._settings.min_year,
            max_year=self._settings.max_year,
        )

    def _set_canonical(self, value: str | None) -> None:
        self._state.canonical_value = value
        self._canonical.set(value)

    def _commit(self, value: str | None) -> None:
        if value == self._canonical.peek():
            return
        self._set_canonical(value)
        self._validate_value(value)
        self._on_change(value)

    def _validate_value(self, value: str | None) -> None:
        self._set_error(REQUIRED_ERROR, {"value": value} if self.required and value is None else None)
        too_early = value is not None and self.min_date is not None and value < self.min_date
        too_late = value is not None and self.max_date is not None and value > self.max_date
        self._set_error(MIN_ERROR, {"min": self.min_date, "actual": value} if too_early else None)
        self._set_error(MAX_ERROR, {"max": self.max_date, "actual": value} if too_late else None)

    def _set_error(self, key: str, detail: dict[str, Any] | None) -> None:
        if self._control is None:
            return
        current: ValidationErrors = dict(self._control.errors or {})
        if detail is None:
            if key not in current:
                return
            current.pop(key)
        else:
            current[key] = detail
        self._control.set_errors(current or None)

    def _move_view_to(self, iso: str) -> None:
        value = parse_iso_date(iso)
        if value is not None:
            self._state.view_year = value.year
            self._state.view_month = value.month - 1

    def _format_iso(self, iso: str) -> str:
        value = parse_iso_date(iso)
        if value is None:
            return iso
        return format_date_text(value, self.format_pattern.peek())

    def _on_document_click(self, event: Any) -> None:
        target = getattr(event, "target", event)
        if target is self:
            return
        self.close()

    def _on_document_keydown(self, event: Any) -> None:
        key = getattr(event, "key", event)
        if key == "Escape":
            self.close()
