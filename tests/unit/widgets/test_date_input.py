"""Test the locale-aware date input widget."""
from types import SimpleNamespace

import pytest

from tracker_i18n.environment import InMemoryEnvironment
from tracker_i18n.translations.store import TranslationStore
from tracker_i18n.widgets.date_input import FORMAT_ERROR, MAX_ERROR, MIN_ERROR, REQUIRED_ERROR, DateInput


@pytest.fixture
def make_input(store, environment, settings, fixed_today):
    def _make(target_store=None, **kwargs):
        return DateInput(
            target_store or store,
            environment=environment,
            settings=settings,
            today=lambda: fixed_today,
            **kwargs,
        )
    return _make


class TestConstruction:
    def test_starts_empty_on_current_month(self, make_input):
        widget = make_input()
        assert widget.canonical_value is None
        assert widget.raw_text == ""
        assert (widget.state.view_year, widget.state.view_month) == (2024, 2)

    def test_placeholder_defaults_to_layout(self, make_input):
        assert make_input().placeholder == "mm/dd/yyyy"
        assert make_input(placeholder="Due date").placeholder == "Due date"

    @pytest.mark.parametrize("kwargs", [{"min_date": "2024-02-30"}, {"max_date": "15/03/2024"}])
    def test_invalid_bounds_rejected(self, make_input, kwargs):
        with pytest.raises(ValueError):
            make_input(**kwargs)

    def test_unknown_culture_falls_back_to_default(self, mock_source, settings, make_input):
        env = InMemoryEnvironment(storage={settings.language_storage_key: "xx-YY"})
        odd_store = TranslationStore(mock_source, environment=env, settings=settings)

        widget = make_input(odd_store)

        assert widget.culture == "en-US"
        assert widget.format_pattern.get() == "mm/dd/yyyy"

    def test_attach_reads_control_value(self, make_input, control):
        control._value = "2024-01-05"
        widget = make_input(control=control)
        assert widget.raw_text == "01/05/2024"
        assert control.values_written == []


class TestWriteValue:
    def test_renders_in_culture_layout(self, make_input):
        widget = make_input()
        widget.write_value("2024-03-05")
        assert widget.canonical_value == "2024-03-05"
        assert widget.raw_text == "03/05/2024"

    def test_does_not_emit(self, make_input, control):
        widget = make_input(control=control)
        widget.write_value("2024-03-05")
        assert control.values_written == []

    def test_moves_view(self, make_input):
        widget = make_input()
        widget.write_value("2020-07-04")
        assert (widget.state.view_year, widget.state.view_month) == (2020, 6)

    def test_invalid_value_clears(self, make_input):
        widget = make_input()
        widget.write_value("2024-03-05")
        widget.write_value("not-a-date")
        assert widget.canonical_value is None
        assert widget.raw_text == ""

    def test_clears_format_error_from_typing(self, make_input, control):
        widget = make_input(control=control)
        widget.on_input("99/99/99999")
        assert FORMAT_ERROR in control.errors

        widget.write_value("2024-03-15")

        assert control.errors is None
        assert control.values_written == []

    def test_checks_bounds(self, make_input, control):
        widget = make_input(control=control, min_date="2024-03-10", max_date="2024-03-20")

        widget.write_value("2024-03-01")
        assert control.errors[MIN_ERROR] == {"min": "2024-03-10", "actual": "2024-03-01"}

        widget.write_value("2024-03-25")
        assert MAX_ERROR in control.errors
        assert MIN_ERROR not in control.errors

        widget.write_value("2024-03-15")
        assert control.errors is None
        assert control.values_written == []

    def test_required_flagged_on_empty_write(self, make_input, control):
        widget = make_input(control=control, required=True)
        assert REQUIRED_ERROR in control.errors
        assert widget.has_error is False

        widget.write_value("2024-03-15")
        assert control.errors is None

    def test_only_display_text_recomputes(self, make_input):
        widget = make_input()
        pattern_version = widget.format_pattern.version
        weekdays_version = widget.weekday_names.version
        display_version = widget.display_text.version

        widget.write_value("2024-03-05")

        assert widget.format_pattern.version == pattern_version
        assert widget.weekday_names.version == weekdays_version
        assert widget.display_text.version != display_version


class TestTyping:
    def test_parses_and_emits(self, make_input, control):
        widget = make_input(control=control)
        widget.on_input("03/15/2024")

        assert widget.canonical_value == "2024-03-15"
        assert control.values_written == ["2024-03-15"]
        assert control.errors is None

    def test_emits_once_per_change(self, make_input, control):
        widget = make_input(control=control)
        widget.on_input("03/15/2024")
        widget.on_input("3/15/2024")
        assert control.values_written == ["2024-03-15"]

    def test_iso_text_accepted(self, make_input, control):
        widget = make_input(control=control)
        widget.on_input("2024-03-15")
        assert widget.canonical_value == "2024-03-15"

    def test_partial_text_has_no_format_error(self, make_input, control):
        widget = make_input(control=control)
        widget.on_input("03/1")
        assert widget.canonical_value is None
        assert not (control.errors or {}).get(FORMAT_ERROR)

    def test_wrong_shape_flags_format_error(self, make_input, control):
        widget = make_input(control=control)
        widget.on_input("2024/03/15xx")

        assert control.errors[FORMAT_ERROR] == {"expected": "mm/dd/yyyy", "actual": "2024/03/15xx"}
        assert widget.canonical_value is None

    def test_clearing_text_clears_value(self, make_input, control):
        widget = make_input(control=control)
        widget.on_input("03/15/2024")
        widget.on_input("")
        assert widget.canonical_value is None
        assert control.values_written == ["2024-03-15", None]

    def test_invalid_text_after_valid_value_emits_none(self, make_input, control):
        widget = make_input(control=control)
        widget.on_input("03/15/2024")
        widget.on_input("02/30/2024")
        assert widget.canonical_value is None
        assert control.values_written[-1] is None

    def test_view_follows_parsed_value(self, make_input):
        widget = make_input()
        widget.on_input("12/25/2022")
        assert (widget.state.view_year, widget.state.view_month) == (2022, 11)


class TestBlur:
    def test_normalizes_text(self, make_input, control):
        widget = make_input(control=control)
        widget.on_input("3/5/2024")
        widget.on_blur()

        assert widget.raw_text == "03/05/2024"
        assert control.touched is True

    def test_flags_bad_shape(self, make_input, control):
        widget = make_input(control=control)
        widget.on_input("aa/bb")
        widget.on_blur()
        assert control.errors[FORMAT_ERROR]["actual"] == "aa/bb"

    def test_error_shown_only_after_interaction(self, make_input, control):
        widget = make_input(control=control)
        widget.on_input("aa/bb/cccc")

        assert control.errors
        assert widget.has_error is False
        widget.on_blur()
        assert widget.has_error is True

    def test_on_touched_callback(self, make_input):
        calls = []
        widget = make_input()
        widget.register_on_touched(lambda: calls.append(True))
        widget.on_blur()
        assert calls == [True]


class TestValueValidation:
    def test_required(self, make_input, control):
        widget = make_input(control=control, required=True)
        widget.on_input("03/15/2024")
        widget.on_input("")
        assert REQUIRED_ERROR in control.errors

    def test_bounds(self, make_input, control):
        widget = make_input(control=control, min_date="2024-03-10", max_date="2024-03-20")

        widget.on_input("03/01/2024")
        assert control.errors[MIN_ERROR] == {"min": "2024-03-10", "actual": "2024-03-01"}

        widget.on_input("03/25/2024")
        assert MIN_ERROR not in control.errors
        assert MAX_ERROR in control.errors

        widget.on_input("03/15/2024")
        assert control.errors is None


class TestErrorMessages:
    @pytest.mark.asyncio
    async def test_min_date_message_uses_layout(self, ready_store, make_input, control):
        widget = make_input(ready_store, control=control, min_date="2024-03-10")
        widget.on_input("03/01/2024")
        assert widget.error_message == "Date must be on or after 03/10/2024"

    @pytest.mark.asyncio
    async def test_required_message(self, ready_store, make_input, control):
        widget = make_input(ready_store, control=control, required=True)
        widget.on_input("03/01/2024")
        widget.on_input("")
        assert widget.error_message == "This field is required"

    @pytest.mark.asyncio
    async def test_format_message(self, ready_store, make_input, control):
        widget = make_input(ready_store, control=control)
        widget.on_input("2024/03/15xx")
        assert widget.error_message == "Use the format mm/dd/yyyy"

    @pytest.mark.asyncio
    async def test_unknown_error_key(self, ready_store, make_input, control):
        widget = make_input(ready_store, control=control)
        control.set_errors({"serverRejected": True})
        assert widget.error_message == "Invalid value"

    def test_no_errors(self, make_input, control):
        assert make_input(control=control).error_message == ""


class TestCultureSwitch:
    @pytest.mark.asyncio
    async def test_relayouts_without_touching_value(self, ready_store, make_input, control):
        widget = make_input(ready_store, control=control)
        widget.write_value("2024-03-15")
        assert widget.raw_text == "03/15/2024"

        await ready_store.set_language("it-IT")

        assert widget.culture == "it-IT"
        assert widget.format_pattern.get() == "dd/mm/yyyy"
        assert widget.raw_text == "15/03/2024"
        assert widget.canonical_value == "2024-03-15"
        assert widget.weekday_names.get()[0] == "dom"
        assert widget.view_title == "marzo 2024"
        assert control.values_written == []

    @pytest.mark.asyncio
    async def test_typing_follows_new_layout(self, ready_store, make_input):
        widget = make_input(ready_store)
        await ready_store.set_language("it-IT")
        widget.on_input("05/03/2024")
        assert widget.canonical_value == "2024-03-05"


class TestPopup:
    def test_open_attaches_listeners(self, make_input, environment):
        widget = make_input()
        widget.open()
        assert widget.is_open is True
        assert environment.listener_count == 2

        widget.close()
        assert environment.listener_count == 0

    def test_outside_click_closes(self, make_input, environment):
        widget = make_input()
        widget.open()
        environment.dispatch("click", SimpleNamespace(target=object()))
        assert widget.is_open is False
        assert environment.listener_count == 0

    def test_click_on_widget_keeps_open(self, make_input, environment):
        widget = make_input()
        widget.open()
        environment.dispatch("click", SimpleNamespace(target=widget))
        assert widget.is_open is True

    def test_escape_closes(self, make_input, environment):
        widget = make_input()
        widget.open()
        environment.dispatch("keydown", SimpleNamespace(key="Enter"))
        assert widget.is_open is True
        environment.dispatch("keydown", SimpleNamespace(key="Escape"))
        assert widget.is_open is False

    def test_toggle(self, make_input):
        widget = make_input()
        widget.toggle()
        assert widget.is_open is True
        widget.toggle()
        assert widget.is_open is False

    def test_open_moves_view_to_value(self, make_input):
        widget = make_input()
        widget.write_value("2021-06-10")
        widget.next_month()
        widget.open()
        assert (widget.state.view_year, widget.state.view_month) == (2021, 5)

    def test_month_navigation(self, make_input):
        widget = make_input()
        assert widget.view_title == "March 2024"
        widget.next_month()
        assert widget.view_title == "April 2024"
        widget.previous_month()
        widget.previous_month()
        assert widget.view_title == "February 2024"

    def test_select_cell(self, make_input, control):
        widget = make_input(control=control)
        widget.open()
        cell = next(c for c in widget.grid if c.iso_date == "2024-03-20")

        widget.select_cell(cell)

        assert widget.canonical_value == "2024-03-20"
        assert widget.raw_text == "03/20/2024"
        assert widget.is_open is False
        assert control.values_written == ["2024-03-20"]

    def test_disabled_cell_ignored(self, make_input, control):
        widget = make_input(control=control, max_date="2024-03-10")
        cell = next(c for c in widget.grid if c.iso_date == "2024-03-20")

        assert cell.is_disabled is True
        widget.select_cell(cell)
        assert widget.canonical_value is None

    def test_grid_marks_today_and_selection(self, make_input):
        widget = make_input()
        widget.write_value("2024-03-02")
        cells = widget.grid
        assert [c.iso_date for c in cells if c.is_today] == ["2024-03-15"]
        assert [c.iso_date for c in cells if c.is_selected] == ["2024-03-02"]

    def test_day_aria_label(self, make_input):
        widget = make_input()
        cell = next(c for c in widget.grid if c.iso_date == "2024-03-20")
        assert widget.day_aria_label(cell) == "March 20, 2024"


class TestDisabled:
    def test_disabling_closes_popup(self, make_input, environment):
        widget = make_input()
        widget.open()
        widget.set_disabled(True)
        assert widget.is_open is False
        assert environment.listener_count == 0

    def test_ignores_interaction(self, make_input, control):
        widget = make_input(control=control)
        widget.set_disabled(True)

        widget.open()
        widget.on_input("03/15/2024")
        cell = next(c for c in widget.grid if c.iso_date == "2024-03-20")
        widget.select_cell(cell)

        assert widget.is_open is False
        assert widget.canonical_value is None
        assert control.values_written == []


class TestDestroy:
    def test_releases_listeners_and_effect(self, make_input, environment):
        widget = make_input()
        widget.open()
        widget.destroy()
        assert environment.listener_count == 0
        assert widget._culture_effect.disposed is True
