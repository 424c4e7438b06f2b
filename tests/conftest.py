"""Shared test fixtures."""
from datetime import date
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from tracker_i18n.config import Settings
from tracker_i18n.environment import InMemoryEnvironment
from tracker_i18n.models.translation import Culture, TranslationsResponse
from tracker_i18n.reactive import signals
from tracker_i18n.translations.source import TranslationSource
from tracker_i18n.translations.store import TranslationStore
from tracker_i18n.widgets.form_control import FormControl

CULTURES = [
    Culture(code="en-US", name="English", is_default=True),
    Culture(code="it-IT", name="Italiano"),
]

TREES = {
    "en-US": {
        "common": {"save": "Save", "cancel": "Cancel"},
        "validation": {
            "required": "This field is required",
            "minDate": "Date must be on or after {{min}}",
            "maxDate": "Date must be on or before {{max}}",
            "dateFormat": "Use the format {{format}}",
            "invalidValue": "Invalid value",
            "minLength": "Minimum {{min}} characters",
        },
    },
    "it-IT": {
        "common": {"save": "Salva", "cancel": "Annulla"},
        "validation": {
            "required": "Campo obbligatorio",
            "minDate": "La data deve essere dal {{min}}",
            "maxDate": "La data deve essere entro il {{max}}",
            "dateFormat": "Usa il formato {{format}}",
            "invalidValue": "Valore non valido",
            "minLength": "Minimo {{min}} caratteri",
        },
    },
}

CATEGORIES = {
    ("en-US", "projects"): {"title": "Projects", "list": {"empty": "No projects yet"}},
    ("it-IT", "projects"): {"title": "Progetti", "list": {"empty": "Nessun progetto"}},
}


class FakeFormControl(FormControl):
    """In-memory stand-in for a reactive form control."""

    def __init__(self, value=None):
        self._value = value
        self._errors = None
        self._dirty = False
        self._touched = False
        self.values_written = []

    @property
    def value(self):
        return self._value

    def set_value(self, value):
        self._value = value
        self._dirty = True
        self.values_written.append(value)

    @property
    def errors(self):
        return self._errors

    def set_errors(self, errors):
        self._errors = errors

    @property
    def dirty(self):
        return self._dirty

    @property
    def touched(self):
        return self._touched

    def mark_as_touched(self):
        self._touched = True


@pytest.fixture(autouse=True)
def _reset_effects():
    yield
    signals._effects.clear()


@pytest.fixture
def settings():
    return Settings(api_base_url="http://test.local/api", default_culture="en-US")


@pytest.fixture
def environment():
    return InMemoryEnvironment()


@pytest.fixture
def mock_source():
    """Translation source backed by the in-module fixtures."""
    source = AsyncMock(spec=TranslationSource)
    source.fetch_cultures.return_value = list(CULTURES)
    source.fetch_translations.side_effect = lambda code: TranslationsResponse(
        culture=code, translations=TREES[code],
    )
    source.fetch_category.side_effect = lambda code, category: CATEGORIES[(code, category)]
    return source


@pytest.fixture
def store(mock_source, environment, settings):
    return TranslationStore(mock_source, environment=environment, settings=settings)


@pytest_asyncio.fixture
async def ready_store(store):
    await store.initialize()
    return store


@pytest.fixture
def control():
    return FakeFormControl()


@pytest.fixture
def fixed_today():
    return date(2024, 3, 15)
