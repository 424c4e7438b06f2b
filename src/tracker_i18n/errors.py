"""Exception types raised by the translation store and date engine."""

from __future__ import annotations


class TrackerI18nError(Exception):
    """Base class for all package errors."""


class TranslationFetchError(TrackerI18nError):
    """A culture list, culture tree or category could not be fetched."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class UnknownCultureError(TrackerI18nError, ValueError):
    """The culture code cannot be resolved to a CLDR locale."""

    def __init__(self, culture_code: str):
        super().__init__(f"Unknown culture code: {culture_code!r}")
        self.culture_code = culture_code
