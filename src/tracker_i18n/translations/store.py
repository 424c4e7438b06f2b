"""Reactive translation store.

Loads translations from a ``TranslationSource`` and supports lazy loading by
category. Key paths use dot notation (``common.save``) and support
``{{name}}`` interpolation: ``translate("validation.minLength", {"min": 5})``.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

import structlog

from tracker_i18n.config import Settings
from tracker_i18n.environment import Environment, InMemoryEnvironment
from tracker_i18n.errors import TranslationFetchError
from tracker_i18n.models.translation import (
    Culture,
    Leaf,
    Node,
    TranslationValue,
    resolve,
    to_translation_tree,
    to_translation_value,
)
from tracker_i18n.reactive.signals import Computed, Effect, Signal, batch

from .source import TranslationSource

logger = structlog.get_logger(__name__)

TranslationParams = Mapping[str, Any]

_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def interpolate(text: str, params: TranslationParams) -> str:
    """Replace ``{{name}}`` tokens with ``params[name]``.

    Tokens without a matching parameter are left as they are.
    """

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in params and params[key] is not None:
            return str(params[key])
        return match.group(0)

    return _PLACEHOLDER_RE.sub(_sub, text)


class TranslationStore:
    """Holds the active culture and its translation tree.

    The tree and loaded-category set are replaced wholesale on a culture
    switch; readers keep seeing the previous culture's tree until the new one
    has been fetched.
    """

    def __init__(
        self,
        source: TranslationSource,
        *,
        environment: Environment | None = None,
        settings: Settings | None = None,
    ):
        self._source = source
        self._env = environment or InMemoryEnvironment()
        self._settings = settings or Settings()

        self._cultures: Signal[list[Culture]] = Signal([], name="cultures")
        self._current_culture: Signal[str] = Signal(self._stored_language(), name="current_culture")
        self._translations: Signal[Node] = Signal(Node(), name="translations")
        self._loaded_categories: Signal[frozenset[str]] = Signal(frozenset(), name="loaded_categories")
        self._loading: Signal[bool] = Signal(False, name="loading")
        self._error: Signal[str | None] = Signal(None, name="error")
        # Culture of the most recent set_language call; older responses are dropped
        self._requested_culture: str | None = None

        self.cultures = self._cultures.as_readonly()
        self.current_language = self._current_culture.as_readonly()
        self.translations = self._translations.as_readonly()
        self.loaded_categories = self._loaded_categories.as_readonly()
        self.loading = self._loading.as_readonly()
        self.error_message = self._error.as_readonly()
        self.current_culture_info: Computed[Culture | None] = Computed(
            self._find_current_culture, name="current_culture_info",
        )

        self._persist_effect = Effect(self._persist_language, name="persist_language")

    # ── Loading ──────────────────────────────────────────────────────────

    async def initialize(self) -> None:
        """Load the available cultures, then the active culture's translations."""
        cultures = await self.load_cultures()
        current = self._current_culture.peek()
        if cultures and not any(c.code == current for c in cultures):
            fallback = next((c for c in cultures if c.is_default), cultures[0])
            logger.info("culture_not_available", requested=current, fallback=fallback.code)
            self._current_culture.set(fallback.code)
        self._requested_culture = self._current_culture.peek()
        await self._load_translations(self._requested_culture)

    async def load_cultures(self) -> list[Culture]:
        """Fetch the list of available cultures. Returns ``[]`` on failure."""
        try:
            cultures = await self._source.fetch_cultures()
        except TranslationFetchError as e:
            logger.error("cultures_load_failed", error=str(e))
            self._error.set("Failed to load available languages")
            return []
        self._cultures.set(list(cultures))
        return list(cultures)

    async def set_language(self, culture_code: str) -> None:
        """Switch the active culture and reload all of its translations."""
        if culture_code == self._current_culture.peek():
            # Also cancels the effect of any switch still in flight
            self._requested_culture = culture_code
            return
        self._requested_culture = culture_code
        self._loaded_categories.set(frozenset())
        await self._load_translations(culture_code)

    async def load_category(self, category: str) -> None:
        """Lazily fetch one category and merge it under ``tree[category]``.

        Concurrent calls for the same category are not de-duplicated; the last
        response to arrive wins.
        """
        if category in self._loaded_categories.peek():
            return

        culture = self._current_culture.peek()
        try:
            payload = await self._source.fetch_category(culture, category)
        except TranslationFetchError as e:
            logger.error("category_load_failed", culture=culture, category=category, error=str(e))
            self._error.set(f"Failed to load {category} translations")
            return

        if culture != self._current_culture.peek():
            logger.info("category_load_discarded", culture=culture, category=category)
            return

        subtree = to_translation_value(payload)
        with batch():
            self._translations.update(lambda tree: tree.with_child(category, subtree))
            self._loaded_categories.update(lambda loaded: loaded | {category})
        logger.debug("category_loaded", culture=culture, category=category)

    async def _load_translations(self, culture_code: str) -> bool:
        self._loading.set(True)
        self._error.set(None)
        try:
            response = await self._source.fetch_translations(culture_code)
        except TranslationFetchError as e:
            logger.error("translations_load_failed", culture=culture_code, error=str(e))
            if self._requested_culture != culture_code:
                # A newer switch owns the loading and error state
                if self._requested_culture == self._current_culture.peek():
                    self._loading.set(False)
                return False
            with batch():
                self._error.set("Failed to load translations")
                self._loading.set(False)
            return False

        if self._requested_culture != culture_code:
            logger.info("translations_superseded", culture=culture_code, requested=self._requested_culture)
            if self._requested_culture == self._current_culture.peek():
                self._loading.set(False)
            return False

        tree = to_translation_tree(response.translations)
        with batch():
            self._translations.set(tree)
            self._loaded_categories.set(tree.keys())
            self._current_culture.set(culture_code)
            self._loading.set(False)
        logger.info("translations_loaded", culture=culture_code, categories=len(tree.children))
        return True

    # ── Lookup ───────────────────────────────────────────────────────────

    def translate(self, key_path: str, params: TranslationParams | None = None) -> str:
        """Resolve *key_path*, falling back to the key path itself when missing."""
        value = resolve(self._translations.get(), key_path)
        if not isinstance(value, Leaf):
            logger.warning(
                "translation_key_missing",
                key_path=key_path,
                culture=self._current_culture.peek(),
            )
            return key_path
        if params is not None:
            return interpolate(value.text, params)
        return value.text

    def translate_computed(self, key_path: str, params: TranslationParams | None = None) -> Computed[str]:
        """Return a computed translation that follows culture changes."""
        return Computed(lambda: self.translate(key_path, params), name=f"translate:{key_path}")

    def has_translation(self, key_path: str) -> bool:
        return resolve(self._translations.get(), key_path) is not None

    def get_category_translations(self, category: str) -> TranslationValue:
        """Return the subtree for *category*, or an empty node."""
        return self._translations.get().get(category) or Node()

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        self._persist_effect.dispose()
        await self._source.aclose()

    # ── Internal ─────────────────────────────────────────────────────────

    def _find_current_culture(self) -> Culture | None:
        code = self._current_culture.get()
        return next((c for c in self._cultures.get() if c.code == code), None)

    def _persist_language(self) -> None:
        self._env.storage_set(self._settings.language_storage_key, self._current_culture.get())

    def _stored_language(self) -> str:
        stored = self._env.storage_get(self._settings.language_storage_key)
        if stored:
            return stored
        return self._env.preferred_language() or self._settings.default_culture
