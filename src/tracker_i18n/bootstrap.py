"""Wire a translation store from settings."""

from __future__ import annotations

import structlog

from tracker_i18n.config import Settings
from tracker_i18n.environment import Environment
from tracker_i18n.translations.source import HttpTranslationSource
from tracker_i18n.translations.store import TranslationStore
from tracker_i18n.utils.logging import setup_logging

logger = structlog.get_logger(__name__)


def create_translation_store(
    settings: Settings | None = None,
    environment: Environment | None = None,
    *,
    configure_logging: bool = True,
) -> TranslationStore:
    """Build an HTTP-backed ``TranslationStore``.

    Call ``await store.initialize()`` before the first lookup and
    ``await store.aclose()`` on shutdown.
    """
    settings = settings or Settings()
    if configure_logging:
        setup_logging(settings.log_level, log_format=settings.log_format)
    source = HttpTranslationSource(settings.api_base_url, timeout=settings.request_timeout)
    store = TranslationStore(source, environment=environment, settings=settings)
    logger.info(
        "translation_store_created",
        api_base_url=settings.api_base_url,
        culture=store.current_language.peek(),
    )
    return store
