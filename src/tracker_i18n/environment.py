"""Environment port: key/value storage and document-level event listeners.

The store persists the active culture and the date widget closes its popup on
outside clicks. Both go through this port instead of touching a browser
document or storage directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from itertools import count
from typing import Any, Callable

import structlog

logger = structlog.get_logger(__name__)

DocumentListener = Callable[[Any], None]


class Environment(ABC):
    """Abstract host environment."""

    @abstractmethod
    def storage_get(self, key: str) -> str | None:
        """Return the stored value for *key*, or ``None``."""
        ...

    @abstractmethod
    def storage_set(self, key: str, value: str) -> None:
        """Persist *value* under *key*."""
        ...

    @abstractmethod
    def preferred_language(self) -> str | None:
        """Return the user agent's preferred culture code, if known."""
        ...

    @abstractmethod
    def add_document_listener(self, event: str, handler: DocumentListener) -> int:
        """Attach *handler* to a document-level *event*. Returns a handle."""
        ...

    @abstractmethod
    def remove_document_listener(self, handle: int) -> None:
        """Detach a listener previously returned by ``add_document_listener``."""
        ...


class InMemoryEnvironment(Environment):
    """Process-local environment used by default and in tests."""

    def __init__(self, storage: dict[str, str] | None = None, language: str | None = None):
        self._storage: dict[str, str] = dict(storage or {})
        self._language = language
        self._listeners: dict[int, tuple[str, DocumentListener]] = {}
        self._handles = count(1)

    def storage_get(self, key: str) -> str | None:
        return self._storage.get(key)

    def storage_set(self, key: str, value: str) -> None:
        self._storage[key] = value

    def preferred_language(self) -> str | None:
        return self._language

    def add_document_listener(self, event: str, handler: DocumentListener) -> int:
        handle = next(self._handles)
        self._listeners[handle] = (event, handler)
        return handle

    def remove_document_listener(self, handle: int) -> None:
        self._listeners.pop(handle, None)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def dispatch(self, event: str, payload: Any = None) -> int:
        """Deliver *event* to every attached listener. Returns how many ran."""
        delivered = 0
        for registered, handler in list(self._listeners.values()):
            if registered == event:
                handler(payload)
                delivered += 1
        logger.debug("document_event_dispatched", event_name=event, listeners=delivered)
        return delivered
