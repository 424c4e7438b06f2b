"""Minimal reactive primitives: signals, computed values and effects.

Every mutable cell (``Signal``) carries a version counter that advances on each
write. A ``Computed`` caches its last result together with the versions of the
cells it read while computing it, and recomputes only when one of those
versions has moved. An ``Effect`` is re-run on flush when one of its
dependencies has moved; ``batch()`` defers the flush until the outermost block
exits so effects never observe a half-applied update.

Everything here assumes a single thread (the UI event loop).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Generic, Iterator, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Dependency frames of the computations currently being evaluated
_frames: list[list[tuple[Any, int]]] = []
_effects: list["Effect"] = []
_batch_depth = 0
_flushing = False


def _track(source: Any, version: int) -> None:
    if _frames:
        _frames[-1].append((source, version))


def _is_stale(deps: list[tuple[Any, int]] | None) -> bool:
    if deps is None:
        return True
    return any(source.version != seen for source, seen in deps)


class Signal(Generic[T]):
    """A mutable reactive cell."""

    def __init__(self, value: T, *, name: str = ""):
        self._value = value
        self._version = 0
        self.name = name

    @property
    def version(self) -> int:
        return self._version

    def get(self) -> T:
        _track(self, self._version)
        return self._value

    def peek(self) -> T:
        """Read the value without registering a dependency."""
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        self._version += 1
        _flush()

    def update(self, fn: Callable[[T], T]) -> None:
        self.set(fn(self._value))

    def as_readonly(self) -> "ReadonlySignal[T]":
        return ReadonlySignal(self)

    def __repr__(self) -> str:
        return f"Signal({self.name or '?'}={self._value!r}, v{self._version})"


class ReadonlySignal(Generic[T]):
    """Read-only view over a ``Signal`` handed out to consumers."""

    def __init__(self, source: Signal[T]):
        self._source = source

    @property
    def version(self) -> int:
        return self._source.version

    def get(self) -> T:
        return self._source.get()

    def peek(self) -> T:
        return self._source.peek()


class Computed(Generic[T]):
    """A cached value derived from other signals or computed values."""

    def __init__(self, fn: Callable[[], T], *, name: str = ""):
        self._fn = fn
        self._value: T | None = None
        self._version = 0
        self._deps: list[tuple[Any, int]] | None = None
        self._computing = False
        self.name = name

    @property
    def version(self) -> int:
        self._refresh()
        return self._version

    def get(self) -> T:
        self._refresh()
        _track(self, self._version)
        return self._value  # type: ignore[return-value]

    def peek(self) -> T:
        self._refresh()
        return self._value  # type: ignore[return-value]

    def _refresh(self) -> None:
        if not _is_stale(self._deps):
            return
        if self._computing:
            raise RuntimeError(f"Cycle detected while computing {self.name or self!r}")
        self._computing = True
        frame: list[tuple[Any, int]] = []
        _frames.append(frame)
        try:
            value = self._fn()
        finally:
            _frames.pop()
            self._computing = False
        first = self._deps is None
        self._deps = frame
        if first or value != self._value:
            self._value = value
            self._version += 1


class Effect:
    """Runs a side-effecting function now and again whenever its inputs change."""

    def __init__(self, fn: Callable[[], None], *, name: str = ""):
        self._fn = fn
        self._deps: list[tuple[Any, int]] | None = None
        self._disposed = False
        self.name = name
        _effects.append(self)
        self._run()

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        if self in _effects:
            _effects.remove(self)

    def _run(self) -> None:
        frame: list[tuple[Any, int]] = []
        _frames.append(frame)
        try:
            self._fn()
        finally:
            _frames.pop()
            self._deps = frame

    def _maybe_run(self) -> bool:
        if self._disposed or not _is_stale(self._deps):
            return False
        self._run()
        return True


@contextmanager
def batch() -> Iterator[None]:
    """Defer effects until every write inside the block has been applied."""
    global _batch_depth
    _batch_depth += 1
    try:
        yield
    finally:
        _batch_depth -= 1
        if _batch_depth == 0:
            _flush()


def untracked(fn: Callable[[], T]) -> T:
    """Evaluate *fn* without recording dependencies for the caller."""
    _frames.append([])
    try:
        return fn()
    finally:
        _frames.pop()


def _flush() -> None:
    global _flushing
    if _batch_depth or _flushing:
        return
    _flushing = True
    try:
        # Effects may write signals; loop until everything has settled.
        ran = True
        while ran:
            ran = False
            for effect in list(_effects):
                try:
                    ran = effect._maybe_run() or ran
                except Exception:
                    logger.exception("effect_failed", effect=effect.name)
    finally:
        _flushing = False
