"""Parent form-control contract consumed by the widgets."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

ValidationErrors = dict[str, Any]


class FormControl(ABC):
    """The slice of a reactive form control that a value accessor talks to."""

    @property
    @abstractmethod
    def value(self) -> Any:
        ...

    @abstractmethod
    def set_value(self, value: Any) -> None:
        ...

    @property
    @abstractmethod
    def errors(self) -> ValidationErrors | None:
        ...

    @abstractmethod
    def set_errors(self, errors: ValidationErrors | None) -> None:
        ...

    @property
    @abstractmethod
    def dirty(self) -> bool:
        ...

    @property
    @abstractmethod
    def touched(self) -> bool:
        ...

    @abstractmethod
    def mark_as_touched(self) -> None:
        ...
