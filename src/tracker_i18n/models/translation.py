"""Culture and translation-tree models.

A culture's translations form a tree: ``Leaf`` holds a translated string and
``Node`` maps keys to further values. JSON payloads from the translations API
are converted with ``to_translation_value`` so that key-path resolution works
on two known shapes instead of arbitrary JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field


class Culture(BaseModel):
    """An available culture/language as returned by ``/translations/cultures``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: str
    name: str
    is_default: bool = Field(default=False, alias="isDefault")


class TranslationsResponse(BaseModel):
    """Response of ``/translations/{culture}``."""

    culture: str
    translations: dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True)
class Leaf:
    text: str


@dataclass(frozen=True)
class Node:
    children: Mapping[str, "TranslationValue"] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze a private copy so callers cannot mutate a published tree
        object.__setattr__(self, "children", MappingProxyType(dict(self.children)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return dict(self.children) == dict(other.children)

    def __hash__(self) -> int:
        return hash(frozenset(self.children.items()))

    def get(self, key: str) -> "TranslationValue | None":
        return self.children.get(key)

    def keys(self) -> frozenset[str]:
        return frozenset(self.children)

    def with_child(self, key: str, value: "TranslationValue") -> "Node":
        """Return a copy of this node with *key* replaced by *value*."""
        merged = dict(self.children)
        merged[key] = value
        return Node(merged)

    def to_json(self) -> dict[str, Any]:
        return {
            key: value.to_json() if isinstance(value, Node) else value.text
            for key, value in self.children.items()
        }


TranslationValue = Union[Leaf, Node]


def to_translation_value(obj: Any) -> TranslationValue:
    """Convert a JSON-shaped object into a ``TranslationValue``.

    Strings, numbers and booleans become leaves, objects become nodes and
    arrays become nodes keyed by element index. ``None`` entries are dropped.
    """
    if isinstance(obj, Leaf | Node):
        return obj
    if isinstance(obj, str):
        return Leaf(obj)
    if isinstance(obj, bool):
        return Leaf("true" if obj else "false")
    if isinstance(obj, int | float):
        return Leaf(str(obj))
    if isinstance(obj, Mapping):
        return Node({str(k): to_translation_value(v) for k, v in obj.items() if v is not None})
    if isinstance(obj, list | tuple):
        return Node({str(i): to_translation_value(v) for i, v in enumerate(obj) if v is not None})
    raise TypeError(f"Unsupported translation value type: {type(obj).__name__}")


def to_translation_tree(obj: Mapping[str, Any] | None) -> Node:
    """Convert a top-level translations object into a ``Node``."""
    if not obj:
        return Node()
    value = to_translation_value(obj)
    if not isinstance(value, Node):
        raise TypeError(f"Translations must be an object, got {type(obj).__name__}")
    return value


def resolve(tree: Node, key_path: str) -> TranslationValue | None:
    """Walk *tree* along a dot-separated *key_path*.

    Returns ``None`` as soon as a segment is missing or a leaf is reached
    before the path ends.
    """
    current: TranslationValue = tree
    for segment in key_path.split("."):
        if not isinstance(current, Node):
            return None
        child = current.get(segment)
        if child is None:
            return None
        current = child
    return current
