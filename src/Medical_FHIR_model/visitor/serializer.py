"""Render model graphs as FHIR-JSON-shaped dictionaries.

The serializer is a plain traversal consumer: every node opens a frame on
``visit_start`` and attaches its rendering to the parent frame on ``visit_end``.
Primitives collapse to their value, with ``id``/``extension`` moved to the
``_<name>`` companion key. Populated choice slots are keyed by their tag
(``valueQuantity``). Decimals are kept as :class:`decimal.Decimal` to preserve
precision; dates and datetimes are rendered in ISO 8601.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from functools import lru_cache
from typing import Any

from Medical_FHIR_model.model.base import Resource
from Medical_FHIR_model.model.declarations import ElementSpec
from Medical_FHIR_model.model.primitives import PrimitiveType
from Medical_FHIR_model.model.support import choice_tag, element_specs

from .base import DefaultVisitor


@dataclass(slots=True)
class _Frame:
    node: Any
    payload: dict[str, Any] = field(default_factory=dict)
    value: Any = None


@lru_cache(maxsize=1024)
def _specs_by_json_name(cls: type) -> dict[str, ElementSpec]:
    return {spec.json_name: spec for spec in element_specs(cls)}


def _json_value(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


class DictSerializer(DefaultVisitor):
    """Builds a nested ``dict`` for the visited graph in :attr:`result`."""

    def __init__(self) -> None:
        super().__init__()
        self._stack: list[_Frame] = []
        self.result: dict[str, Any] | None = None

    def visit_start(self, name: str, index: int | None, node: Any) -> None:
        frame = _Frame(node)
        if isinstance(node, Resource):
            frame.payload["resourceType"] = type(node).__name__
        self._stack.append(frame)

    def visit_value(self, name: str, index: int | None, value: Any) -> None:
        frame = self._stack[-1]
        if isinstance(frame.node, PrimitiveType) and name == "value":
            frame.value = _json_value(value)
        else:
            frame.payload[name] = _json_value(value)

    def visit_end(self, name: str, index: int | None, node: Any) -> None:
        frame = self._stack.pop()
        if not self._stack:
            if isinstance(node, PrimitiveType):
                frame.payload["value"] = frame.value
            self.result = frame.payload
            return
        parent = self._stack[-1]
        key = self._key(parent.node, name, node)
        primitive = isinstance(node, PrimitiveType)
        rendered = frame.value if primitive else frame.payload
        extras = (frame.payload or None) if primitive else None
        if index is None:
            if rendered is not None:
                parent.payload[key] = rendered
            if extras is not None:
                parent.payload[f"_{key}"] = extras
        elif primitive:
            parent.payload.setdefault(key, []).append(rendered)
            parent.payload.setdefault(f"_{key}", []).append(extras)
        else:
            parent.payload.setdefault(key, []).append(rendered)

    def visit_list_end(self, name: str, items: Sequence[Any], element_type: type) -> None:
        payload = self._stack[-1].payload
        # primitive lists carry aligned value and companion arrays
        for key in (name, f"_{name}"):
            if key in payload and all(item is None for item in payload[key]):
                del payload[key]

    @staticmethod
    def _key(parent: Any, name: str, node: Any) -> str:
        spec = _specs_by_json_name(type(parent)).get(name)
        if spec is not None and spec.choice:
            return choice_tag(spec, node)
        return name


def to_dict(node: Any) -> dict[str, Any]:
    """Serialize ``node`` into a FHIR-JSON-shaped dictionary."""
    serializer = DictSerializer()
    node.accept(serializer)
    return serializer.result or {}


__all__ = ["DictSerializer", "to_dict"]
