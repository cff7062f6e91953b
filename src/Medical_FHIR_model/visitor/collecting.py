"""Visitors that track element paths and collect nodes by type."""

from __future__ import annotations

from typing import Any

from .base import DefaultVisitor


class PathAwareVisitor(DefaultVisitor):
    """Tracks the FHIRPath-like location of the node being visited.

    Paths use serialized element names and list indices, e.g.
    ``CarePlan.activity[0].detail.code.coding[1]``.
    """

    def __init__(self, visit_children: bool = True) -> None:
        super().__init__(visit_children)
        self._segments: list[str] = []

    @property
    def path(self) -> str:
        return ".".join(self._segments)

    def visit_start(self, name: str, index: int | None, node: Any) -> None:
        self._segments.append(name if index is None else f"{name}[{index}]")
        self.visit_path(self.path, node)

    def visit_end(self, name: str, index: int | None, node: Any) -> None:
        self._segments.pop()

    def visit_path(self, path: str, node: Any) -> None:
        """Hook called with the full path of every node entered."""


class CollectingVisitor(PathAwareVisitor):
    """Collects every node that is an instance of one of ``types``.

    Example:
        >>> collector = CollectingVisitor(Reference)
        >>> care_plan.accept(collector)
        >>> collector.paths
        {'CarePlan.subject': Reference(...)}
    """

    def __init__(self, *types: type) -> None:
        super().__init__()
        if not types:
            raise TypeError("CollectingVisitor requires at least one type")
        self.types = types
        self.result: list[Any] = []
        self.paths: dict[str, Any] = {}

    def visit_path(self, path: str, node: Any) -> None:
        if isinstance(node, self.types):
            self.result.append(node)
            self.paths[path] = node


__all__ = ["CollectingVisitor", "PathAwareVisitor"]
