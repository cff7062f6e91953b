"""Depth-first traversal protocol over model instance graphs.

Key Responsibilities:
    - Define the :class:`Visitor` callback protocol
    - Drive single-threaded, pre-order traversal in element declaration order
      (:func:`accept`), pairing every start with an end and every
      ``pre_visit`` with a ``post_visit``
    - Provide :class:`DefaultVisitor`, which dispatches ``visit`` to the most
      specific ``visit_<type>`` method along the node's class hierarchy

Collaborators:
    - Upstream: ``Node.accept`` delegates here; serializers and collectors in
      this package implement the protocol
    - Downstream: Reads element declarations from
      :mod:`Medical_FHIR_model.model.support`

Side Effects:
    - None beyond the callbacks of the supplied visitor

Thread Safety:
    - Traversal holds no shared state; visitor instances are not thread-safe
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import lru_cache
from typing import Any, Protocol

from Medical_FHIR_model.model.support import element_specs, is_node, resolved_types
from Medical_FHIR_model.utils.naming import to_snake_case

# ==============================================================================
# PROTOCOL
# ==============================================================================


class Visitor(Protocol):
    """Callbacks invoked during traversal.

    ``pre_visit`` returning False skips the node entirely (no start/end);
    ``visit`` returning False skips its children while still ending the node.
    """

    def pre_visit(self, node: Any) -> bool: ...

    def visit_start(self, name: str, index: int | None, node: Any) -> None: ...

    def visit(self, name: str, index: int | None, node: Any) -> bool: ...

    def visit_end(self, name: str, index: int | None, node: Any) -> None: ...

    def post_visit(self, node: Any) -> None: ...

    def visit_list_start(self, name: str, items: Sequence[Any], element_type: type) -> None: ...

    def visit_list_end(self, name: str, items: Sequence[Any], element_type: type) -> None: ...

    def visit_value(self, name: str, index: int | None, value: Any) -> None: ...


# ==============================================================================
# TRAVERSAL
# ==============================================================================


def accept(node: Any, visitor: Visitor, name: str | None = None, index: int | None = None) -> None:
    """Traverse ``node`` and its descendants with ``visitor``.

    Children are visited under their serialized element names
    (``modifierExtension``); the root defaults to its type name.
    """
    if not visitor.pre_visit(node):
        return
    name = name or type(node).__name__
    visitor.visit_start(name, index, node)
    if visitor.visit(name, index, node):
        _accept_children(node, visitor)
    visitor.visit_end(name, index, node)
    visitor.post_visit(node)


def _accept_children(node: Any, visitor: Visitor) -> None:
    cls = type(node)
    for spec in element_specs(cls):
        value = getattr(node, spec.name)
        if spec.repeating:
            if not value:
                continue
            element_type = resolved_types(cls, spec)[0]
            visitor.visit_list_start(spec.json_name, value, element_type)
            for position, item in enumerate(value):
                _accept_item(spec.json_name, position, item, visitor)
            visitor.visit_list_end(spec.json_name, value, element_type)
        elif value is not None:
            _accept_item(spec.json_name, None, value, visitor)


def _accept_item(name: str, index: int | None, item: Any, visitor: Visitor) -> None:
    if is_node(item):
        accept(item, visitor, name, index)
    else:
        visitor.visit_value(name, index, item)


# ==============================================================================
# DEFAULT VISITOR
# ==============================================================================

_PROTOCOL_METHODS = frozenset(
    {
        "visit_start",
        "visit_end",
        "visit_value",
        "visit_list_start",
        "visit_list_end",
        "visit_children",
        "visit_path",
    }
)


@lru_cache(maxsize=1024)
def _dispatch(visitor_cls: type, node_cls: type) -> Callable[..., bool] | None:
    for klass in node_cls.__mro__:
        if klass is object:
            break
        method_name = f"visit_{to_snake_case(klass.__name__)}"
        if method_name in _PROTOCOL_METHODS:
            continue
        method = getattr(visitor_cls, method_name, None)
        if callable(method):
            return method
    return None


class DefaultVisitor:
    """No-op visitor with type-based dispatch.

    Subclasses add ``visit_<snake_case_type>(self, name, index, node) -> bool``
    methods (``visit_codeable_concept``, ``visit_primitive_type``, ...). The most
    specific one along the node's MRO handles ``visit``; nodes without a handler
    descend according to ``visit_children``.
    """

    def __init__(self, visit_children: bool = True) -> None:
        self.visit_children = visit_children

    def pre_visit(self, node: Any) -> bool:
        return True

    def post_visit(self, node: Any) -> None:
        return None

    def visit_start(self, name: str, index: int | None, node: Any) -> None:
        return None

    def visit(self, name: str, index: int | None, node: Any) -> bool:
        handler = _dispatch(type(self), type(node))
        if handler is None:
            return self.visit_children
        return handler(self, name, index, node)

    def visit_end(self, name: str, index: int | None, node: Any) -> None:
        return None

    def visit_list_start(self, name: str, items: Sequence[Any], element_type: type) -> None:
        return None

    def visit_list_end(self, name: str, items: Sequence[Any], element_type: type) -> None:
        return None

    def visit_value(self, name: str, index: int | None, value: Any) -> None:
        return None


__all__ = ["DefaultVisitor", "Visitor", "accept"]
