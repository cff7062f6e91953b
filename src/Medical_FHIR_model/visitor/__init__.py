"""Traversal protocol, default dispatch and reference visitors."""

from .base import DefaultVisitor, Visitor, accept
from .collecting import CollectingVisitor, PathAwareVisitor
from .serializer import DictSerializer, to_dict

__all__ = [
    "CollectingVisitor",
    "DefaultVisitor",
    "DictSerializer",
    "PathAwareVisitor",
    "Visitor",
    "accept",
    "to_dict",
]
