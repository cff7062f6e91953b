"""Utility modules for the model runtime."""

from .errors import FoundationError, ProblemDetail, UnknownTypeError


__all__ = ["FoundationError", "ProblemDetail", "UnknownTypeError"]
