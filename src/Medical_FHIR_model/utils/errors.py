"""Problem detail helpers for consistent error reporting across the model runtime.

Key Responsibilities:
    - Provide RFC 7807 compliant data structures used when model construction
      or definition loading fails
    - Supply a base exception that carries problem details so callers embedding
      the model in an API can translate failures without inspecting messages

Collaborators:
    - Upstream: Builders, the type registry and the generator raise subclasses
      of ``FoundationError``
    - Downstream: Callers serialise :class:`ProblemDetail` instances into their
      own transport formats

Side Effects:
    - None; helpers are pure data containers

Thread Safety:
    - Thread-safe; dataclasses are immutable aside from standard attribute
      mutation semantics
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

# ==============================================================================
# TYPE DEFINITIONS
# ==============================================================================

__all__ = ["ProblemDetail", "FoundationError", "UnknownTypeError"]


@dataclass(slots=True)
class ProblemDetail:
    """Lightweight problem details object compliant with RFC 7807."""

    title: str
    status: int
    detail: str | None = None
    type: str = "about:blank"
    instance: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def model_dump(self) -> dict[str, Any]:
        """Return a dictionary representation with optional fields dropped."""
        payload = {key: value for key, value in asdict(self).items() if value is not None}
        if not payload.get("extra"):
            payload.pop("extra", None)
        return payload


class FoundationError(RuntimeError):
    """Base exception that carries a :class:`ProblemDetail` instance."""

    def __init__(
        self,
        message: str,
        *,
        status: int = 500,
        detail: str | None = None,
        type: str = "about:blank",
        instance: str | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialise the exception with structured problem detail attributes.

        Args:
            message: Human readable error summary.
            status: HTTP-style status code associated with the problem.
            detail: Optional detailed description of the failure.
            type: Problem type URI, defaults to ``about:blank``.
            instance: Optional URI reference identifying the specific occurrence.
            extra: Additional attributes included in the serialized payload.
        """
        super().__init__(message)
        self.problem = ProblemDetail(
            title=message,
            status=status,
            detail=detail,
            type=type,
            instance=instance,
            extra=extra or {},
        )


class UnknownTypeError(FoundationError, KeyError):
    """Raised when a type name cannot be resolved by a type registry."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Unknown model type: '{name}'",
            status=404,
            extra={"type_name": name},
        )
        self.type_name = name

    def __str__(self) -> str:
        return self.problem.title
