"""Target-kind extraction for ``Reference`` values.

A reference is *typed* when its target kind can be determined locally, either
from a relative literal reference (``Patient/123``, ``Patient/123/_history/2``,
the conditional form ``Patient?identifier=x``) or from an explicit
``Reference.type``. Contained references (``#id``), absolute URLs, bare
identifiers and logical references are *untyped* and are not checked here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_KIND = r"[A-Z][A-Za-z]{0,63}"
_LITERAL_PATTERN = re.compile(
    rf"^(?P<kind>{_KIND})/(?P<id>[A-Za-z0-9\-.]{{1,64}})"
    r"(?:/_history/(?P<version>[A-Za-z0-9\-.]{1,64}))?$"
)
_CONDITIONAL_PATTERN = re.compile(rf"^(?P<kind>{_KIND})\?.+$")


@dataclass(frozen=True, slots=True)
class ReferenceTarget:
    """What could be learned about a reference's target without resolving it."""

    literal: str | None = None
    literal_kind: str | None = None
    declared_kind: str | None = None

    @property
    def kind(self) -> str | None:
        return self.literal_kind or self.declared_kind

    @property
    def typed(self) -> bool:
        return self.kind is not None

    @property
    def contained(self) -> bool:
        return bool(self.literal) and self.literal.startswith("#")

    @property
    def conflicting(self) -> bool:
        return (
            self.literal_kind is not None
            and self.declared_kind is not None
            and self.literal_kind != self.declared_kind
        )


def has_scheme(value: str) -> bool:
    """Return True if ``value`` has a URI scheme prefix followed by a non-empty value."""
    index = value.find(":")
    return index > 0 and len(value) > index + 1


def _primitive_text(value: Any) -> str | None:
    raw = getattr(value, "value", value)
    return raw if isinstance(raw, str) and raw else None


def parse_reference(reference: Any) -> ReferenceTarget:
    """Inspect the ``reference`` and ``type`` fields of a Reference node."""
    literal = _primitive_text(getattr(reference, "reference", None))
    declared = _primitive_text(getattr(reference, "type", None))
    if declared is not None and has_scheme(declared):
        # logical model or profile URLs are not resource kinds
        declared = None

    literal_kind: str | None = None
    if literal is not None and not literal.startswith("#"):
        # search parameters of a conditional reference may hold URLs
        match = _CONDITIONAL_PATTERN.match(literal)
        if match is None and not has_scheme(literal):
            match = _LITERAL_PATTERN.match(literal)
        if match is not None:
            literal_kind = match.group("kind")
    return ReferenceTarget(literal=literal, literal_kind=literal_kind, declared_kind=declared)


__all__ = ["ReferenceTarget", "has_scheme", "parse_reference"]
