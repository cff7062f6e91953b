"""Name conversions between FHIR element names and Python identifiers."""

from __future__ import annotations

import keyword
import re
from functools import lru_cache

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


@lru_cache(maxsize=1024)
def to_snake_case(name: str) -> str:
    """Convert ``modifierExtension`` style names into ``modifier_extension``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


@lru_cache(maxsize=1024)
def to_camel_case(name: str) -> str:
    """Convert ``modifier_extension`` style names into ``modifierExtension``."""
    head, *tail = name.rstrip("_").split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in tail)


def to_python_identifier(element_name: str) -> str:
    """Return the attribute name used for a FHIR element name.

    Python keywords (``class``, ``for``, ...) receive a trailing underscore.
    """
    snake = to_snake_case(element_name)
    if keyword.iskeyword(snake):
        return f"{snake}_"
    return snake


def capitalize_first(name: str) -> str:
    return name[:1].upper() + name[1:]


__all__ = ["capitalize_first", "to_camel_case", "to_python_identifier", "to_snake_case"]
