"""Generated builders for immutable model classes.

Every finalized composite class receives a nested ``Builder`` produced by
:func:`make_builder_class`. Builders accumulate field values mutably and hand
them to the model constructor in :meth:`Builder.build`, which is where the
validation chain runs. Builders are not thread-safe; confine each one to a
single construction sequence.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, ClassVar

from Medical_FHIR_model.validation.violations import ModelValidationError, NullElementViolation

from .declarations import ElementSpec
from .support import element_specs

# Builder methods plus the public members every model class inherits from Node.
RESERVED_FIELD_NAMES = frozenset(
    {
        "build",
        "from_instance",
        "accept",
        "builder",
        "to_builder",
        "has_value",
        "has_children",
        "has_content",
        "constraints",
    }
)


class Builder:
    """Mutable accumulator for the fields of one model class."""

    _model: ClassVar[type]

    def __init__(self) -> None:
        self._values: dict[str, Any] = {
            spec.name: [] if spec.repeating else None for spec in element_specs(self._model)
        }

    @classmethod
    def from_instance(cls, instance: Any) -> Builder:
        """Seed a new builder with every field of ``instance``.

        Nested children are shared, not copied; they are immutable.
        """
        if not isinstance(instance, cls._model):
            raise TypeError(
                f"{cls.__qualname__} cannot be seeded from {type(instance).__name__}"
            )
        builder = cls()
        for spec in element_specs(cls._model):
            value = getattr(instance, spec.name)
            builder._values[spec.name] = list(value) if spec.repeating else value
        return builder

    def build(self) -> Any:
        """Construct and validate the model instance.

        Raises:
            ModelValidationError: If the accumulated state violates any rule.
        """
        values = {
            name: tuple(value) if isinstance(value, list) else value
            for name, value in self._values.items()
        }
        return self._model(**values)

    def __repr__(self) -> str:
        populated = ", ".join(
            f"{name}={value!r}" for name, value in self._values.items() if value not in (None, [])
        )
        return f"{type(self).__qualname__}({populated})"


def _scalar_setter(spec: ElementSpec):
    name = spec.name

    def setter(self: Builder, value: Any) -> Builder:
        self._values[name] = value
        return self

    setter.__name__ = name
    setter.__doc__ = f"Set ``{name}`` ({spec.cardinality}); replaces any previous value."
    return setter


def _list_setter(spec: ElementSpec):
    name = spec.name

    def setter(self: Builder, values: Iterable[Any]) -> Builder:
        if values is None or isinstance(values, (str, bytes)):
            raise TypeError(
                f"'{name}' expects an iterable of elements, got {type(values).__name__}"
            )
        items = list(values)
        nulls = [
            NullElementViolation(field=name, index=index)
            for index, item in enumerate(items)
            if item is None
        ]
        if nulls:
            raise ModelValidationError(self._model.__name__, nulls)
        self._values[name] = items
        return self

    setter.__name__ = name
    setter.__doc__ = f"Replace every element of ``{name}`` ({spec.cardinality})."
    return setter


def _list_adder(spec: ElementSpec):
    name = spec.name

    def adder(self: Builder, *values: Any) -> Builder:
        self._values[name].extend(values)
        return self

    adder.__name__ = f"add_{name}"
    adder.__doc__ = f"Append to ``{name}``; ``None`` elements are reported by ``build()``."
    return adder


def make_builder_class(model: type) -> type[Builder]:
    """Generate the ``Builder`` class for a finalized model class."""
    namespace: dict[str, Any] = {
        "_model": model,
        "__module__": model.__module__,
        "__qualname__": f"{model.__qualname__}.Builder",
    }
    for spec in element_specs(model):
        if spec.name in RESERVED_FIELD_NAMES:
            raise TypeError(f"{model.__name__} declares reserved field name '{spec.name}'")
        if spec.repeating:
            namespace[spec.name] = _list_setter(spec)
            namespace[f"add_{spec.name}"] = _list_adder(spec)
        else:
            namespace[spec.name] = _scalar_setter(spec)
    return type("Builder", (Builder,), namespace)


__all__ = ["RESERVED_FIELD_NAMES", "Builder", "make_builder_class"]
