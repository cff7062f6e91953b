"""Ordered validation chain executed whenever a model instance is constructed.

Key Responsibilities:
    - Coerce raw Python values into primitive nodes and freeze lists to tuples
    - Run the structural, choice, reference, binding, primitive, invariant and
      content checks in a fixed order
    - Collect every violation of a node (or stop at the first, depending on
      settings) and raise them together as :class:`ModelValidationError`

Collaborators:
    - Upstream: ``Node.__post_init__`` calls :func:`finalize_node`
    - Downstream: :mod:`Medical_FHIR_model.validation.support` for the
      individual checks, :mod:`Medical_FHIR_model.config` for switches

Side Effects:
    - Rewrites fields of the node under construction (coercion) before it is
      published; emits ``model.build.rejected`` debug logs on failure

Thread Safety:
    - Thread-safe; state is confined to the node being constructed

Performance Characteristics:
    - Linear in the number of fields and list items of the node; child nodes
      were validated when they were built and are not revisited
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from functools import lru_cache
from typing import Any

import structlog

from Medical_FHIR_model.config.settings import ValidationSettings, get_settings
from Medical_FHIR_model.model.base import Element, Node
from Medical_FHIR_model.model.datatypes import Reference
from Medical_FHIR_model.model.declarations import Constraint, ElementSpec
from Medical_FHIR_model.model.primitives import PrimitiveType
from Medical_FHIR_model.model.support import element_specs, is_node, resolved_types

from .support import (
    LEXICAL_CHECKS,
    validate_binding,
    validate_choice,
    validate_has_content,
    validate_list,
    validate_prohibited,
    validate_reference_targets,
    validate_required,
    validate_type,
)
from .violations import (
    CrossFieldInvariantViolation,
    ModelValidationError,
    PrimitiveValueViolation,
    Violation,
    WrongElementTypeViolation,
)

logger = structlog.get_logger(__name__)


# ==============================================================================
# PUBLIC API
# ==============================================================================


def finalize_node(node: Node) -> None:
    """Coerce and validate a node that is being constructed.

    Raises:
        ModelValidationError: If any rule fails. No instance escapes.
    """
    settings = get_settings().validation
    coercion = _normalize(node)
    violations = _iter_violations(node, settings, coercion)
    if settings.collect_all:
        found = list(violations)
    else:
        first = next(violations, None)
        found = [] if first is None else [first]
    if found:
        logger.debug(
            "model.build.rejected",
            type_name=type(node).__name__,
            violations=len(found),
            rules=sorted({violation.rule for violation in found}),
        )
        raise ModelValidationError(type(node).__name__, found)


def validate_node(node: Node, settings: ValidationSettings | None = None) -> list[Violation]:
    """Re-run the validation chain over an existing node without raising.

    Useful to check a built graph against stricter settings than those in
    effect when it was constructed.
    """
    return list(_iter_violations(node, settings or get_settings().validation, []))


# ==============================================================================
# COERCION
# ==============================================================================


def _unwrap(raw: Any) -> Any:
    return raw.value if isinstance(raw, Enum) else raw


def _coerce(
    cls: type, spec: ElementSpec, raw: Any, index: int | None
) -> tuple[Any, Violation | None]:
    if raw is None or is_node(raw):
        return raw, None
    raw = _unwrap(raw)
    for kind in resolved_types(cls, spec):
        if isinstance(kind, type) and issubclass(kind, PrimitiveType) and kind.accepts(raw):
            try:
                return kind.of(raw), None
            except ModelValidationError as exc:
                detail = "; ".join(violation.message for violation in exc.violations)
                return raw, PrimitiveValueViolation(field=spec.name, index=index, detail=detail)
    return raw, None


def _normalize(node: Node) -> list[Violation]:
    """Replace raw values by primitive nodes and lists by tuples, in place."""
    cls = type(node)
    violations: list[Violation] = []
    for spec in element_specs(cls):
        value = getattr(node, spec.name)
        if isinstance(node, PrimitiveType) and spec.name == "value":
            value = _unwrap(value)
            if value is not None and cls.accepts(value):
                value = cls.normalize(value)
        elif spec.repeating:
            if value is None:
                value = ()
            elif isinstance(value, list):
                value = tuple(value)
            if isinstance(value, tuple):
                items = []
                for index, item in enumerate(value):
                    item, violation = _coerce(cls, spec, item, index)
                    items.append(item)
                    if violation is not None:
                        violations.append(violation)
                value = tuple(items)
        else:
            value, violation = _coerce(cls, spec, value, None)
            if violation is not None:
                violations.append(violation)
        object.__setattr__(node, spec.name, value)
    return violations


# ==============================================================================
# VALIDATION CHAIN
# ==============================================================================


def _field_types(cls: type, spec: ElementSpec) -> tuple[type, ...]:
    if spec.name == "value" and issubclass(cls, PrimitiveType):
        return cls.python_types
    return resolved_types(cls, spec)


@lru_cache(maxsize=None)
def _constraints(cls: type) -> tuple[Constraint, ...]:
    collected: list[Constraint] = []
    for klass in reversed(cls.__mro__):
        collected.extend(klass.__dict__.get("constraints", ()))
    return tuple(collected)


def _values(node: Node, spec: ElementSpec) -> Iterator[tuple[Any, int | None]]:
    value = getattr(node, spec.name)
    if spec.repeating:
        if isinstance(value, tuple):
            yield from ((item, index) for index, item in enumerate(value) if item is not None)
    elif value is not None:
        yield value, None


def _iter_violations(
    node: Node, settings: ValidationSettings, coercion: list[Violation]
) -> Iterator[Violation]:
    failed = {(violation.field, violation.index) for violation in coercion}
    yield from coercion
    for violation in _chain(node, settings, mistyped=bool(coercion)):
        if (violation.field, violation.index) not in failed:
            yield violation


def _chain(node: Node, settings: ValidationSettings, *, mistyped: bool) -> Iterator[Violation]:
    cls = type(node)
    specs = element_specs(cls)

    # 1. list shape and element types
    for spec in specs:
        value = getattr(node, spec.name)
        if spec.repeating:
            if not isinstance(value, tuple):
                mistyped = True
                yield WrongElementTypeViolation(
                    field=spec.name, expected_types=("list",), actual_type=type(value).__name__
                )
                continue
            violations = validate_list(
                value, spec.name, _field_types(cls, spec), required=spec.required
            )
            mistyped = mistyped or any(v.rule == "element-type" for v in violations)
            yield from violations
        elif not spec.choice:
            violation = validate_type(value, spec.name, _field_types(cls, spec))
            if violation is not None:
                mistyped = True
                yield violation

    # 2. required and prohibited elements
    for spec in specs:
        value = getattr(node, spec.name)
        if spec.required and not spec.repeating and not spec.choice:
            violation = validate_required(value, spec.name)
            if violation is not None:
                yield violation
        if spec.prohibited:
            violation = validate_prohibited(value, spec.name)
            if violation is not None:
                yield violation

    # 3. choice slots
    for spec in specs:
        if spec.choice:
            violation = validate_choice(
                getattr(node, spec.name), resolved_types(cls, spec), spec.required, spec.name
            )
            if violation is not None:
                mistyped = mistyped or violation.rule == "choice-type"
                yield violation

    # 4. reference targets
    if settings.check_reference_types:
        known_kind = cls.__registry__.is_resource_type if settings.check_resource_kinds else None
        for spec in specs:
            if not spec.targets:
                continue
            for value, index in _values(node, spec):
                if isinstance(value, Reference):
                    violation = validate_reference_targets(
                        value, spec.targets, spec.name, index, known_kind=known_kind
                    )
                    if violation is not None:
                        yield violation

    # 5. bindings, primitive values and declared invariants
    for spec in specs:
        binding = spec.binding
        if binding is None:
            continue
        if not (binding.enforced and settings.enforce_required_bindings):
            if getattr(node, spec.name) not in (None, ()):
                logger.debug(
                    "binding.advisory_skipped",
                    type_name=cls.__name__,
                    field=spec.name,
                    strength=binding.strength.value,
                    value_set=binding.value_set,
                )
            continue
        for value, index in _values(node, spec):
            violation = validate_binding(
                value,
                binding.codes,
                spec.name,
                value_set=binding.value_set,
                system=binding.system,
                index=index,
            )
            if violation is not None:
                yield violation

    if settings.check_primitive_values:
        if isinstance(node, PrimitiveType):
            yield from node.value_violations()
        for spec in specs:
            check = LEXICAL_CHECKS.get(spec.lexical)
            value = getattr(node, spec.name)
            if check is None or not isinstance(value, str):
                continue
            try:
                check(value)
            except ValueError as exc:
                yield PrimitiveValueViolation(field=spec.name, detail=str(exc))

    # predicates assume well-typed fields
    for constraint in () if mistyped else _constraints(cls):
        if constraint.predicate(node):
            continue
        if constraint.severity == "warning":
            logger.warning(
                "model.constraint.warning",
                type_name=cls.__name__,
                key=constraint.key,
                description=constraint.description,
            )
            continue
        yield CrossFieldInvariantViolation(key=constraint.key, description=constraint.description)

    # 6. value or children
    if isinstance(node, Element):
        violation = validate_has_content(node)
        if violation is not None:
            yield violation


__all__ = ["finalize_node", "validate_node"]
