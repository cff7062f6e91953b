"""Generate immutable model classes from type definitions.

Key Responsibilities:
    - Load definition documents from YAML/JSON text, files or mappings
    - Create one frozen dataclass per type (and per nested backbone element)
      finalized exactly like hand-declared model classes
    - Map declarative constraint kinds to predicates and attach externally
      supplied predicates to ``expression`` constraints
    - Verify that every referenced type name resolves once generation completes

Collaborators:
    - Upstream: Callers pass documents or parsed :class:`DefinitionDocument`
      instances
    - Downstream: :mod:`Medical_FHIR_model.model.base` finalizes the classes;
      :class:`TypeRegistry` resolves type names

Side Effects:
    - Reads definition files; registers generated classes in the target registry;
      emits ``schema.types.generated`` and ``schema.constraint.unsupported`` logs

Thread Safety:
    - Not thread-safe: concurrent generation into one registry may interleave
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Mapping
from functools import partial
from pathlib import Path
from typing import Any

import structlog
import yaml

from Medical_FHIR_model.model.base import (
    BackboneElement,
    DomainResource,
    Element,
    Resource,
    finalize_class,
)
from Medical_FHIR_model.model.builder import RESERVED_FIELD_NAMES
from Medical_FHIR_model.model.declarations import Constraint, element
from Medical_FHIR_model.model.registry import CORE_REGISTRY, TypeRegistry
from Medical_FHIR_model.model.support import element_specs, resolved_types
from Medical_FHIR_model.utils.errors import UnknownTypeError
from Medical_FHIR_model.utils.naming import capitalize_first, to_python_identifier

from .definitions import ConstraintDefinition, DefinitionDocument, ElementDefinition, TypeDefinition
from .documents import DefinitionDocumentError, DefinitionDocumentValidator

logger = structlog.get_logger(__name__)

GENERATED_MODULE = "Medical_FHIR_model.generated"
DEFINITION_SUFFIXES = frozenset({".yaml", ".yml", ".json"})

_KIND_BASES: dict[str, type] = {
    "resource": DomainResource,
    "datatype": Element,
    "backbone": BackboneElement,
}
# Nested backbone classes are attached as class attributes next to Node.Builder.
_RESERVED_NESTED_NAMES = frozenset({"Builder"})
_KIND_ROOTS: dict[str, type] = {
    "resource": Resource,
    "datatype": Element,
    "backbone": BackboneElement,
}


# ==============================================================================
# LOADING
# ==============================================================================


def load_definitions(source: str | Path | Mapping[str, Any]) -> DefinitionDocument:
    """Load and validate a definition document.

    ``source`` may be a mapping, a path to a ``.yaml``/``.yml``/``.json`` file,
    or YAML/JSON text.

    Raises:
        DefinitionDocumentError: If the document is malformed.
    """
    if isinstance(source, Mapping):
        document: Any = source
    else:
        path = Path(source) if isinstance(source, Path) else None
        if path is None and source.strip() and "\n" not in source:
            candidate = Path(source)
            if candidate.suffix in DEFINITION_SUFFIXES and candidate.is_file():
                path = candidate
        text = path.read_text(encoding="utf-8") if path is not None else source
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise DefinitionDocumentError([f"root: {exc}"]) from exc
    return DefinitionDocumentValidator().parse(document)


# ==============================================================================
# CONSTRAINT PREDICATES
# ==============================================================================


def _populated(node: Any, name: str) -> bool:
    value = getattr(node, name)
    return value is not None and value != ()


def _exclusive(names: tuple[str, ...], node: Any) -> bool:
    return sum(_populated(node, name) for name in names) <= 1


def _at_least_one(names: tuple[str, ...], node: Any) -> bool:
    return any(_populated(node, name) for name in names)


def _requires(names: tuple[str, ...], node: Any) -> bool:
    trigger, dependent = names
    return not _populated(node, trigger) or _populated(node, dependent)


_CONSTRAINT_KINDS: dict[str, Callable[[tuple[str, ...], Any], bool]] = {
    "exclusive": _exclusive,
    "at_least_one": _at_least_one,
    "requires": _requires,
}


def attribute_name(element_name: str) -> str:
    """Return the Python attribute name for an element name.

    Keywords and names already taken by model or builder members get a trailing
    underscore (``class`` -> ``class_``, ``accept`` -> ``accept_``).
    """
    name = to_python_identifier(element_name)
    if name in RESERVED_FIELD_NAMES:
        return f"{name}_"
    return name


# ==============================================================================
# GENERATOR
# ==============================================================================


class TypeGenerator:
    """Create model classes from :class:`TypeDefinition` instances.

    Attributes:
        registry: Registry receiving the generated classes. Defaults to a fresh
            child of the core registry so generated types never shadow core ones.
        predicates: External predicates for ``expression`` constraints, keyed by
            constraint key.
    """

    def __init__(
        self,
        registry: TypeRegistry | None = None,
        *,
        predicates: Mapping[str, Callable[[Any], bool]] | None = None,
        module: str = GENERATED_MODULE,
    ) -> None:
        self.registry = registry if registry is not None else CORE_REGISTRY.child()
        self.predicates = dict(predicates or {})
        self.module = module

    def generate(
        self, definitions: DefinitionDocument | Iterable[TypeDefinition]
    ) -> dict[str, type]:
        """Generate every type of ``definitions`` and return them by name.

        Raises:
            DefinitionDocumentError: If a base or element type cannot be resolved.
        """
        if isinstance(definitions, DefinitionDocument):
            types = definitions.types
        else:
            types = tuple(definitions)
        generated: dict[str, type] = {}
        for definition in self._order(types):
            self._generate_type(definition, definition.name, generated)
        self._check_references(generated)
        logger.info(
            "schema.types.generated",
            registry=self.registry.name,
            count=len(generated),
            types=sorted(generated),
        )
        return generated

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _order(self, types: tuple[TypeDefinition, ...]) -> list[TypeDefinition]:
        """Order definitions so that in-document bases come first."""
        by_name = {definition.name: definition for definition in types}
        ordered: list[TypeDefinition] = []
        state: dict[str, str] = {}

        def visit(definition: TypeDefinition) -> None:
            mark = state.get(definition.name)
            if mark == "done":
                return
            if mark == "active":
                raise DefinitionDocumentError(
                    [f"{definition.name}.base: circular base type '{definition.base}'"]
                )
            state[definition.name] = "active"
            if definition.base in by_name:
                visit(by_name[definition.base])
            state[definition.name] = "done"
            ordered.append(definition)

        for definition in types:
            visit(definition)
        return ordered

    def _resolve_base(self, definition: TypeDefinition) -> type:
        if definition.base is None:
            return _KIND_BASES[definition.kind]
        try:
            base = self.registry.resolve(definition.base)
        except UnknownTypeError as exc:
            raise DefinitionDocumentError([f"{definition.name}.base: {exc}"]) from exc
        root = _KIND_ROOTS[definition.kind]
        if not (isinstance(base, type) and issubclass(base, root)):
            raise DefinitionDocumentError(
                [
                    f"{definition.name}.base: '{definition.base}' is not a "
                    f"{root.__name__} type and cannot be the base of a {definition.kind}"
                ]
            )
        return base

    def _generate_type(
        self, definition: TypeDefinition, class_name: str, generated: dict[str, type]
    ) -> type:
        base = self._resolve_base(definition)
        fields: list[tuple[str, Any, Any]] = []
        nested: dict[str, type] = {}
        for element_definition in definition.elements:
            if element_definition.elements:
                nested_name = capitalize_first(element_definition.base_name)
                nested_definition = TypeDefinition(
                    name=f"{class_name}{nested_name}",
                    kind="backbone",
                    elements=element_definition.elements,
                    constraints=element_definition.constraints,
                )
                nested_cls = self._generate_type(
                    nested_definition, nested_definition.name, generated
                )
                attribute = nested_name
                if attribute in _RESERVED_NESTED_NAMES:
                    attribute = f"{attribute}_"
                nested[attribute] = nested_cls
                types: tuple[Any, ...] = (nested_cls,)
            else:
                types = element_definition.types
            fields.append(self._field(element_definition, types))

        cls = dataclasses.make_dataclass(
            class_name,
            fields,
            bases=(base,),
            namespace={
                "constraints": self._constraints(definition),
                "__doc__": definition.description or f"Generated {definition.kind} {class_name}.",
            },
            frozen=True,
            eq=True,
            kw_only=True,
            repr=False,
        )
        cls.__module__ = self.module
        for attribute, nested_cls in nested.items():
            setattr(cls, attribute, nested_cls)
            nested_cls.__qualname__ = f"{class_name}.{attribute}"
        finalize_class(cls, registry=self.registry, abstract=definition.abstract)
        for nested_cls in nested.values():
            nested_cls.Builder.__qualname__ = f"{nested_cls.__qualname__}.Builder"
        generated[class_name] = cls
        return cls

    @staticmethod
    def _field(definition: ElementDefinition, types: tuple[Any, ...]) -> tuple[str, Any, Any]:
        declared = element(
            *types,
            required=definition.required,
            repeating=definition.repeating,
            targets=definition.targets,
            binding=definition.binding.to_binding() if definition.binding else None,
            prohibited=definition.prohibited,
            json_name=definition.base_name,
            choice=definition.is_choice,
        )
        annotation = "tuple[Any, ...]" if definition.repeating else "Any"
        return attribute_name(definition.base_name), annotation, declared

    def _constraints(self, definition: TypeDefinition) -> tuple[Constraint, ...]:
        constraints: list[Constraint] = []
        for constraint in definition.constraints:
            predicate = self._predicate(definition, constraint)
            if predicate is None:
                continue
            constraints.append(
                Constraint(
                    key=constraint.key,
                    description=constraint.human,
                    predicate=predicate,
                    severity=constraint.severity,
                )
            )
        return tuple(constraints)

    def _predicate(
        self, definition: TypeDefinition, constraint: ConstraintDefinition
    ) -> Callable[[Any], bool] | None:
        if constraint.kind == "expression":
            predicate = self.predicates.get(constraint.key)
            if predicate is None:
                logger.warning(
                    "schema.constraint.unsupported",
                    type_name=definition.name,
                    key=constraint.key,
                    expression=constraint.expression,
                )
            return predicate
        names = tuple(attribute_name(name) for name in constraint.fields)
        return partial(_CONSTRAINT_KINDS[constraint.kind], names)

    def _check_references(self, generated: Mapping[str, type]) -> None:
        errors: list[str] = []
        for name, cls in generated.items():
            for spec in element_specs(cls):
                try:
                    resolved_types(cls, spec)
                except UnknownTypeError as exc:
                    errors.append(f"{name}.{spec.json_name}: {exc}")
        if errors:
            raise DefinitionDocumentError(errors)


def generate_types(
    source: str | Path | Mapping[str, Any] | DefinitionDocument,
    registry: TypeRegistry | None = None,
    *,
    predicates: Mapping[str, Callable[[Any], bool]] | None = None,
) -> dict[str, type]:
    """Load ``source`` and generate its types in one step."""
    document = source if isinstance(source, DefinitionDocument) else load_definitions(source)
    return TypeGenerator(registry, predicates=predicates).generate(document)


__all__ = [
    "GENERATED_MODULE",
    "TypeGenerator",
    "attribute_name",
    "generate_types",
    "load_definitions",
]
