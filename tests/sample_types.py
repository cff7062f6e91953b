"""Model classes shared by the test suite, registered in their own registry."""

from __future__ import annotations

from enum import Enum
from typing import Any

from Medical_FHIR_model.model import (
    CORE_REGISTRY,
    BackboneElement,
    Binding,
    BindingStrength,
    Code,
    CodeableConcept,
    Constraint,
    DomainResource,
    Quantity,
    Reference,
    String,
    choice,
    composite,
    element,
)

REGISTRY = CORE_REGISTRY.child("tests")


class Status(str, Enum):
    A = "A"
    B = "B"


STATUS_BINDING = Binding(
    strength=BindingStrength.REQUIRED,
    value_set="http://example.org/ValueSet/measurement-status",
    codes=("A", "B"),
)


@composite(registry=REGISTRY)
class Measurement(DomainResource):
    status: Code | None = element(Code, required=True, binding=STATUS_BINDING)
    value: Any = choice(Quantity, CodeableConcept, required=True)
    notes: tuple[String, ...] = element(String, repeating=True)
    owner: Reference | None = element(Reference, targets=("Organization",))


@composite(registry=REGISTRY)
class TeamMember(BackboneElement):
    role: CodeableConcept | None = element(CodeableConcept)
    member: Reference | None = element(Reference, required=True, targets=("Practitioner",))


def _lead_is_member(team: Team) -> bool:
    return team.lead is None or bool(team.members)


@composite(registry=REGISTRY)
class Team(DomainResource):
    name: String | None = element(String)
    members: tuple[TeamMember, ...] = element(TeamMember, repeating=True)
    participants: tuple[Reference, ...] = element(
        Reference, repeating=True, targets=("Practitioner", "Organization")
    )
    lead: Reference | None = element(Reference, targets=("Resource",))
    retired: Any = element(String, prohibited=True)

    constraints = (
        Constraint(
            key="team-1",
            description="A lead requires at least one member",
            predicate=_lead_is_member,
        ),
        Constraint(
            key="team-2",
            description="A team should have a name",
            predicate=lambda team: team.name is not None,
            severity="warning",
        ),
    )


def quantity(value: Any = 5, unit: str = "mg") -> Quantity:
    return Quantity.builder().value(value).unit(unit).build()


def reference(literal: str | None = None, *, type: str | None = None) -> Reference:
    builder = Reference.builder().reference(literal).type(type)
    if literal is None and type is None:
        builder.display("Someone")
    return builder.build()
