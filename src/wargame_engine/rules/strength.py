"""Strength resolution through concept/role bindings.

Strength is never read from a fixed property name. The CRT names a combat
concept; the host's ontology says which entity field is bound to the
attacker and defender roles of that concept.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Protocol, Union

from wargame_engine.domain.errors import StrengthUnresolved
from wargame_engine.domain.types import CombatRole, GameEntity

logger = logging.getLogger(__name__)


class RoleBindingLookup(Protocol):
    def has_concept(self, concept_id: str) -> bool: ...

    def bound_field(self, concept_id: str, role: CombatRole) -> str | None: ...


class StrengthResolver(Protocol):
    def resolve(self, concept_id: str | None, role: CombatRole, entity: GameEntity) -> float: ...


StrengthFn = Callable[[Union[str, None], CombatRole, GameEntity], float]


@dataclass()
class ConceptBindingTable:
    """In-memory role bindings: ``{concept_id: {role: field_path}}``."""

    bindings: dict[str, dict[CombatRole, str]] = field(default_factory=dict)

    def bind(self, concept_id: str, role: CombatRole, field_path: str) -> None:
        self.bindings.setdefault(concept_id, {})[role] = field_path

    def has_concept(self, concept_id: str) -> bool:
        return concept_id in self.bindings

    def bound_field(self, concept_id: str, role: CombatRole) -> str | None:
        return self.bindings.get(concept_id, {}).get(role)


_MISSING = object()


def checked_strength(role: CombatRole, entity: GameEntity, value: Any, *, source: str = "resolver") -> float:
    """Accept only real numbers. Bools, NaN and anything non-numeric are unresolved."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise StrengthUnresolved(role.value, f"{source} on unit {entity.id!r} is not numeric ({value!r})")
    if math.isnan(value):
        raise StrengthUnresolved(role.value, f"{source} on unit {entity.id!r} is NaN")
    return float(value)


def read_field(entity: GameEntity, field_path: str) -> Any:
    """Walk a dotted path through the entity's properties."""
    current: Any = entity.properties
    for part in field_path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return _MISSING
    return current


class BindingStrengthResolver:
    def __init__(self, lookup: RoleBindingLookup) -> None:
        self.lookup = lookup

    def resolve(self, concept_id: str | None, role: CombatRole, entity: GameEntity) -> float:
        if concept_id is None:
            raise StrengthUnresolved(role.value, "CRT has no combat concept")
        if not self.lookup.has_concept(concept_id):
            raise StrengthUnresolved(role.value, f"unknown combat concept {concept_id!r}")
        field_path = self.lookup.bound_field(concept_id, role)
        if not field_path:
            raise StrengthUnresolved(role.value, f"no {role.value} binding for concept {concept_id!r}")

        value = read_field(entity, field_path)
        if value is _MISSING:
            raise StrengthUnresolved(role.value, f"unit {entity.id!r} has no field {field_path!r}")
        return checked_strength(role, entity, value, source=f"field {field_path!r}")


def resolve_strength(
    resolver: StrengthResolver | StrengthFn,
    concept_id: str | None,
    role: CombatRole,
    entity: GameEntity,
) -> float:
    """Resolve one side's strength from either a resolver object or a plain callable."""
    resolve = getattr(resolver, "resolve", resolver)
    try:
        return checked_strength(role, entity, resolve(concept_id, role, entity))
    except StrengthUnresolved as exc:
        logger.warning("Strength unresolved for %s: %s", entity.id, exc.reason)
        raise
