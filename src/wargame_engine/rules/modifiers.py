"""Combat modifier filtering and prioritized evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from wargame_engine.domain.events import FactorEvent, FactorScope
from wargame_engine.domain.mechanics import (
    AttackerProperty,
    AttackerTerrain,
    CombatModifierDefinition,
    Custom,
    DefenderProperty,
    DefenderTerrain,
)
from wargame_engine.domain.types import GameEntity, TerrainRef


@dataclass(frozen=True)
class ModifierContext:
    """What a modifier may look at when deciding whether it applies."""

    attacker: GameEntity
    defender: GameEntity
    attacker_terrain: TerrainRef | None = None
    defender_terrain: TerrainRef | None = None
    active_tags: frozenset[str] = field(default_factory=frozenset)

    @property
    def scope(self) -> FactorScope:
        return FactorScope(kind="combat", id=f"{self.attacker.id}->{self.defender.id}")


@dataclass(frozen=True)
class ModifierEvaluation:
    total_shift: int
    applied: tuple[tuple[str, int], ...]
    events: tuple[FactorEvent, ...] = ()


def _property_active(entity: GameEntity, name: str) -> bool:
    value: Any = entity.properties.get(name)
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


def _terrain_matches(terrain: TerrainRef | None, terrain_filter: str | None) -> bool:
    if terrain_filter is None:
        return True
    return terrain is not None and terrain.entity_type_id == terrain_filter


def modifier_applies(modifier: CombatModifierDefinition, ctx: ModifierContext) -> bool:
    source = modifier.source
    terrain_filter = modifier.terrain_type_filter

    if isinstance(source, DefenderTerrain):
        return ctx.defender_terrain is not None and _terrain_matches(ctx.defender_terrain, terrain_filter)
    if isinstance(source, AttackerTerrain):
        return ctx.attacker_terrain is not None and _terrain_matches(ctx.attacker_terrain, terrain_filter)

    # Non-terrain sources use the filter against the defender's hex.
    if not _terrain_matches(ctx.defender_terrain, terrain_filter):
        return False
    if isinstance(source, AttackerProperty):
        return _property_active(ctx.attacker, source.property_name)
    if isinstance(source, DefenderProperty):
        return _property_active(ctx.defender, source.property_name)
    if isinstance(source, Custom):
        return source.tag in ctx.active_tags
    raise TypeError(f"Unknown modifier source: {source!r}")


def _clamp(value: int, bound: int) -> int:
    return max(-bound, min(bound, value))


def evaluate_modifiers(
    modifiers: Iterable[CombatModifierDefinition],
    ctx: ModifierContext,
    column_count: int,
) -> ModifierEvaluation:
    """Fold applicable modifiers into one column shift.

    Modifiers are evaluated highest priority first; equal priorities keep
    registration order. After each modifier with a ``cap`` the running total
    is clamped to ``[-cap, +cap]``. The final total is clamped so it can never
    move further than the table is wide.
    """
    applicable = [modifier for modifier in modifiers if modifier_applies(modifier, ctx)]
    ordered = sorted(applicable, key=lambda modifier: -modifier.priority)

    total = 0
    applied: list[tuple[str, int]] = []
    events: list[FactorEvent] = []
    scope = ctx.scope
    for modifier in ordered:
        total += modifier.column_shift
        why = f"{modifier.source.kind}, priority {modifier.priority}"
        if modifier.cap is not None:
            capped = _clamp(total, modifier.cap)
            if capped != total:
                why += f", capped at ±{modifier.cap}"
            total = capped
        applied.append((modifier.name, modifier.column_shift))
        events.append(
            FactorEvent(
                name=modifier.name,
                phase="modifiers",
                value=float(total),
                delta=f"{modifier.column_shift:+d}",
                why=why,
                scope=scope,
            )
        )

    if column_count > 0:
        total = _clamp(total, column_count - 1)

    return ModifierEvaluation(total_shift=total, applied=tuple(applied), events=tuple(events))
