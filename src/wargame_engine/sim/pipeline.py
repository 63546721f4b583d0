"""Combat resolution pipeline.

Every function here takes an ``ActiveCombat`` and returns a new one, or
raises a ``CombatError``. Nothing on the board is ever mutated; a rolled
outcome only describes the follow-up the host should offer.

    IDLE -> ATTACKER_SELECTED -> DEFENDER_SELECTED -> ROLLED -> RESOLVED
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Union

from wargame_engine.domain.combat_models import ActiveCombat, CombatFailure, CombatStage, pending_effect_for
from wargame_engine.domain.errors import (
    CombatError,
    EmptyTable,
    InvalidCombatState,
    NoMatchingRow,
    StrengthUnresolved,
)
from wargame_engine.domain.events import CombatResolvedEvent
from wargame_engine.domain.mechanics import CombatModifierDefinition, CombatResultsTable
from wargame_engine.domain.types import CombatRole, GameEntity, TerrainRef
from wargame_engine.rules.crt import apply_column_shift, column_value, find_column, find_row
from wargame_engine.rules.modifiers import ModifierContext, evaluate_modifiers
from wargame_engine.rules.strength import StrengthFn, StrengthResolver, resolve_strength

logger = logging.getLogger(__name__)

TerrainLookup = Callable[[GameEntity], Union[TerrainRef, None]]


def no_terrain(_entity: GameEntity) -> TerrainRef | None:
    return None


@dataclass(frozen=True)
class CombatContext:
    """Definitions and collaborators a combat is resolved against."""

    crt: CombatResultsTable
    modifiers: Iterable[CombatModifierDefinition]
    strength_resolver: StrengthResolver | StrengthFn
    terrain_of: TerrainLookup = no_terrain
    active_tags: frozenset[str] = field(default_factory=frozenset)


def reset_combat() -> ActiveCombat:
    return ActiveCombat.idle()


def select_unit(combat: ActiveCombat, unit: GameEntity, ctx: CombatContext) -> ActiveCombat:
    """Apply a unit click to the combat in progress."""
    stage = combat.stage

    if stage in (CombatStage.IDLE, CombatStage.RESOLVED):
        if ctx.crt.is_empty:
            raise EmptyTable(f"CRT {ctx.crt.name!r} has no columns or rows")
        logger.debug("Attacker selected: %s", unit.id)
        return ActiveCombat(stage=CombatStage.ATTACKER_SELECTED, attacker=unit)

    if stage == CombatStage.ATTACKER_SELECTED:
        if combat.attacker is None or unit == combat.attacker:
            return reset_combat()
        return begin_combat(combat.attacker, unit, ctx)

    if stage == CombatStage.DEFENDER_SELECTED:
        if combat.attacker is None or unit in (combat.attacker, combat.defender):
            return reset_combat()
        return begin_combat(combat.attacker, unit, ctx)

    raise InvalidCombatState("Confirm or clear the rolled outcome before selecting units")


def begin_combat(attacker: GameEntity, defender: GameEntity, ctx: CombatContext) -> ActiveCombat:
    """Resolve strengths, the raw column and modifiers for an attacker/defender pair."""
    if attacker == defender:
        raise InvalidCombatState("A unit cannot attack itself")
    crt = ctx.crt
    if crt.is_empty:
        raise EmptyTable(f"CRT {crt.name!r} has no columns or rows")

    attacker_strength = resolve_strength(
        ctx.strength_resolver, crt.combat_concept_id, CombatRole.ATTACKER, attacker
    )
    defender_strength = resolve_strength(
        ctx.strength_resolver, crt.combat_concept_id, CombatRole.DEFENDER, defender
    )

    column_count = len(crt.columns)
    base_column = find_column(attacker_strength, defender_strength, crt.columns)
    raw_value = column_value(crt.columns[base_column], attacker_strength, defender_strength)

    modifier_ctx = ModifierContext(
        attacker=attacker,
        defender=defender,
        attacker_terrain=ctx.terrain_of(attacker),
        defender_terrain=ctx.terrain_of(defender),
        active_tags=ctx.active_tags,
    )
    evaluation = evaluate_modifiers(ctx.modifiers, modifier_ctx, column_count)
    resolved_column = apply_column_shift(base_column, evaluation.total_shift, column_count)

    logger.debug(
        "Combat %s vs %s: %.2f vs %.2f, column %d shifted %+d to %d",
        attacker.id,
        defender.id,
        attacker_strength,
        defender_strength,
        base_column,
        evaluation.total_shift,
        resolved_column,
    )
    return ActiveCombat(
        stage=CombatStage.DEFENDER_SELECTED,
        attacker=attacker,
        defender=defender,
        attacker_strength=attacker_strength,
        defender_strength=defender_strength,
        raw_value=raw_value,
        base_column=base_column,
        total_shift=evaluation.total_shift,
        applied_modifiers=evaluation.applied,
        resolved_column=resolved_column,
        factor_events=evaluation.events,
    )


def apply_die_roll(combat: ActiveCombat, die_value: int, ctx: CombatContext) -> ActiveCombat:
    """Look up the outcome for a caller-supplied die value."""
    if combat.stage != CombatStage.DEFENDER_SELECTED:
        raise InvalidCombatState(f"Cannot roll while combat is {combat.stage.value}")
    crt = ctx.crt
    if crt.is_empty:
        raise EmptyTable(f"CRT {crt.name!r} has no columns or rows")
    column = combat.resolved_column
    if column is None or not 0 <= column < len(crt.columns):
        raise InvalidCombatState("Resolved column no longer exists in the CRT")

    try:
        row = find_row(die_value, crt.rows)
    except NoMatchingRow:
        logger.warning("CRT %r has no row for die roll %d", crt.name, die_value)
        raise

    outcome = crt.outcome_at(row, column)
    return replace(
        combat,
        stage=CombatStage.ROLLED,
        die_roll=die_value,
        resolved_row=row,
        outcome=outcome,
        pending_effect=pending_effect_for(outcome.effect),
        failure=None,
    )


def confirm_outcome(combat: ActiveCombat, ctx: CombatContext) -> tuple[ActiveCombat, CombatResolvedEvent]:
    """Accept the rolled outcome. The host applies any effect itself."""
    if combat.stage != CombatStage.ROLLED:
        raise InvalidCombatState(f"Nothing to confirm while combat is {combat.stage.value}")
    attacker, defender, outcome = combat.attacker, combat.defender, combat.outcome
    if attacker is None or defender is None or outcome is None or combat.die_roll is None:
        raise InvalidCombatState("Rolled combat is missing its units or outcome")

    columns = ctx.crt.columns
    column = combat.resolved_column
    column_label = columns[column].label if column is not None and column < len(columns) else ""
    event = CombatResolvedEvent(
        attacker_id=attacker.id,
        defender_id=defender.id,
        outcome=outcome,
        die_roll=combat.die_roll,
        column_label=column_label,
    )
    return replace(combat, stage=CombatStage.RESOLVED, failure=None), event


def record_failure(combat: ActiveCombat, exc: CombatError) -> ActiveCombat:
    """Fall back to the stage the failed step started from, keeping the reason."""
    failure = CombatFailure(kind=exc.kind, message=str(exc), user_message=exc.user_message)

    if isinstance(exc, StrengthUnresolved):
        return ActiveCombat(stage=CombatStage.ATTACKER_SELECTED, attacker=combat.attacker, failure=failure)
    if isinstance(exc, NoMatchingRow):
        return replace(
            combat,
            stage=CombatStage.DEFENDER_SELECTED,
            die_roll=exc.die_roll,
            resolved_row=None,
            outcome=None,
            pending_effect=None,
            failure=failure,
        )
    if isinstance(exc, EmptyTable):
        return ActiveCombat(failure=failure)
    return replace(combat, failure=failure)
