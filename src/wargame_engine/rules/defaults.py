"""Starter definitions so a new game system is editable immediately."""

from __future__ import annotations

from wargame_engine.domain.mechanics import (
    AttackerEliminated,
    AttackerStepLoss,
    CombatModifierDefinition,
    CombatModifierRegistry,
    CombatOutcome,
    CombatResultsTable,
    CrtColumn,
    CrtRow,
    DefenderEliminated,
    DefenderTerrain,
    Exchange,
    GameSystem,
    NoEffect,
    OutcomeEffect,
    Phase,
    Retreat,
    StepLoss,
    TurnStructure,
)
from wargame_engine.domain.types import CrtColumnType, PhaseType, PlayerOrder, new_type_id

FOREST_TERRAIN_ID = "forest"
CITY_TERRAIN_ID = "city"

# AE attacker eliminated, AR attacker step loss, EX exchange, DR defender
# retreat, DS defender step loss, DE defender eliminated, NE no effect.
STANDARD_LABEL_EFFECTS: dict[str, OutcomeEffect] = {
    "AE": AttackerEliminated(),
    "AR": AttackerStepLoss(steps=1),
    "EX": Exchange(attacker_steps=1, defender_steps=1),
    "DR": Retreat(hexes=1),
    "DS": StepLoss(steps=1),
    "DE": DefenderEliminated(),
    "NE": NoEffect(),
}

DEFAULT_OUTCOME_LABELS: list[list[str]] = [
    ["AE", "AE", "AR", "EX", "DR", "DS", "DE"],
    ["AE", "AR", "EX", "DR", "DS", "DE", "DE"],
    ["AR", "EX", "DR", "DR", "DS", "DE", "DE"],
    ["AR", "NE", "DR", "DS", "DE", "DE", "DE"],
    ["NE", "DR", "DS", "DS", "DE", "DE", "DE"],
    ["DR", "DR", "DS", "DE", "DE", "DE", "DE"],
]


def outcome_for_label(label: str) -> CombatOutcome:
    """Outcome with the standard structured effect for a label, if it has one."""
    return CombatOutcome(label=label, effect=STANDARD_LABEL_EFFECTS.get(label))


def default_turn_structure() -> TurnStructure:
    return TurnStructure(
        phases=(
            Phase(new_type_id(), "Reinforcement Phase", PhaseType.ADMIN, "Place reinforcements and replacements."),
            Phase(new_type_id(), "Movement Phase", PhaseType.MOVEMENT, "Move units within their movement allowance."),
            Phase(new_type_id(), "Combat Phase", PhaseType.COMBAT, "Declare and resolve attacks."),
            Phase(new_type_id(), "Supply Phase", PhaseType.ADMIN, "Check supply lines and attrition."),
            Phase(new_type_id(), "Victory Check Phase", PhaseType.ADMIN, "Evaluate victory conditions."),
        ),
        player_order=PlayerOrder.ALTERNATING,
    )


def default_crt(combat_concept_id: str | None = None) -> CombatResultsTable:
    """Classic 1d6 odds table: columns 1:2 through 6:1."""
    ratios = [(1, 2), (1, 1), (2, 1), (3, 1), (4, 1), (5, 1), (6, 1)]
    columns = [
        CrtColumn(label=f"{a}:{d}", column_type=CrtColumnType.ODDS_RATIO, threshold=a / d) for a, d in ratios
    ]
    rows = [CrtRow(label=str(value), die_value_min=value, die_value_max=value) for value in range(1, 7)]
    outcomes = [[outcome_for_label(label) for label in labels] for labels in DEFAULT_OUTCOME_LABELS]
    return CombatResultsTable(
        id=new_type_id(),
        name="Combat Results Table",
        columns=columns,
        rows=rows,
        outcomes=outcomes,
        combat_concept_id=combat_concept_id,
    )


def default_modifiers() -> CombatModifierRegistry:
    return CombatModifierRegistry(
        modifiers=[
            CombatModifierDefinition(
                id=new_type_id(),
                name="Forest defense",
                source=DefenderTerrain(),
                column_shift=-1,
                priority=10,
                terrain_type_filter=FOREST_TERRAIN_ID,
            ),
            CombatModifierDefinition(
                id=new_type_id(),
                name="City defense",
                source=DefenderTerrain(),
                column_shift=-2,
                priority=10,
                terrain_type_filter=CITY_TERRAIN_ID,
            ),
        ]
    )


def default_game_system(name: str = "New Game System", combat_concept_id: str | None = None) -> GameSystem:
    return GameSystem(
        name=name,
        turn_structure=default_turn_structure(),
        combat_results_table=default_crt(combat_concept_id),
        combat_modifiers=default_modifiers(),
    )
