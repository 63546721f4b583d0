"""Map between the domain model and the persisted document schema."""

from __future__ import annotations

from wargame_engine.domain import mechanics
from wargame_engine.domain.types import CrtColumnType, PhaseType, PlayerOrder
from wargame_engine.persistence import schemas

FORMAT_VERSION = 1


def effect_to_schema(effect: mechanics.OutcomeEffect | None):
    if effect is None:
        return None
    if isinstance(effect, mechanics.NoEffect):
        return schemas.NoEffect()
    if isinstance(effect, mechanics.Retreat):
        return schemas.Retreat(hexes=effect.hexes)
    if isinstance(effect, mechanics.StepLoss):
        return schemas.StepLoss(steps=effect.steps)
    if isinstance(effect, mechanics.AttackerStepLoss):
        return schemas.AttackerStepLoss(steps=effect.steps)
    if isinstance(effect, mechanics.Exchange):
        return schemas.Exchange(attacker_steps=effect.attacker_steps, defender_steps=effect.defender_steps)
    if isinstance(effect, mechanics.AttackerEliminated):
        return schemas.AttackerEliminated()
    if isinstance(effect, mechanics.DefenderEliminated):
        return schemas.DefenderEliminated()
    raise TypeError(f"Unknown outcome effect: {effect!r}")


def effect_from_schema(effect) -> mechanics.OutcomeEffect | None:
    if effect is None:
        return None
    if isinstance(effect, schemas.NoEffect):
        return mechanics.NoEffect()
    if isinstance(effect, schemas.Retreat):
        return mechanics.Retreat(hexes=effect.hexes)
    if isinstance(effect, schemas.StepLoss):
        return mechanics.StepLoss(steps=effect.steps)
    if isinstance(effect, schemas.AttackerStepLoss):
        return mechanics.AttackerStepLoss(steps=effect.steps)
    if isinstance(effect, schemas.Exchange):
        return mechanics.Exchange(attacker_steps=effect.attacker_steps, defender_steps=effect.defender_steps)
    if isinstance(effect, schemas.AttackerEliminated):
        return mechanics.AttackerEliminated()
    if isinstance(effect, schemas.DefenderEliminated):
        return mechanics.DefenderEliminated()
    raise TypeError(f"Unknown outcome effect schema: {effect!r}")


def source_to_schema(source: mechanics.ModifierSource):
    if isinstance(source, mechanics.DefenderTerrain):
        return schemas.DefenderTerrain()
    if isinstance(source, mechanics.AttackerTerrain):
        return schemas.AttackerTerrain()
    if isinstance(source, mechanics.AttackerProperty):
        return schemas.AttackerProperty(property_name=source.property_name)
    if isinstance(source, mechanics.DefenderProperty):
        return schemas.DefenderProperty(property_name=source.property_name)
    if isinstance(source, mechanics.Custom):
        return schemas.Custom(tag=source.tag)
    raise TypeError(f"Unknown modifier source: {source!r}")


def source_from_schema(source) -> mechanics.ModifierSource:
    if isinstance(source, schemas.DefenderTerrain):
        return mechanics.DefenderTerrain()
    if isinstance(source, schemas.AttackerTerrain):
        return mechanics.AttackerTerrain()
    if isinstance(source, schemas.AttackerProperty):
        return mechanics.AttackerProperty(property_name=source.property_name)
    if isinstance(source, schemas.DefenderProperty):
        return mechanics.DefenderProperty(property_name=source.property_name)
    if isinstance(source, schemas.Custom):
        return mechanics.Custom(tag=source.tag)
    raise TypeError(f"Unknown modifier source schema: {source!r}")


def _turn_structure(structure: mechanics.TurnStructure) -> schemas.TurnStructure:
    return schemas.TurnStructure(
        phases=[
            schemas.Phase(
                id=phase.id,
                name=phase.name,
                phase_type=phase.phase_type.value,
                description=phase.description,
            )
            for phase in structure.phases
        ],
        player_order=structure.player_order.value,
    )


def _crt(crt: mechanics.CombatResultsTable) -> schemas.CombatResultsTable:
    return schemas.CombatResultsTable(
        id=crt.id,
        name=crt.name,
        columns=[
            schemas.CrtColumn(label=column.label, column_type=column.column_type.value, threshold=column.threshold)
            for column in crt.columns
        ],
        rows=[
            schemas.CrtRow(label=row.label, die_value_min=row.die_value_min, die_value_max=row.die_value_max)
            for row in crt.rows
        ],
        outcomes=[
            [schemas.CombatOutcome(label=cell.label, effect=effect_to_schema(cell.effect)) for cell in cells]
            for cells in crt.outcomes
        ],
        combat_concept_id=crt.combat_concept_id,
    )


def _modifier(modifier: mechanics.CombatModifierDefinition) -> schemas.CombatModifier:
    return schemas.CombatModifier(
        id=modifier.id,
        name=modifier.name,
        source=source_to_schema(modifier.source),
        column_shift=modifier.column_shift,
        priority=modifier.priority,
        cap=modifier.cap,
        terrain_type_filter=modifier.terrain_type_filter,
    )


def build_document(system: mechanics.GameSystem) -> schemas.GameSystemDocument:
    return schemas.GameSystemDocument(
        format_version=FORMAT_VERSION,
        name=system.name,
        turn_structure=_turn_structure(system.turn_structure),
        combat_results_table=_crt(system.combat_results_table),
        combat_modifiers=[_modifier(modifier) for modifier in system.combat_modifiers],
    )


def game_system_from_document(document: schemas.GameSystemDocument) -> mechanics.GameSystem:
    """Rebuild the domain model. Raises ``ValueError`` on structural problems."""
    turn_structure = mechanics.TurnStructure(
        phases=tuple(
            mechanics.Phase(
                id=phase.id,
                name=phase.name,
                phase_type=PhaseType(phase.phase_type),
                description=phase.description,
            )
            for phase in document.turn_structure.phases
        ),
        player_order=PlayerOrder(document.turn_structure.player_order),
    )

    crt_doc = document.combat_results_table
    crt = mechanics.CombatResultsTable(
        id=crt_doc.id,
        name=crt_doc.name,
        columns=[
            mechanics.CrtColumn(
                label=column.label,
                column_type=CrtColumnType(column.column_type),
                threshold=column.threshold,
            )
            for column in crt_doc.columns
        ],
        rows=[
            mechanics.CrtRow(label=row.label, die_value_min=row.die_value_min, die_value_max=row.die_value_max)
            for row in crt_doc.rows
        ],
        outcomes=[
            [mechanics.CombatOutcome(label=cell.label, effect=effect_from_schema(cell.effect)) for cell in cells]
            for cells in crt_doc.outcomes
        ],
        combat_concept_id=crt_doc.combat_concept_id,
    )

    registry = mechanics.CombatModifierRegistry()
    for modifier in document.combat_modifiers:
        registry.add(
            mechanics.CombatModifierDefinition(
                id=modifier.id,
                name=modifier.name,
                source=source_from_schema(modifier.source),
                column_shift=modifier.column_shift,
                priority=modifier.priority,
                cap=modifier.cap,
                terrain_type_filter=modifier.terrain_type_filter,
            )
        )

    return mechanics.GameSystem(
        name=document.name,
        turn_structure=turn_structure,
        combat_results_table=crt,
        combat_modifiers=registry,
    )
