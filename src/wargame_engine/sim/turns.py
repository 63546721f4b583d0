"""Turn sequencing: pure bookkeeping over a designer-defined phase list."""

from __future__ import annotations

import logging
from dataclasses import replace

from wargame_engine.domain.events import PhaseAdvancedEvent
from wargame_engine.domain.mechanics import Phase, TurnState, TurnStructure
from wargame_engine.domain.types import PhaseType

logger = logging.getLogger(__name__)


def start_turn_sequence(structure: TurnStructure) -> TurnState:
    if not structure.phases:
        logger.warning("Starting play with an empty turn structure; phase gating is off.")
    return TurnState(turn_number=1, current_phase_index=0, is_active=True)


def stop_turn_sequence(state: TurnState) -> TurnState:
    return replace(state, is_active=False)


def current_phase(structure: TurnStructure, state: TurnState) -> Phase | None:
    if not structure.phases:
        return None
    index = min(max(state.current_phase_index, 0), len(structure.phases) - 1)
    return structure.phases[index]


def advance_phase(structure: TurnStructure, state: TurnState) -> TurnState:
    """Move to the next phase, wrapping into the next turn after the last one."""
    if not structure.phases:
        logger.warning("advance_phase called with an empty turn structure.")
        return state

    turn_number = max(state.turn_number, 1)
    next_index = state.current_phase_index + 1
    if next_index >= len(structure.phases):
        return replace(state, turn_number=turn_number + 1, current_phase_index=0)
    return replace(state, turn_number=turn_number, current_phase_index=next_index)


def is_combat_phase(structure: TurnStructure, state: TurnState) -> bool:
    """Empty structures do not gate combat."""
    phase = current_phase(structure, state)
    return phase is None or phase.phase_type == PhaseType.COMBAT


def phase_advanced_event(structure: TurnStructure, state: TurnState) -> PhaseAdvancedEvent | None:
    phase = current_phase(structure, state)
    if phase is None:
        return None
    return PhaseAdvancedEvent(
        turn_number=state.turn_number,
        phase_index=state.current_phase_index,
        phase_name=phase.name,
        phase_type=phase.phase_type,
    )
