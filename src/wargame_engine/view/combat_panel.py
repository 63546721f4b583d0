from __future__ import annotations

import math
from dataclasses import dataclass

from wargame_engine.domain.combat_models import CombatStage
from wargame_engine.domain.types import CrtColumnType
from wargame_engine.sim.state import PlaySession


def fmt_strength(value: float | None) -> str:
    if value is None:
        return "-"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def format_odds(column_type: CrtColumnType, value: float) -> str:
    """Render a raw value the way CRT headers are written: 3:1, 1:2, +2."""
    if column_type == CrtColumnType.DIFFERENTIAL:
        if float(value).is_integer():
            return f"{int(value):+d}"
        return f"{value:+.1f}"
    if math.isinf(value):
        return "inf:1"
    if value >= 1.0:
        ratio = math.floor(value * 10) / 10
        return f"{fmt_strength(ratio)}:1"
    if value <= 0.0:
        return "0:1"
    inverse = math.ceil(1.0 / value * 10) / 10
    return f"1:{fmt_strength(inverse)}"


def fmt_shift(shift: int) -> str:
    return f"{shift:+d}" if shift else "0"


@dataclass(frozen=True)
class CombatPanelView:
    stage: str
    phase_label: str
    attacker_label: str
    defender_label: str
    attacker_strength: str
    defender_strength: str
    odds: str
    modifier_lines: list[str]
    total_shift: str
    column_label: str
    row_label: str
    outcome_label: str
    needs_confirmation: bool
    error: str | None


def build_combat_panel(session: PlaySession) -> CombatPanelView:
    combat = session.combat
    crt = session.system.combat_results_table

    phase = session.current_phase
    if phase is None:
        phase_label = "No phases"
    else:
        phase_label = f"Turn {session.turn_state.turn_number} - {phase.name}"

    odds = "-"
    if combat.raw_value is not None and combat.base_column is not None and combat.base_column < len(crt.columns):
        odds = format_odds(crt.columns[combat.base_column].column_type, combat.raw_value)

    column_label = "-"
    if combat.resolved_column is not None and combat.resolved_column < len(crt.columns):
        column_label = crt.columns[combat.resolved_column].label

    row_label = "-"
    if combat.resolved_row is not None and combat.resolved_row < len(crt.rows):
        row_label = crt.rows[combat.resolved_row].label

    error = None
    if combat.failure is not None:
        error = combat.failure.user_message[:1].upper() + combat.failure.user_message[1:]

    return CombatPanelView(
        stage=combat.stage.value,
        phase_label=phase_label,
        attacker_label=combat.attacker.id if combat.attacker else "-",
        defender_label=combat.defender.id if combat.defender else "-",
        attacker_strength=fmt_strength(combat.attacker_strength),
        defender_strength=fmt_strength(combat.defender_strength),
        odds=odds,
        modifier_lines=[f"{name} {fmt_shift(shift)}" for name, shift in combat.applied_modifiers],
        total_shift=fmt_shift(combat.total_shift),
        column_label=column_label,
        row_label=row_label,
        outcome_label=combat.outcome.label if combat.outcome else "-",
        needs_confirmation=combat.stage == CombatStage.ROLLED,
        error=error,
    )
