"""Explainability + UI events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from wargame_engine.domain.mechanics import CombatOutcome
from wargame_engine.domain.types import PhaseType


@dataclass(frozen=True)
class FactorScope:
    kind: str  # "combat"
    id: str


@dataclass(frozen=True)
class FactorEvent:
    name: str
    phase: str
    value: float
    delta: str
    why: str
    scope: FactorScope


@dataclass(frozen=True)
class PhaseAdvancedEvent:
    turn_number: int
    phase_index: int
    phase_name: str
    phase_type: PhaseType


@dataclass(frozen=True)
class CombatResolvedEvent:
    attacker_id: str
    defender_id: str
    outcome: CombatOutcome
    die_roll: int
    column_label: str


@dataclass(frozen=True)
class UiEvent:
    kind: str
    message: str
    data: dict[str, Any] | None = None
