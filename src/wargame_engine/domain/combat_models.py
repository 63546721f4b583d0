"""Runtime models for a combat in progress."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from wargame_engine.domain.events import FactorEvent
from wargame_engine.domain.mechanics import (
    AttackerEliminated,
    AttackerStepLoss,
    CombatOutcome,
    DefenderEliminated,
    Exchange,
    NoEffect,
    OutcomeEffect,
    Retreat,
    StepLoss,
)
from wargame_engine.domain.types import CombatRole, GameEntity


class CombatStage(str, Enum):
    IDLE = "idle"
    ATTACKER_SELECTED = "attacker_selected"
    DEFENDER_SELECTED = "defender_selected"
    ROLLED = "rolled"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class CombatFailure:
    kind: str
    message: str
    user_message: str


@dataclass(frozen=True)
class PendingEffect:
    """Follow-up the UI should offer for confirmation. Nothing is applied."""

    effect: OutcomeEffect
    retreat_hexes: int = 0
    attacker_steps: int = 0
    defender_steps: int = 0
    attacker_eliminated: bool = False
    defender_eliminated: bool = False

    @property
    def affected_roles(self) -> tuple[CombatRole, ...]:
        roles: list[CombatRole] = []
        if self.attacker_steps or self.attacker_eliminated:
            roles.append(CombatRole.ATTACKER)
        if self.defender_steps or self.defender_eliminated or self.retreat_hexes:
            roles.append(CombatRole.DEFENDER)
        return tuple(roles)

    @property
    def requires_action(self) -> bool:
        return bool(self.affected_roles)


def pending_effect_for(effect: OutcomeEffect | None) -> PendingEffect | None:
    if effect is None:
        return None
    if isinstance(effect, NoEffect):
        return PendingEffect(effect=effect)
    if isinstance(effect, Retreat):
        return PendingEffect(effect=effect, retreat_hexes=effect.hexes)
    if isinstance(effect, StepLoss):
        return PendingEffect(effect=effect, defender_steps=effect.steps)
    if isinstance(effect, AttackerStepLoss):
        return PendingEffect(effect=effect, attacker_steps=effect.steps)
    if isinstance(effect, Exchange):
        return PendingEffect(
            effect=effect,
            attacker_steps=effect.attacker_steps,
            defender_steps=effect.defender_steps,
        )
    if isinstance(effect, AttackerEliminated):
        return PendingEffect(effect=effect, attacker_eliminated=True)
    if isinstance(effect, DefenderEliminated):
        return PendingEffect(effect=effect, defender_eliminated=True)
    raise TypeError(f"Unknown outcome effect: {effect!r}")


@dataclass(frozen=True)
class ActiveCombat:
    """A single combat attempt. Never persisted."""

    stage: CombatStage = CombatStage.IDLE
    attacker: GameEntity | None = None
    defender: GameEntity | None = None
    attacker_strength: float | None = None
    defender_strength: float | None = None
    raw_value: float | None = None
    base_column: int | None = None
    total_shift: int = 0
    applied_modifiers: tuple[tuple[str, int], ...] = ()
    resolved_column: int | None = None
    die_roll: int | None = None
    resolved_row: int | None = None
    outcome: CombatOutcome | None = None
    pending_effect: PendingEffect | None = None
    failure: CombatFailure | None = None
    factor_events: tuple[FactorEvent, ...] = ()

    @staticmethod
    def idle() -> "ActiveCombat":
        return ActiveCombat()

    @property
    def is_idle(self) -> bool:
        return self.stage == CombatStage.IDLE
