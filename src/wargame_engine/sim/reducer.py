from __future__ import annotations

from dataclasses import dataclass

from wargame_engine.domain.actions import (
    Action,
    AdvancePhase,
    ClearCombat,
    ConfirmOutcome,
    RollDie,
    SelectUnit,
    StartPlay,
    StopPlay,
)
from wargame_engine.domain.combat_models import CombatStage
from wargame_engine.domain.errors import CombatError
from wargame_engine.domain.events import CombatResolvedEvent, FactorEvent, PhaseAdvancedEvent, UiEvent
from wargame_engine.sim.state import PlaySession


@dataclass()
class ActionResult:
    ok: bool
    message: str | None
    message_kind: str | None
    error_kind: str | None
    session: PlaySession
    ui_events: list[UiEvent | PhaseAdvancedEvent | CombatResolvedEvent]
    factor_events: list[FactorEvent]


def apply_action(session: PlaySession, action: Action) -> ActionResult:
    ui_events: list[UiEvent | PhaseAdvancedEvent | CombatResolvedEvent] = []
    factor_events: list[FactorEvent] = []

    def ok(message: str | None, kind: str = "info") -> ActionResult:
        return ActionResult(
            ok=True,
            message=message,
            message_kind=kind,
            error_kind=None,
            session=session,
            ui_events=list(ui_events),
            factor_events=list(factor_events),
        )

    def fail(exc: CombatError | str, error_kind: str = "invalid_action") -> ActionResult:
        if isinstance(exc, CombatError):
            message, error_kind = f"{exc.user_message}: {exc}", exc.kind
        else:
            message = exc
        return ActionResult(
            ok=False,
            message=message,
            message_kind="error",
            error_kind=error_kind,
            session=session,
            ui_events=list(ui_events),
            factor_events=list(factor_events),
        )

    if isinstance(action, StartPlay):
        event = session.start()
        if event is not None:
            ui_events.append(event)
        return ok("Play started", "accent")

    if isinstance(action, StopPlay):
        session.stop()
        return ok("Play stopped", "info")

    if isinstance(action, AdvancePhase):
        if not session.is_active:
            return fail("Play is not running")
        event = session.advance_phase()
        if event is None:
            return ok("No phases defined", "info")
        ui_events.append(event)
        return ok(f"Turn {event.turn_number}: {event.phase_name}", "info")

    if isinstance(action, SelectUnit):
        try:
            combat = session.select_unit(action.unit)
        except CombatError as exc:
            return fail(exc)
        if combat.stage == CombatStage.DEFENDER_SELECTED:
            factor_events.extend(combat.factor_events)
            return ok("Odds calculated", "accent")
        if combat.stage == CombatStage.ATTACKER_SELECTED:
            return ok("Attacker selected", "info")
        return ok("Combat cleared", "info")

    if isinstance(action, RollDie):
        try:
            combat = session.roll(action.value)
        except CombatError as exc:
            return fail(exc)
        label = combat.outcome.label if combat.outcome is not None else ""
        if combat.pending_effect is not None and combat.pending_effect.requires_action:
            ui_events.append(
                UiEvent(
                    kind="pending_effect",
                    message=f"{label}: confirm to apply",
                    data={"effect": combat.pending_effect.effect.kind},
                )
            )
        return ok(f"Rolled {action.value}: {label}", "accent")

    if isinstance(action, ConfirmOutcome):
        try:
            event = session.confirm()
        except CombatError as exc:
            return fail(exc)
        ui_events.append(event)
        return ok("Combat resolved", "accent")

    if isinstance(action, ClearCombat):
        session.clear()
        return ok("Combat cleared", "info")

    return fail("Unknown action")
