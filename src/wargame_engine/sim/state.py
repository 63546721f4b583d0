"""Play session: the single owner of turn and combat state."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from wargame_engine.domain.combat_models import ActiveCombat, CombatStage
from wargame_engine.domain.errors import CombatError, CombatPhaseInactive, PlayNotActive
from wargame_engine.domain.events import CombatResolvedEvent, PhaseAdvancedEvent
from wargame_engine.domain.mechanics import GameSystem, Phase, TurnState
from wargame_engine.domain.types import GameEntity
from wargame_engine.rules.strength import StrengthFn, StrengthResolver
from wargame_engine.sim import pipeline, turns

logger = logging.getLogger(__name__)


@dataclass()
class PlaySession:
    system: GameSystem
    strength_resolver: StrengthResolver | StrengthFn
    terrain_of: pipeline.TerrainLookup = pipeline.no_terrain
    active_tags: frozenset[str] = field(default_factory=frozenset)

    turn_state: TurnState = field(default_factory=TurnState)
    combat: ActiveCombat = field(default_factory=ActiveCombat.idle)

    @property
    def is_active(self) -> bool:
        return self.turn_state.is_active

    @property
    def current_phase(self) -> Phase | None:
        return turns.current_phase(self.system.turn_structure, self.turn_state)

    @property
    def combat_allowed(self) -> bool:
        return turns.is_combat_phase(self.system.turn_structure, self.turn_state)

    def context(self) -> pipeline.CombatContext:
        return pipeline.CombatContext(
            crt=self.system.combat_results_table,
            modifiers=tuple(self.system.combat_modifiers.modifiers),
            strength_resolver=self.strength_resolver,
            terrain_of=self.terrain_of,
            active_tags=self.active_tags,
        )

    def start(self) -> PhaseAdvancedEvent | None:
        self.turn_state = turns.start_turn_sequence(self.system.turn_structure)
        self.combat = pipeline.reset_combat()
        return turns.phase_advanced_event(self.system.turn_structure, self.turn_state)

    def stop(self) -> None:
        self.turn_state = turns.stop_turn_sequence(self.turn_state)
        self.combat = pipeline.reset_combat()

    def advance_phase(self) -> PhaseAdvancedEvent | None:
        # Leaving the phase abandons any combat still in progress.
        self.turn_state = turns.advance_phase(self.system.turn_structure, self.turn_state)
        self.combat = pipeline.reset_combat()
        event = turns.phase_advanced_event(self.system.turn_structure, self.turn_state)
        if event is not None:
            logger.debug("Turn %d, phase %d: %s", event.turn_number, event.phase_index, event.phase_name)
        return event

    def _require_play(self) -> None:
        if not self.is_active:
            raise PlayNotActive("Start play before resolving combat")

    def select_unit(self, unit: GameEntity) -> ActiveCombat:
        try:
            self._require_play()
            if self.combat.stage in (CombatStage.IDLE, CombatStage.RESOLVED) and not self.combat_allowed:
                phase = self.current_phase
                name = phase.name if phase is not None else "?"
                raise CombatPhaseInactive(f"Current phase {name!r} is not a combat phase")
            self.combat = pipeline.select_unit(self.combat, unit, self.context())
        except CombatError as exc:
            self.combat = pipeline.record_failure(self.combat, exc)
            raise
        return self.combat

    def roll(self, die_value: int) -> ActiveCombat:
        try:
            self._require_play()
            self.combat = pipeline.apply_die_roll(self.combat, die_value, self.context())
        except CombatError as exc:
            self.combat = pipeline.record_failure(self.combat, exc)
            raise
        return self.combat

    def confirm(self) -> CombatResolvedEvent:
        try:
            self._require_play()
            self.combat, event = pipeline.confirm_outcome(self.combat, self.context())
        except CombatError as exc:
            self.combat = pipeline.record_failure(self.combat, exc)
            raise
        return event

    def clear(self) -> ActiveCombat:
        self.combat = pipeline.reset_combat()
        return self.combat
