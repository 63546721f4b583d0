"""Combat resolution errors.

Every error carries a ``kind`` for the host to branch on and a short
``user_message`` suitable for a toast or dialog.
"""

from __future__ import annotations


class CombatError(RuntimeError):
    kind = "combat_error"
    user_message = "combat could not be resolved"


class StrengthUnresolved(CombatError):
    """A role binding is missing or the bound field is not numeric."""

    kind = "strength_unresolved"
    user_message = "cannot calculate odds"

    def __init__(self, role: str, reason: str) -> None:
        super().__init__(f"{role} strength unresolved: {reason}")
        self.role = role
        self.reason = reason


class NoMatchingRow(CombatError):
    kind = "no_matching_row"
    user_message = "no outcome defined for this roll"

    def __init__(self, die_roll: int) -> None:
        super().__init__(f"No CRT row covers die roll {die_roll}")
        self.die_roll = die_roll


class EmptyTable(CombatError):
    kind = "empty_table"
    user_message = "the combat results table has no columns or rows"


class InvalidCombatState(CombatError):
    """An operation was attempted from the wrong pipeline stage."""

    kind = "invalid_combat_state"
    user_message = "that combat step is not available now"


class CombatPhaseInactive(InvalidCombatState):
    kind = "combat_phase_inactive"
    user_message = "combat is only available during a combat phase"


class PlayNotActive(InvalidCombatState):
    kind = "play_not_active"
    user_message = "play is not running"
