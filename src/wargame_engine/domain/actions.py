"""Action definitions for reducer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias, Union

from wargame_engine.domain.types import GameEntity


@dataclass(frozen=True)
class StartPlay:
    pass


@dataclass(frozen=True)
class StopPlay:
    pass


@dataclass(frozen=True)
class AdvancePhase:
    pass


@dataclass(frozen=True)
class SelectUnit:
    unit: GameEntity


@dataclass(frozen=True)
class RollDie:
    value: int


@dataclass(frozen=True)
class ConfirmOutcome:
    pass


@dataclass(frozen=True)
class ClearCombat:
    pass


Action: TypeAlias = Union[
    StartPlay,
    StopPlay,
    AdvancePhase,
    SelectUnit,
    RollDie,
    ConfirmOutcome,
    ClearCombat,
]
