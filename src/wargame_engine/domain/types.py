"""Common types and enums."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


def new_type_id() -> str:
    """Generate an identifier for a designer-authored definition."""
    return uuid.uuid4().hex


class PhaseType(str, Enum):
    """The category of actions allowed during a phase."""

    MOVEMENT = "movement"
    COMBAT = "combat"
    ADMIN = "admin"


class PlayerOrder(str, Enum):
    """How players alternate within a turn. Informational only."""

    ALTERNATING = "alternating"
    SIMULTANEOUS = "simultaneous"
    ACTIVATION_BASED = "activation_based"


class CrtColumnType(str, Enum):
    ODDS_RATIO = "odds_ratio"
    DIFFERENTIAL = "differential"


class CombatRole(str, Enum):
    ATTACKER = "attacker"
    DEFENDER = "defender"


@dataclass(frozen=True)
class GameEntity:
    """A unit on the board, as seen by the resolution engine."""

    id: str
    entity_type_id: str
    properties: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class TerrainRef:
    """The terrain an entity occupies, as reported by the board."""

    entity_type_id: str
    name: str = ""
