"""Designer-authored mechanics: turn structure, CRT and combat modifiers."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import ClassVar, TypeAlias, Union

from wargame_engine.domain.types import CrtColumnType, PhaseType, PlayerOrder, new_type_id


class CrtStructureError(ValueError):
    """A structural edit would break the CRT outcome grid."""


def _check_non_negative(effect: str, **counts: int) -> None:
    for name, value in counts.items():
        if value < 0:
            raise ValueError(f"{effect}: {name} must be >= 0, got {value}")


# ---------------------------------------------------------------------------
# Turn structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Phase:
    id: str
    name: str
    phase_type: PhaseType
    description: str = ""


@dataclass(frozen=True)
class TurnStructure:
    """Ordered phases that repeat every game turn."""

    phases: tuple[Phase, ...] = ()
    player_order: PlayerOrder = PlayerOrder.ALTERNATING

    def with_phases(self, phases: list[Phase] | tuple[Phase, ...]) -> "TurnStructure":
        return replace(self, phases=tuple(phases))


@dataclass(frozen=True)
class TurnState:
    """Cursor into the turn structure. Play mode only, never persisted."""

    turn_number: int = 1
    current_phase_index: int = 0
    is_active: bool = False


# ---------------------------------------------------------------------------
# Combat results table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CrtColumn:
    label: str
    column_type: CrtColumnType
    threshold: float


@dataclass(frozen=True)
class CrtRow:
    label: str
    die_value_min: int
    die_value_max: int

    def __post_init__(self) -> None:
        if self.die_value_min > self.die_value_max:
            raise CrtStructureError(
                f"Row {self.label!r}: die_value_min {self.die_value_min} > die_value_max {self.die_value_max}"
            )

    def contains(self, die_roll: int) -> bool:
        return self.die_value_min <= die_roll <= self.die_value_max


@dataclass(frozen=True)
class NoEffect:
    kind: ClassVar[str] = "no_effect"


@dataclass(frozen=True)
class Retreat:
    """Defender retreats N hexes."""

    hexes: int
    kind: ClassVar[str] = "retreat"

    def __post_init__(self) -> None:
        _check_non_negative("Retreat", hexes=self.hexes)


@dataclass(frozen=True)
class StepLoss:
    """Defender loses N steps."""

    steps: int
    kind: ClassVar[str] = "step_loss"

    def __post_init__(self) -> None:
        _check_non_negative("StepLoss", steps=self.steps)


@dataclass(frozen=True)
class AttackerStepLoss:
    steps: int
    kind: ClassVar[str] = "attacker_step_loss"

    def __post_init__(self) -> None:
        _check_non_negative("AttackerStepLoss", steps=self.steps)


@dataclass(frozen=True)
class Exchange:
    attacker_steps: int
    defender_steps: int
    kind: ClassVar[str] = "exchange"

    def __post_init__(self) -> None:
        _check_non_negative(
            "Exchange", attacker_steps=self.attacker_steps, defender_steps=self.defender_steps
        )


@dataclass(frozen=True)
class AttackerEliminated:
    kind: ClassVar[str] = "attacker_eliminated"


@dataclass(frozen=True)
class DefenderEliminated:
    kind: ClassVar[str] = "defender_eliminated"


OutcomeEffect: TypeAlias = Union[
    NoEffect,
    Retreat,
    StepLoss,
    AttackerStepLoss,
    Exchange,
    AttackerEliminated,
    DefenderEliminated,
]


@dataclass(frozen=True)
class CombatOutcome:
    """Designer label plus an optional structured effect."""

    label: str
    effect: OutcomeEffect | None = None


BLANK_OUTCOME = CombatOutcome(label="")


@dataclass()
class CombatResultsTable:
    """A grid of outcomes indexed ``outcomes[row][column]``.

    The grid always has ``len(rows)`` rows of ``len(columns)`` cells. Every
    structural edit below keeps that shape; a table built with a mis-shaped
    grid is rejected up front.
    """

    id: str
    name: str
    columns: list[CrtColumn] = field(default_factory=list)
    rows: list[CrtRow] = field(default_factory=list)
    outcomes: list[list[CombatOutcome]] = field(default_factory=list)
    combat_concept_id: str | None = None

    def __post_init__(self) -> None:
        self.check_shape()

    @staticmethod
    def new(name: str = "Combat Results Table", combat_concept_id: str | None = None) -> "CombatResultsTable":
        return CombatResultsTable(id=new_type_id(), name=name, combat_concept_id=combat_concept_id)

    @property
    def is_empty(self) -> bool:
        return not self.columns or not self.rows

    def check_shape(self) -> None:
        if len(self.outcomes) != len(self.rows):
            raise CrtStructureError(
                f"CRT {self.name!r}: {len(self.outcomes)} outcome rows for {len(self.rows)} table rows"
            )
        for index, cells in enumerate(self.outcomes):
            if len(cells) != len(self.columns):
                raise CrtStructureError(
                    f"CRT {self.name!r}: row {index} has {len(cells)} cells for {len(self.columns)} columns"
                )

    def outcome_at(self, row: int, column: int) -> CombatOutcome:
        self._check_row_index(row)
        self._check_column_index(column)
        return self.outcomes[row][column]

    def set_outcome(self, row: int, column: int, outcome: CombatOutcome) -> None:
        self._check_row_index(row)
        self._check_column_index(column)
        self.outcomes[row][column] = outcome

    def add_column(self, column: CrtColumn, fill: CombatOutcome = BLANK_OUTCOME) -> int:
        self.insert_column(len(self.columns), column, fill)
        return len(self.columns) - 1

    def insert_column(self, index: int, column: CrtColumn, fill: CombatOutcome = BLANK_OUTCOME) -> None:
        if index < 0 or index > len(self.columns):
            raise CrtStructureError(f"Column insert index {index} out of range")
        self.columns.insert(index, column)
        for cells in self.outcomes:
            cells.insert(index, fill)

    def remove_column(self, index: int) -> CrtColumn:
        self._check_column_index(index)
        for cells in self.outcomes:
            del cells[index]
        return self.columns.pop(index)

    def add_row(self, row: CrtRow, fill: CombatOutcome = BLANK_OUTCOME) -> int:
        self.insert_row(len(self.rows), row, fill)
        return len(self.rows) - 1

    def insert_row(self, index: int, row: CrtRow, fill: CombatOutcome = BLANK_OUTCOME) -> None:
        if index < 0 or index > len(self.rows):
            raise CrtStructureError(f"Row insert index {index} out of range")
        self.rows.insert(index, row)
        self.outcomes.insert(index, [fill] * len(self.columns))

    def remove_row(self, index: int) -> CrtRow:
        self._check_row_index(index)
        del self.outcomes[index]
        return self.rows.pop(index)

    def _check_row_index(self, index: int) -> None:
        if not 0 <= index < len(self.rows):
            raise CrtStructureError(f"Row index {index} out of range (0..{len(self.rows) - 1})")

    def _check_column_index(self, index: int) -> None:
        if not 0 <= index < len(self.columns):
            raise CrtStructureError(f"Column index {index} out of range (0..{len(self.columns) - 1})")


# ---------------------------------------------------------------------------
# Combat modifiers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DefenderTerrain:
    kind: ClassVar[str] = "defender_terrain"


@dataclass(frozen=True)
class AttackerTerrain:
    kind: ClassVar[str] = "attacker_terrain"


@dataclass(frozen=True)
class AttackerProperty:
    property_name: str
    kind: ClassVar[str] = "attacker_property"


@dataclass(frozen=True)
class DefenderProperty:
    property_name: str
    kind: ClassVar[str] = "defender_property"


@dataclass(frozen=True)
class Custom:
    tag: str
    kind: ClassVar[str] = "custom"


ModifierSource: TypeAlias = Union[DefenderTerrain, AttackerTerrain, AttackerProperty, DefenderProperty, Custom]


@dataclass(frozen=True)
class CombatModifierDefinition:
    """A signed column shift applied during CRT lookup.

    Positive shifts move right (favor the attacker). Higher ``priority`` is
    evaluated first. ``cap`` clamps the running total after this modifier.
    """

    id: str
    name: str
    source: ModifierSource
    column_shift: int
    priority: int = 0
    cap: int | None = None
    terrain_type_filter: str | None = None

    def __post_init__(self) -> None:
        if self.cap is not None and self.cap < 0:
            raise ValueError(f"Modifier {self.name!r}: cap must be >= 0, got {self.cap}")


@dataclass()
class CombatModifierRegistry:
    """All modifier definitions, in registration order."""

    modifiers: list[CombatModifierDefinition] = field(default_factory=list)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for modifier in self.modifiers:
            if modifier.id in seen:
                raise ValueError(f"Duplicate modifier id: {modifier.id}")
            seen.add(modifier.id)

    def add(self, modifier: CombatModifierDefinition) -> None:
        if self.get(modifier.id) is not None:
            raise ValueError(f"Duplicate modifier id: {modifier.id}")
        self.modifiers.append(modifier)

    def remove(self, modifier_id: str) -> CombatModifierDefinition:
        for index, modifier in enumerate(self.modifiers):
            if modifier.id == modifier_id:
                return self.modifiers.pop(index)
        raise KeyError(modifier_id)

    def get(self, modifier_id: str) -> CombatModifierDefinition | None:
        for modifier in self.modifiers:
            if modifier.id == modifier_id:
                return modifier
        return None

    def __iter__(self):
        return iter(self.modifiers)

    def __len__(self) -> int:
        return len(self.modifiers)


@dataclass()
class GameSystem:
    """Everything a designer authors for turn and combat resolution."""

    name: str
    turn_structure: TurnStructure
    combat_results_table: CombatResultsTable
    combat_modifiers: CombatModifierRegistry
