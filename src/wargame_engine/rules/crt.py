"""CRT column and row lookup."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from wargame_engine.domain.errors import EmptyTable, NoMatchingRow
from wargame_engine.domain.mechanics import CombatOutcome, CombatResultsTable, CrtColumn, CrtRow
from wargame_engine.domain.types import CrtColumnType

logger = logging.getLogger(__name__)


def calculate_odds_ratio(attacker_strength: float, defender_strength: float) -> float:
    """Attacker:defender ratio. A defender with no strength is always out-matched."""
    if defender_strength <= 0:
        return math.inf
    return attacker_strength / defender_strength


def calculate_differential(attacker_strength: float, defender_strength: float) -> float:
    return attacker_strength - defender_strength


def column_value(column: CrtColumn, attacker_strength: float, defender_strength: float) -> float:
    if column.column_type == CrtColumnType.ODDS_RATIO:
        return calculate_odds_ratio(attacker_strength, defender_strength)
    if column.column_type == CrtColumnType.DIFFERENTIAL:
        return calculate_differential(attacker_strength, defender_strength)
    raise ValueError(f"Unknown column type: {column.column_type!r}")


def find_column(attacker_strength: float, defender_strength: float, columns: Sequence[CrtColumn]) -> int:
    """Index of the rightmost column whose own typed value meets its threshold.

    Each column is tested with its own type, so ratio and differential columns
    may be interleaved. When no column qualifies the lookup floors to column 0,
    the most defender-favorable column, so resolution always lands somewhere.
    """
    if not columns:
        raise EmptyTable("CRT has no columns")

    best_index: int | None = None
    for index, column in enumerate(columns):
        if column_value(column, attacker_strength, defender_strength) >= column.threshold:
            best_index = index

    if best_index is None:
        logger.debug(
            "No CRT column qualifies for %s vs %s; flooring to column 0", attacker_strength, defender_strength
        )
        return 0
    return best_index


def find_row(die_roll: int, rows: Sequence[CrtRow]) -> int:
    """Index of the first row, in table order, whose range contains ``die_roll``."""
    for index, row in enumerate(rows):
        if row.contains(die_roll):
            return index
    raise NoMatchingRow(die_roll)


def apply_column_shift(base_column: int, shift: int, column_count: int) -> int:
    if column_count <= 0:
        return 0
    return max(0, min(column_count - 1, base_column + shift))


@dataclass(frozen=True)
class CrtResolution:
    column_index: int
    row_index: int
    column_label: str
    row_label: str
    outcome: CombatOutcome


def resolve_crt(
    crt: CombatResultsTable,
    attacker_strength: float,
    defender_strength: float,
    die_roll: int,
    shift: int = 0,
) -> CrtResolution:
    """Full lookup: column (with shift), row and outcome cell."""
    if crt.is_empty:
        raise EmptyTable(f"CRT {crt.name!r} has no columns or rows")
    base = find_column(attacker_strength, defender_strength, crt.columns)
    column_index = apply_column_shift(base, shift, len(crt.columns))
    row_index = find_row(die_roll, crt.rows)
    return CrtResolution(
        column_index=column_index,
        row_index=row_index,
        column_label=crt.columns[column_index].label,
        row_label=crt.rows[row_index].label,
        outcome=crt.outcome_at(row_index, column_index),
    )
