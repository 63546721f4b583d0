"""Editor-time CRT diagnostics. Resolution never depends on these."""

from __future__ import annotations

from dataclasses import dataclass

from wargame_engine.domain.mechanics import CombatResultsTable, CrtStructureError


@dataclass(frozen=True)
class CrtIssue:
    code: str
    message: str
    severity: str = "warning"  # "warning" | "error"


def crt_issues(crt: CombatResultsTable) -> list[CrtIssue]:
    issues: list[CrtIssue] = []

    if not crt.columns:
        issues.append(CrtIssue("no_columns", "CRT has no columns; combat cannot start", "error"))
    if not crt.rows:
        issues.append(CrtIssue("no_rows", "CRT has no rows; combat cannot start", "error"))

    try:
        crt.check_shape()
    except CrtStructureError as exc:
        issues.append(CrtIssue("grid_shape", str(exc), "error"))

    last_threshold: dict[str, tuple[float, str]] = {}
    for column in crt.columns:
        previous = last_threshold.get(column.column_type.value)
        if previous is not None and column.threshold < previous[0]:
            issues.append(
                CrtIssue(
                    "threshold_order",
                    f"Column {column.label!r} threshold {column.threshold} is below {previous[1]!r} ({previous[0]})",
                )
            )
        last_threshold[column.column_type.value] = (column.threshold, column.label)

    ordered = sorted(crt.rows, key=lambda row: (row.die_value_min, row.die_value_max))
    for earlier, later in zip(ordered, ordered[1:]):
        if later.die_value_min <= earlier.die_value_max:
            issues.append(
                CrtIssue("row_overlap", f"Rows {earlier.label!r} and {later.label!r} overlap; the first listed wins")
            )
        elif later.die_value_min > earlier.die_value_max + 1:
            issues.append(
                CrtIssue(
                    "row_gap",
                    f"No row covers rolls {earlier.die_value_max + 1}..{later.die_value_min - 1}",
                )
            )

    for row_index, cells in enumerate(crt.outcomes):
        for column_index, outcome in enumerate(cells):
            if not outcome.label.strip():
                issues.append(CrtIssue("blank_outcome", f"Outcome at row {row_index}, column {column_index} is blank"))

    return issues
