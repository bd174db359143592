from __future__ import annotations

from dataclasses import dataclass

from ...domain.errors import IssueLocation, IssueType, Severity, ValidationIssue
from ...domain.table import Table, cell_text, is_blank


@dataclass(frozen=True)
class DuplicateGroup:
    value: str
    rows: tuple[int, ...]


def find_duplicates(table: Table, header: str) -> list[DuplicateGroup]:
    """Non-blank values that occur on more than one row, in first-seen order."""
    seen: dict[str, list[int]] = {}
    for i, value in table.iter_cells(header):
        if is_blank(value):
            continue
        seen.setdefault(cell_text(value).strip(), []).append(i)
    return [DuplicateGroup(v, tuple(rows)) for v, rows in seen.items() if len(rows) > 1]


def duplicate_issues(table: Table, header: str) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for group in find_duplicates(table, header):
        for i in group.rows:
            issues.append(
                ValidationIssue(
                    severity=Severity.ERROR,
                    type=IssueType.DUPLICATE_ID,
                    message=(
                        f"Duplicate {header}: {group.value} "
                        f"(found {len(group.rows)} times)"
                    ),
                    location=IssueLocation(table.name, i, header),
                    value=table.rows[i].get(header),
                )
            )
    return issues
