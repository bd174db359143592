from __future__ import annotations

import logging
from typing import Optional

from ...config import Config
from ...domain.errors import IssueLocation, IssueType, Severity, ValidationIssue
from ...domain.results import ValidationResult
from ...domain.table import Table, cell_text, is_blank, to_number
from ...types import CellValue
from .duplicates import duplicate_issues
from .formats import (
    detect_phase_format,
    is_valid_email,
    is_valid_phone,
    is_valid_url,
    json_parses,
    looks_like_json,
    phase_error,
    skills_error,
)
from .outliers import detect_outliers
from .rules import ColumnKind, ColumnStats, column_stats, minimum_duration, priority_bounds

logger = logging.getLogger(__name__)


class _CellChecker:
    """Runs every applicable rule on one cell and collects issues."""

    def __init__(self, table: Table, cfg: Config) -> None:
        self.table = table
        self.cfg = cfg
        self.issues: list[ValidationIssue] = []

    def _add(
        self,
        severity: Severity,
        kind: IssueType,
        message: str,
        row: int,
        column: str,
        value: CellValue,
        fixable: bool = True,
    ) -> None:
        self.issues.append(
            ValidationIssue(
                severity=severity,
                type=kind,
                message=message,
                location=IssueLocation(self.table.name, row, column),
                value=value,
                fixable=fixable,
            )
        )

    def check(self, row: int, stats: ColumnStats, value: CellValue) -> None:
        col = stats.header
        if is_blank(value):
            if stats.required:
                self._add(
                    Severity.ERROR,
                    IssueType.MISSING_REQUIRED,
                    f"Missing required value for {col}",
                    row,
                    col,
                    value,
                )
            return

        text = cell_text(value)
        kinds = stats.kinds

        if ColumnKind.PRIORITY in kinds:
            self._check_priority(row, stats, value)
        if ColumnKind.PHASES in kinds:
            self._check_phases(row, stats, value, text)
        if ColumnKind.SKILLS in kinds:
            err = skills_error(text)
            if err is not None:
                self._add(
                    Severity.ERROR,
                    IssueType.INVALID_SKILLS_FORMAT,
                    f"Invalid skills format in {col}: {err}",
                    row,
                    col,
                    value,
                )
        if ColumnKind.DURATION in kinds:
            num = to_number(value)
            floor = minimum_duration(stats)
            if num is None:
                self._add(
                    Severity.ERROR,
                    IssueType.INVALID_DATA_TYPE,
                    f"{col} must be a number, got: {text}",
                    row,
                    col,
                    value,
                )
            elif num < floor:
                self._add(
                    Severity.ERROR,
                    IssueType.OUT_OF_RANGE,
                    f"{col} {text} must be >= {floor:g} (based on data analysis)",
                    row,
                    col,
                    value,
                )
        if ColumnKind.CONCURRENCY in kinds:
            num = to_number(value)
            if num is None:
                self._add(
                    Severity.ERROR,
                    IssueType.INVALID_DATA_TYPE,
                    f"{col} must be a number, got: {text}",
                    row,
                    col,
                    value,
                )
            elif num < 1:
                self._add(
                    Severity.ERROR,
                    IssueType.OUT_OF_RANGE,
                    f"{col} must be >= 1, got: {text}",
                    row,
                    col,
                    value,
                )
        if ColumnKind.JSON in kinds and looks_like_json(text) and not json_parses(text):
            self._add(
                Severity.ERROR,
                IssueType.MALFORMED_JSON,
                f"Malformed JSON in {col}: {text[:50]}",
                row,
                col,
                value,
            )
        if ColumnKind.EMAIL in kinds and not is_valid_email(text):
            self._add(
                Severity.ERROR,
                IssueType.INVALID_EMAIL,
                f"Invalid email format: {text}",
                row,
                col,
                value,
            )
        if ColumnKind.PHONE in kinds and not is_valid_phone(text):
            self._add(
                Severity.WARNING,
                IssueType.INVALID_PHONE,
                f"Invalid phone number format: {text}",
                row,
                col,
                value,
            )
        if ColumnKind.URL in kinds and not is_valid_url(text):
            self._add(
                Severity.WARNING,
                IssueType.INVALID_URL,
                f"Invalid URL format: {text}",
                row,
                col,
                value,
            )

    def _check_priority(self, row: int, stats: ColumnStats, value: CellValue) -> None:
        col = stats.header
        num = to_number(value)
        if num is None:
            self._add(
                Severity.ERROR,
                IssueType.INVALID_DATA_TYPE,
                f"{col} must be a number, got: {cell_text(value)}",
                row,
                col,
                value,
            )
            return
        lo, hi = priority_bounds(stats, self.cfg)
        if num < lo or num > hi:
            self._add(
                Severity.ERROR,
                IssueType.OUT_OF_RANGE,
                f"{col} {cell_text(value)} out of range ({lo:g}-{hi:g})",
                row,
                col,
                value,
            )

    def _check_phases(self, row: int, stats: ColumnStats, value: CellValue, text: str) -> None:
        col = stats.header
        err = phase_error(text)
        if err is not None:
            self._add(
                Severity.ERROR,
                IssueType.INVALID_PHASE_FORMAT,
                (
                    f"Invalid format in {col}: {err}. Expected: JSON array [1,2,3], "
                    "range 1-3, or comma-separated 1,2,3"
                ),
                row,
                col,
                value,
            )
            return
        fmt = detect_phase_format(text)
        dominant = stats.dominant_phase_format
        if dominant is not None and fmt is not dominant:
            self._add(
                Severity.WARNING,
                IssueType.FORMAT_INCONSISTENCY,
                (
                    f"Inconsistent format in {col}: {fmt.value} where the column "
                    f"mostly uses {dominant.value}"
                ),
                row,
                col,
                value,
            )


def validate_table(table: Table, config: Optional[Config] = None) -> ValidationResult:
    """Per-column checks on one canonical table. Never raises on cell data."""
    cfg = config or Config()
    stats = [column_stats(table, h, cfg) for h in table.headers]

    issues: list[ValidationIssue] = []
    for st in stats:
        if ColumnKind.IDENTIFIER in st.kinds:
            issues.extend(duplicate_issues(table, st.header))

    checker = _CellChecker(table, cfg)
    for i, row in enumerate(table.rows):
        for st in stats:
            checker.check(i, st, row.get(st.header))
    issues.extend(checker.issues)
    issues.extend(detect_outliers(table, cfg))

    result = ValidationResult.from_issues(issues)
    logger.debug("Validated table", extra={"table": table.name, **result.summary})
    return result
