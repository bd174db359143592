from __future__ import annotations

from typing import Optional

import pandas as pd

from ...config import Config
from ...domain.errors import IssueLocation, IssueType, Severity, ValidationIssue
from ...domain.table import Table, is_blank, to_number


def iqr_fences(values: list[float], multiplier: float) -> tuple[float, float]:
    """Box-plot fences from linearly interpolated quartiles."""
    s = pd.Series(values, dtype="float64")
    q1 = float(s.quantile(0.25, interpolation="linear"))
    q3 = float(s.quantile(0.75, interpolation="linear"))
    iqr = q3 - q1
    return q1 - multiplier * iqr, q3 + multiplier * iqr


def numeric_cells(table: Table, header: str) -> list[tuple[int, float]]:
    out: list[tuple[int, float]] = []
    for i, value in table.iter_cells(header):
        if is_blank(value):
            continue
        num = to_number(value)
        if num is not None:
            out.append((i, num))
    return out


def column_fences(
    table: Table, header: str, cfg: Config
) -> Optional[tuple[list[tuple[int, float]], float, float]]:
    """Numeric cells plus fences, or None when the column is not numeric enough."""
    cells = numeric_cells(table, header)
    if len(cells) <= len(table) * cfg.outlier_numeric_share:
        return None
    if len(cells) < cfg.outlier_min_values:
        return None
    lo, hi = iqr_fences([v for _, v in cells], cfg.iqr_multiplier)
    return cells, lo, hi


def detect_outliers(table: Table, cfg: Config) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for header in table.headers:
        found = column_fences(table, header, cfg)
        if found is None:
            continue
        cells, lo, hi = found
        for i, num in cells:
            if num < lo or num > hi:
                issues.append(
                    ValidationIssue(
                        severity=Severity.INFO,
                        type=IssueType.OUTLIER,
                        message=(
                            f"Potential outlier in {header}: {num:g} "
                            f"(typical range: {lo:.2f} - {hi:.2f})"
                        ),
                        location=IssueLocation(table.name, i, header),
                        value=table.rows[i].get(header),
                    )
                )
    return issues
