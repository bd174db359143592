from __future__ import annotations

import json
import re
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Final, Optional

from ..config import Config
from ..domain.errors import IssueType, Severity, ValidationIssue
from ..domain.results import ValidationResult
from ..domain.table import Table, cell_text, is_blank, to_number
from ..types import CellValue, FixDict
from ..utils.normalize import normalize_header
from .validation.formats import PhaseFormat, json_parses, parse_phases, small_int
from .validation.rules import (
    ColumnKind,
    column_stats,
    dominant_format,
    minimum_duration,
    priority_bounds,
)

_BARE_KEY: Final = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)\s*:")
_NON_NUMERIC: Final = re.compile(r"[^0-9.\-]")
_DIGITS: Final = re.compile(r"\d+")
_ID_SHAPE: Final = re.compile(r"^([A-Za-z]*)(\d+)$")

# (replacement, description, confidence)
Proposal = tuple[CellValue, str, float]


@dataclass(frozen=True)
class FixSuggestion:
    """A proposed replacement for one cell. Never applied automatically."""

    row: int
    column: str
    before: CellValue
    after: CellValue
    description: str
    confidence: float
    severity: Severity

    def to_dict(self) -> FixDict:
        return {
            "row": self.row,
            "column": self.column,
            "before": self.before,
            "after": self.after,
            "description": self.description,
            "confidence": self.confidence,
            "severity": self.severity.value,
        }


def _as_number(num: float) -> CellValue:
    return int(num) if float(num).is_integer() else num


def default_value(table: Table, column: str) -> CellValue:
    """Fill value for a blank required cell."""
    h = normalize_header(column)
    values = [v for v in table.column(column) if not is_blank(v)]
    if h.endswith("id"):
        # next free id in the column's own prefix style, e.g. W7 -> W8
        parts: list[tuple[str, int]] = []
        for v in values:
            m = _ID_SHAPE.match(cell_text(v).strip())
            number = small_int(m.group(2)) if m else None
            if m is not None and number is not None:
                parts.append((m.group(1), number))
        prefix = Counter(p for p, _ in parts).most_common(1)[0][0] if parts else ""
        highest = max((n for p, n in parts if p == prefix), default=0)
        return f"{prefix}{highest + 1}"
    if values:
        counts = Counter(cell_text(v).strip() for v in values)
        # most_common keeps first-seen order among equal counts
        return counts.most_common(1)[0][0]
    if "email" in h:
        return "user@example.com"
    if "name" in h:
        return "Unknown"
    if "phone" in h:
        return "+1-555-0000"
    return "N/A"


def fix_email(text: str) -> str:
    fixed = re.sub(r"\s+", "", text.lower())
    if "@" not in fixed:
        fixed += "@example.com"
    elif "." not in fixed.split("@", 1)[1]:
        fixed += ".com"
    return fixed


def fix_json(text: str) -> str:
    fixed = text.strip().replace("'", '"')
    fixed = _BARE_KEY.sub(r'\1"\2":', fixed)
    if not fixed.startswith("{") and not fixed.startswith("["):
        fixed = "{" + fixed + "}"
    return fixed if json_parses(fixed) else "{}"


def fix_phase_format(text: str) -> str:
    phases = [small_int(d) for d in _DIGITS.findall(text)]
    return json.dumps([p for p in phases if p is not None], separators=(",", ":"))


def encode_phases(value: object, target: PhaseFormat) -> Optional[str]:
    """Re-encode a valid phase cell in another encoding, when it can be expressed."""
    try:
        phases = [int(p) for p in parse_phases(value)]
    except ValueError:
        return None
    if not phases:
        return None
    if target is PhaseFormat.JSON_ARRAY:
        return json.dumps(phases, separators=(",", ":"))
    if target is PhaseFormat.COMMA_SEPARATED:
        return ",".join(str(p) for p in phases)
    if target is PhaseFormat.RANGE:
        lo, hi = min(phases), max(phases)
        if sorted(phases) == list(range(lo, hi + 1)):
            return f"{lo}-{hi}"
        return None
    if target is PhaseFormat.SINGLE_VALUE and len(phases) == 1:
        return str(phases[0])
    return None


def fix_phone(text: str) -> Optional[str]:
    digits = "".join(_DIGITS.findall(text))
    if len(digits) == 10:
        return f"+1-{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+1-{digits[1:4]}-{digits[4:7]}-{digits[7:]}"
    return None


def fix_url(text: str) -> str:
    s = text.strip()
    if s.startswith(("http://", "https://")):
        return s
    return "https://" + s


def strip_to_number(text: str) -> Optional[CellValue]:
    num = to_number(_NON_NUMERIC.sub("", text))
    return None if num is None else _as_number(num)


class _Fixer:
    def __init__(self, table: Table, cfg: Config) -> None:
        self.table = table
        self.cfg = cfg

    def propose(self, issue: ValidationIssue) -> Optional[Proposal]:
        loc = issue.location
        if loc is None:
            return None
        col = loc.column
        value = self.table.rows[loc.row].get(col)
        text = cell_text(value)
        handler = self._handlers().get(issue.type)
        if handler is None:
            return None
        return handler(col, value, text)

    def _handlers(self) -> dict[IssueType, Callable[[str, CellValue, str], Optional[Proposal]]]:
        return {
            IssueType.MISSING_REQUIRED: self._missing,
            IssueType.INVALID_EMAIL: lambda c, v, t: (fix_email(t), "Fix email format", 0.9),
            IssueType.MALFORMED_JSON: lambda c, v, t: (fix_json(t), "Fix malformed JSON", 0.7),
            IssueType.INVALID_PHASE_FORMAT: lambda c, v, t: (
                fix_phase_format(t),
                "Convert to a JSON array of phase numbers",
                0.8,
            ),
            IssueType.FORMAT_INCONSISTENCY: self._inconsistent,
            IssueType.OUT_OF_RANGE: self._out_of_range,
            IssueType.INVALID_DATA_TYPE: self._data_type,
            IssueType.INVALID_PHONE: self._phone,
            IssueType.INVALID_URL: lambda c, v, t: (fix_url(t), "Add https:// scheme", 0.8),
        }

    def _missing(self, col: str, value: CellValue, text: str) -> Proposal:
        return (
            default_value(self.table, col),
            f"Fill missing {col} with inferred default value",
            0.6,
        )

    def _inconsistent(
        self, col: str, value: CellValue, text: str
    ) -> Optional[Proposal]:
        dominant = dominant_format(self.table.column(col))
        if dominant is None:
            return None
        after = encode_phases(value, dominant)
        if after is None:
            return None
        return after, f"Re-encode as {dominant.value} to match the column", 0.7

    def _out_of_range(
        self, col: str, value: CellValue, text: str
    ) -> Optional[Proposal]:
        num = to_number(value)
        if num is None:
            return None
        stats = column_stats(self.table, col, self.cfg)
        if ColumnKind.CONCURRENCY in stats.kinds:
            return 1, "Raise to the minimum of 1", 0.8
        if ColumnKind.DURATION in stats.kinds:
            floor = minimum_duration(stats)
            return _as_number(floor), f"Raise to the observed minimum {floor:g}", 0.8
        if ColumnKind.PRIORITY in stats.kinds:
            lo, hi = priority_bounds(stats, self.cfg)
            clamped = max(lo, min(hi, num))
            return _as_number(clamped), f"Clamp to range {lo:g}-{hi:g}", 0.8
        return None

    def _data_type(
        self, col: str, value: CellValue, text: str
    ) -> Optional[Proposal]:
        after = strip_to_number(text)
        if after is None:
            return None
        return after, "Strip non-numeric characters", 0.9

    def _phone(self, col: str, value: CellValue, text: str) -> Optional[Proposal]:
        after = fix_phone(text)
        if after is None:
            return None
        return after, "Standardize phone number format", 0.7


def suggest_fixes(
    table: Table, result: ValidationResult, config: Optional[Config] = None
) -> list[FixSuggestion]:
    """Proposals for the fixable, located issues of one table; errors before warnings."""
    fixer = _Fixer(table, config or Config())
    out: list[FixSuggestion] = []
    for issue in result.errors + result.warnings:
        loc = issue.location
        if not issue.fixable or loc is None or loc.table != table.name:
            continue
        if not 0 <= loc.row < len(table) or loc.column not in table.headers:
            continue
        proposal = fixer.propose(issue)
        if proposal is None:
            continue
        after, description, confidence = proposal
        before = table.rows[loc.row].get(loc.column)
        if after == before or cell_text(after) == cell_text(before):
            continue
        out.append(
            FixSuggestion(
                row=loc.row,
                column=loc.column,
                before=before,
                after=after,
                description=description,
                confidence=confidence,
                severity=issue.severity,
            )
        )
    return out
