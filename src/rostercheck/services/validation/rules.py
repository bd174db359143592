from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from ...config import Config
from ...domain.table import Table, cell_text, is_blank, to_number
from ...utils.normalize import normalize_header
from .formats import PhaseFormat, detect_phase_format, phase_error


class ColumnKind(str, Enum):
    PRIORITY = "priority"
    PHASES = "phases"
    SKILLS = "skills"
    DURATION = "duration"
    CONCURRENCY = "concurrency"
    JSON = "json"
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"
    IDENTIFIER = "identifier"


_ENTITY_WORDS = ("client", "worker", "task")

# (kind, letters-only fragments; any one present selects the kind)
_KIND_FRAGMENTS: tuple[tuple[ColumnKind, tuple[str, ...]], ...] = (
    (ColumnKind.PRIORITY, ("priority",)),
    (ColumnKind.PHASES, ("availableslots", "preferredphases", "phases")),
    (ColumnKind.SKILLS, ("skills",)),
    (ColumnKind.DURATION, ("duration",)),
    (ColumnKind.CONCURRENCY, ("maxconcurrent",)),
    (ColumnKind.JSON, ("json", "attributes")),
    (ColumnKind.EMAIL, ("email",)),
    (ColumnKind.PHONE, ("phone",)),
    (ColumnKind.URL, ("url", "website")),
)


def column_kinds(header: str) -> frozenset[ColumnKind]:
    """Semantic checks that apply to a column, inferred from its name."""
    h = normalize_header(header)
    kinds = {kind for kind, frags in _KIND_FRAGMENTS if any(f in h for f in frags)}
    # 'ClientID' / 'Worker_Id' but not list columns such as 'RequestedTaskIDs'
    if h.endswith("id") and any(w in h for w in _ENTITY_WORDS):
        kinds.add(ColumnKind.IDENTIFIER)
    return frozenset(kinds)


@dataclass(frozen=True)
class ColumnStats:
    """Data-derived facts computed once per column before row checks."""

    header: str
    kinds: frozenset[ColumnKind]
    blank_rate: float
    required: bool
    numeric_min: Optional[float]
    numeric_max: Optional[float]
    min_positive: Optional[float]
    dominant_phase_format: Optional[PhaseFormat]


def dominant_format(values: Sequence[object]) -> Optional[PhaseFormat]:
    """Most frequent valid phase encoding; ties go to the first one seen."""
    counts: Counter[PhaseFormat] = Counter()
    for v in values:
        if is_blank(v):
            continue
        text = cell_text(v)
        if phase_error(text) is not None:
            continue
        counts[detect_phase_format(text)] += 1
    if not counts:
        return None
    # Counter preserves insertion order, and max() keeps the first maximum
    return max(counts, key=lambda f: counts[f])


def column_stats(table: Table, header: str, cfg: Config) -> ColumnStats:
    values = table.column(header)
    n = len(values)
    blanks = sum(1 for v in values if is_blank(v))
    blank_rate = blanks / n if n else 1.0
    numbers = [x for x in (to_number(v) for v in values) if x is not None]
    positives = [x for x in numbers if x > 0]
    kinds = column_kinds(header)
    return ColumnStats(
        header=header,
        kinds=kinds,
        blank_rate=blank_rate,
        required=n > 0 and blank_rate < cfg.required_null_rate,
        numeric_min=min(numbers) if numbers else None,
        numeric_max=max(numbers) if numbers else None,
        min_positive=min(positives) if positives else None,
        dominant_phase_format=dominant_format(values) if ColumnKind.PHASES in kinds else None,
    )


def priority_bounds(stats: ColumnStats, cfg: Config) -> tuple[float, float]:
    if cfg.priority_bounds is not None:
        return cfg.priority_bounds
    if stats.numeric_min is None or stats.numeric_max is None:
        return (1.0, 5.0)
    return (stats.numeric_min, stats.numeric_max)


def minimum_duration(stats: ColumnStats) -> float:
    return stats.min_positive if stats.min_positive is not None else 1.0
