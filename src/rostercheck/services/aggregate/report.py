from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from ...domain.errors import ValidationIssue
from ...domain.results import ClassificationResult, EntityType, HeaderMapping, ValidationResult
from ...types import EngineReportDict, TableReportDict
from ..fixes import FixSuggestion
from ..profiling import TableProfile


def aggregate(
    local_results: Iterable[ValidationResult], cross_result: Optional[ValidationResult] = None
) -> ValidationResult:
    """Concatenate per-table and cross-file results; no de-duplication."""
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    info: list[ValidationIssue] = []
    parts = list(local_results)
    if cross_result is not None:
        parts.append(cross_result)
    for r in parts:
        errors.extend(r.errors)
        warnings.extend(r.warnings)
        info.extend(r.info)
    return ValidationResult(errors=tuple(errors), warnings=tuple(warnings), info=tuple(info))


@dataclass(frozen=True)
class TableReport:
    name: str
    classification: ClassificationResult
    mapping: HeaderMapping
    headers: tuple[str, ...]
    rows: int
    review: tuple[ValidationIssue, ...] = ()
    result: ValidationResult = field(default_factory=ValidationResult)
    profile: Optional[TableProfile] = None
    fixes: tuple[FixSuggestion, ...] = ()

    @property
    def entity_type(self) -> EntityType:
        return self.classification.entity_type

    def local_result(self) -> ValidationResult:
        """Field checks plus mapping review, as one result."""
        return aggregate([self.result, ValidationResult.from_issues(self.review)])

    def to_dict(self) -> TableReportDict:
        return {
            "name": self.name,
            "entity_type": self.entity_type.value,
            "confidence": round(self.classification.confidence, 4),
            "scores": {k: round(v, 4) for k, v in self.classification.scores.items()},
            "mapping": dict(self.mapping.assignments),
            "headers": list(self.headers),
            "rows": self.rows,
            "review": [i.to_dict() for i in self.review],
            "result": self.result.to_dict(),
            "profile": self.profile.to_dict() if self.profile is not None else [],
            "fixes": [f.to_dict() for f in self.fixes],
        }


@dataclass(frozen=True)
class EngineReport:
    tables: tuple[TableReport, ...]
    roles: Mapping[str, Optional[str]]
    cross_file: ValidationResult
    aggregate: ValidationResult

    @property
    def has_errors(self) -> bool:
        return self.aggregate.has_errors

    def table(self, name: str) -> TableReport:
        for t in self.tables:
            if t.name == name:
                return t
        raise KeyError(name)

    def to_dict(self) -> EngineReportDict:
        return {
            "tables": [t.to_dict() for t in self.tables],
            "roles": dict(self.roles),
            "cross_file": self.cross_file.to_dict(),
            "aggregate": self.aggregate.to_dict(),
        }
