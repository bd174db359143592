from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from ..types import ResultDict, SummaryCounts
from .errors import Severity, ValidationIssue


class EntityType(str, Enum):
    CLIENT = "client"
    WORKER = "worker"
    TASK = "task"
    UNKNOWN = "unknown"


KNOWN_ENTITIES: tuple[EntityType, ...] = (EntityType.CLIENT, EntityType.WORKER, EntityType.TASK)


@dataclass(frozen=True)
class ClassificationResult:
    entity_type: EntityType
    confidence: float
    # Normalized per-profile scores, kept for inspection
    scores: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class HeaderMapping:
    """Raw header -> canonical field, total over the table's headers.

    Unresolved headers map to themselves. No two raw headers share a target.
    """

    entity_type: EntityType
    assignments: Mapping[str, str]
    scores: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def identity(cls, headers: Iterable[str]) -> "HeaderMapping":
        return cls(
            entity_type=EntityType.UNKNOWN,
            assignments=MappingProxyType({h: h for h in headers}),
        )

    def target(self, header: str) -> str:
        return self.assignments.get(header, header)

    def canonical_headers(self) -> tuple[str, ...]:
        return tuple(self.assignments.values())

    def mapped(self) -> dict[str, str]:
        """Only the headers that were renamed."""
        return {k: v for k, v in self.assignments.items() if k != v}

    def source_of(self, canonical: str) -> Optional[str]:
        for raw, target in self.assignments.items():
            if target == canonical:
                return raw
        return None


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()
    info: tuple[ValidationIssue, ...] = ()

    @classmethod
    def from_issues(cls, issues: Iterable[ValidationIssue]) -> "ValidationResult":
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []
        info: list[ValidationIssue] = []
        for issue in issues:
            if issue.severity is Severity.ERROR:
                errors.append(issue)
            elif issue.severity is Severity.WARNING:
                warnings.append(issue)
            else:
                info.append(issue)
        return cls(errors=tuple(errors), warnings=tuple(warnings), info=tuple(info))

    @property
    def summary(self) -> SummaryCounts:
        return {
            "totalIssues": len(self.errors) + len(self.warnings) + len(self.info),
            "errorCount": len(self.errors),
            "warningCount": len(self.warnings),
            "infoCount": len(self.info),
        }

    @property
    def issues(self) -> tuple[ValidationIssue, ...]:
        return self.errors + self.warnings + self.info

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> ResultDict:
        return {
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
            "info": [i.to_dict() for i in self.info],
            "summary": self.summary,
        }
