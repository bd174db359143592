from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..types import IssueDict, LocationDict


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class IssueType(str, Enum):
    # Per-table field checks
    MISSING_REQUIRED = "missing_required"
    INVALID_DATA_TYPE = "invalid_data_type"
    OUT_OF_RANGE = "out_of_range"
    INVALID_PHASE_FORMAT = "invalid_phase_format"
    FORMAT_INCONSISTENCY = "format_inconsistency"
    INVALID_SKILLS_FORMAT = "invalid_skills_format"
    MALFORMED_JSON = "malformed_json"
    INVALID_EMAIL = "invalid_email"
    INVALID_PHONE = "invalid_phone"
    INVALID_URL = "invalid_url"
    DUPLICATE_ID = "duplicate_id"
    OUTLIER = "outlier"
    # Mapping review
    MISSING_REQUIRED_FIELD = "missing_required_field"
    UNEXPECTED_ID_FORMAT = "unexpected_id_format"
    UNCLASSIFIED_TABLE = "unclassified_table"
    # Cross-file checks
    MISSING_REQUIRED_FILES = "missing_required_files"
    INVALID_TASK_REFERENCE = "invalid_task_reference"
    SKILL_COVERAGE_GAP = "skill_coverage_gap"
    GROUP_MISMATCH = "group_mismatch"
    INSUFFICIENT_WORKERS = "insufficient_workers"
    PHASE_AVAILABILITY = "phase_availability"
    TASK_INVENTORY = "task_inventory"


@dataclass(frozen=True)
class IssueLocation:
    table: str
    row: int
    column: str

    def to_dict(self) -> LocationDict:
        return {"table": self.table, "row": self.row, "column": self.column}


@dataclass(frozen=True)
class ValidationIssue:
    severity: Severity
    type: IssueType
    message: str
    location: Optional[IssueLocation] = None
    value: object = None
    fixable: bool = False
    related_tables: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> IssueDict:
        return {
            "severity": self.severity.value,
            "type": self.type.value,
            "message": self.message,
            "location": None if self.location is None else self.location.to_dict(),
            "value": self.value,
            "fixable": self.fixable,
            "related_tables": list(self.related_tables),
        }


class RostercheckError(Exception):
    """Base class for caller/configuration errors (never raised for bad cell data)."""


class TableShapeError(RostercheckError):
    pass


class ProfileConfigError(RostercheckError):
    pass


class DeadlineExceeded(RostercheckError):
    def __init__(self, stage: str, budget_seconds: float) -> None:
        super().__init__(f"Deadline of {budget_seconds:.1f}s exceeded during {stage}")
        self.stage = stage
        self.budget_seconds = budget_seconds
