from __future__ import annotations

import logging
from typing import Mapping, Sequence

from ..config import Config
from ..domain.profiles import ProfileSet
from ..domain.results import EntityType, ValidationResult
from ..domain.table import Table
from .fixes import FixSuggestion, suggest_fixes
from .profiling import TableProfile, profile_table
from .validation.cross_file import validate_cross_file
from .validation.fields import validate_table


def _log_result(logger: logging.Logger, label: str, result: ValidationResult, limit: int) -> None:
    summary = result.summary
    logger.info(
        f"{label}: {summary['errorCount']} errors, {summary['warningCount']} warnings, "
        f"{summary['infoCount']} info",
        extra={"scope": label, **summary},
    )
    # Show first few blocking errors
    for issue in result.errors[:limit]:
        where = ""
        if issue.location is not None:
            where = f" (row {issue.location.row}, {issue.location.column})"
        logger.warning(
            f"  {issue.type.value}{where}: {issue.message}",
            extra={"scope": label, "issue_type": issue.type.value},
        )


class ValidateService:
    """Per-table field checks, column profiling and fix suggestions."""

    def __init__(self, logger: logging.Logger, cfg: Config) -> None:
        self.logger = logger
        self.cfg = cfg

    def validate_table(self, table: Table) -> ValidationResult:
        result = validate_table(table, self.cfg)
        _log_result(self.logger, f"'{table.name}'", result, self.cfg.max_issues_in_log)
        return result

    def profile_table(self, table: Table) -> TableProfile:
        return profile_table(table)

    def suggest_fixes(self, table: Table, result: ValidationResult) -> list[FixSuggestion]:
        fixes = suggest_fixes(table, result, self.cfg)
        if fixes:
            self.logger.info(
                f"'{table.name}': {len(fixes)} fix suggestions",
                extra={"table": table.name, "fixes": len(fixes)},
            )
        return fixes


class CrossFileService:
    def __init__(self, logger: logging.Logger, cfg: Config, profiles: ProfileSet) -> None:
        self.logger = logger
        self.cfg = cfg
        self.profiles = profiles

    def validate(
        self, tables: Sequence[Table], roles: Mapping[str, EntityType]
    ) -> ValidationResult:
        self.logger.info("Running cross-file checks", extra={"tables": len(tables)})
        result = validate_cross_file(tables, roles, self.cfg, self.profiles)
        _log_result(self.logger, "cross-file", result, self.cfg.max_issues_in_log)
        return result
