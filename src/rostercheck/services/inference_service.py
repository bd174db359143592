from __future__ import annotations

import logging

from ..config import Config
from ..domain.errors import ValidationIssue
from ..domain.profiles import ProfileSet
from ..domain.results import ClassificationResult, HeaderMapping
from ..domain.table import Table
from .inference.classifier import classify
from .inference.header_mapper import map_headers
from .inference.review import review_mapping


class InferenceService:
    """Classifies tables and maps their headers onto canonical fields."""

    def __init__(self, logger: logging.Logger, cfg: Config, profiles: ProfileSet) -> None:
        self.logger = logger
        self.cfg = cfg
        self.profiles = profiles

    def classify(self, table: Table) -> ClassificationResult:
        result = classify(table, self.cfg, self.profiles)
        self.logger.info(
            f"'{table.name}' looks like {result.entity_type.value} data "
            f"(confidence {result.confidence:.2f})",
            extra={
                "table": table.name,
                "entity_type": result.entity_type.value,
                "confidence": round(result.confidence, 4),
            },
        )
        return result

    def map_headers(self, table: Table, classification: ClassificationResult) -> HeaderMapping:
        mapping = map_headers(table.headers, classification.entity_type, self.cfg, self.profiles)
        renamed = mapping.mapped()
        self.logger.info(
            f"'{table.name}': {len(mapping.scores)} of {len(table.headers)} headers mapped",
            extra={"table": table.name, "mapped": len(mapping.scores), "renamed": renamed},
        )
        return mapping

    def review(
        self, table: Table, mapping: HeaderMapping, classification: ClassificationResult
    ) -> list[ValidationIssue]:
        issues = review_mapping(
            table, mapping, classification.entity_type, self.cfg, self.profiles
        )
        for issue in issues[: self.cfg.max_issues_in_log]:
            self.logger.warning(
                f"'{table.name}': {issue.message}",
                extra={"table": table.name, "issue_type": issue.type.value},
            )
        return issues
