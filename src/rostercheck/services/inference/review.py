from __future__ import annotations

from typing import Optional

from ...config import Config
from ...domain.errors import IssueLocation, IssueType, Severity, ValidationIssue
from ...domain.profiles import ProfileSet, load_profiles
from ...domain.results import EntityType, HeaderMapping
from ...domain.table import Table, cell_text, is_blank


def review_mapping(
    table: Table,
    mapping: HeaderMapping,
    entity_type: EntityType,
    config: Optional[Config] = None,
    profiles: Optional[ProfileSet] = None,
) -> list[ValidationIssue]:
    """Post-mapping checks on a canonical table.

    Flags required fields nobody mapped to and sampled IDs of an unexpected shape.
    """
    if entity_type is EntityType.UNKNOWN:
        return [
            ValidationIssue(
                severity=Severity.WARNING,
                type=IssueType.UNCLASSIFIED_TABLE,
                message=(
                    f"Could not determine whether '{table.name}' holds clients, "
                    "workers or tasks; headers were left unchanged"
                ),
                related_tables=(table.name,),
            )
        ]

    cfg = config or Config()
    profile = (profiles or load_profiles(cfg.profiles_path)).get(entity_type)
    targets = set(mapping.assignments.values())
    issues: list[ValidationIssue] = []

    for field in profile.required_fields:
        if field not in targets:
            issues.append(
                ValidationIssue(
                    severity=Severity.WARNING,
                    type=IssueType.MISSING_REQUIRED_FIELD,
                    message=f"Missing required field {field} for {entity_type.value} data",
                    related_tables=(table.name,),
                )
            )

    id_col = profile.id_field
    if id_col in targets and id_col in table.headers:
        for i, value in table.iter_cells(id_col):
            if i >= cfg.sample_rows:
                break
            if is_blank(value):
                continue
            text = cell_text(value).strip()
            if not profile.expected_id.search(text):
                issues.append(
                    ValidationIssue(
                        severity=Severity.INFO,
                        type=IssueType.UNEXPECTED_ID_FORMAT,
                        message=(
                            f"ID '{text}' does not follow the usual "
                            f"{profile.expected_id.pattern} shape"
                        ),
                        location=IssueLocation(table.name, i, id_col),
                        value=value,
                    )
                )
    return issues
