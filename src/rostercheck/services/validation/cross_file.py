from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from ...config import Config
from ...domain.errors import IssueLocation, IssueType, Severity, ValidationIssue
from ...domain.profiles import EntityProfile, ProfileSet, load_profiles
from ...domain.results import EntityType, KNOWN_ENTITIES, ValidationResult
from ...domain.table import Table, cell_text, is_blank, to_number
from ...utils.normalize import find_columns, normalize_header, normalize_id, normalize_text
from ..inference.classifier import classify
from .formats import json_parses, looks_like_json, parse_phases, parse_skills, parse_task_list
from .roles import resolve_roles

logger = logging.getLogger(__name__)

INVENTORY_PREVIEW = 5


@dataclass(frozen=True)
class IdUniverse:
    entity_type: EntityType
    source: Optional[str]
    # first-seen order, kept for reporting
    ids: tuple[str, ...]
    keys: frozenset[str]

    def __contains__(self, value: object) -> bool:
        return value in self.keys

    def __len__(self) -> int:
        return len(self.ids)


def _collect_ids(table: Table, columns: Iterable[str]) -> list[str]:
    ids: dict[str, None] = {}
    for col in columns:
        for _, value in table.iter_cells(col):
            if is_blank(value):
                continue
            key = normalize_id(cell_text(value))
            if key:
                ids.setdefault(key, None)
    return list(ids)


def extract_ids(table: Table, profile: EntityProfile) -> IdUniverse:
    """Identifier set for one role, with fallbacks for tables lacking an ID column."""
    if profile.id_field in table.headers:
        columns = [profile.id_field]
    else:
        columns = find_columns(table.headers, profile.id_aliases)
    ids = _collect_ids(table, columns)
    source = ", ".join(columns) if ids else None

    if not ids:
        # token scan over every cell, e.g. T1 / TASK12
        found: dict[str, None] = {}
        for col in table.headers:
            for _, value in table.iter_cells(col):
                if isinstance(value, str):
                    key = normalize_id(value)
                    if key and profile.id_token.search(key):
                        found.setdefault(key, None)
        ids = list(found)
        source = "*" if ids else None

    if not ids:
        first = next((h for h in table.headers if "id" in normalize_header(h)), None)
        if first is not None:
            ids = _collect_ids(table, [first])
            source = first if ids else None

    return IdUniverse(profile.entity_type, source, tuple(ids), frozenset(ids))


class _Collector:
    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []

    def add(
        self,
        severity: Severity,
        kind: IssueType,
        message: str,
        *,
        table: Optional[Table] = None,
        row: Optional[int] = None,
        column: Optional[str] = None,
        value: object = None,
        fixable: bool = False,
        related: Sequence[str] = (),
    ) -> None:
        location = None
        if table is not None and row is not None and column is not None:
            location = IssueLocation(table.name, row, column)
        self.issues.append(
            ValidationIssue(
                severity=severity,
                type=kind,
                message=message,
                location=location,
                value=value,
                fixable=fixable,
                related_tables=tuple(related),
            )
        )


def check_task_references(
    out: _Collector, clients: Table, task_ids: IdUniverse, profiles: ProfileSet, tasks: Table
) -> None:
    for col in find_columns(clients.headers, profiles.column_aliases("requested_tasks")):
        for i, value in clients.iter_cells(col):
            if is_blank(value):
                continue
            missing: list[str] = []
            for token in parse_task_list(value):
                key = normalize_id(token)
                if key and key not in task_ids and key not in missing:
                    missing.append(key)
            if missing:
                out.add(
                    Severity.ERROR,
                    IssueType.INVALID_TASK_REFERENCE,
                    f"Invalid task references: {', '.join(missing)} not found in {tasks.name}",
                    table=clients,
                    row=i,
                    column=col,
                    value=value,
                    related=(tasks.name,),
                )


def check_attribute_json(out: _Collector, table: Table, profiles: ProfileSet) -> None:
    for col in find_columns(table.headers, profiles.column_aliases("attributes")):
        for i, value in table.iter_cells(col):
            if is_blank(value):
                continue
            text = cell_text(value).strip()
            if looks_like_json(text) and not json_parses(text):
                preview = text if len(text) <= 50 else text[:50] + "..."
                out.add(
                    Severity.ERROR,
                    IssueType.MALFORMED_JSON,
                    f"Malformed JSON in {col}: {preview}",
                    table=table,
                    row=i,
                    column=col,
                    value=value,
                    fixable=True,
                    related=(table.name,),
                )


def _skill_set(row: Mapping[str, object], columns: Sequence[str]) -> set[str]:
    skills: set[str] = set()
    for col in columns:
        skills.update(normalize_text(s) for s in parse_skills(row.get(col)))
    skills.discard("")
    return skills


def check_skill_coverage(
    out: _Collector, workers: Table, tasks: Table, profiles: ProfileSet
) -> None:
    worker_cols = find_columns(workers.headers, profiles.column_aliases("worker_skills"))
    available: set[str] = set()
    for row in workers.rows:
        available |= _skill_set(row, worker_cols)

    for col in find_columns(tasks.headers, profiles.column_aliases("required_skills")):
        for i, value in tasks.iter_cells(col):
            if is_blank(value):
                continue
            gaps = [s for s in parse_skills(value) if normalize_text(s) not in available]
            if gaps:
                out.add(
                    Severity.WARNING,
                    IssueType.SKILL_COVERAGE_GAP,
                    f"Required skills not available in any worker: {', '.join(gaps)}",
                    table=tasks,
                    row=i,
                    column=col,
                    value=value,
                    related=(workers.name,),
                )


def _group_tags(table: Table, columns: Sequence[str]) -> list[str]:
    tags: list[str] = []
    for col in columns:
        for _, value in table.iter_cells(col):
            if is_blank(value):
                continue
            tag = cell_text(value).strip()
            if tag not in tags:
                tags.append(tag)
    return tags


def check_group_alignment(
    out: _Collector, clients: Table, workers: Table, profiles: ProfileSet
) -> None:
    client_cols = find_columns(clients.headers, profiles.column_aliases("client_groups"))
    worker_cols = find_columns(workers.headers, profiles.column_aliases("worker_groups"))
    if not client_cols or not worker_cols:
        return
    worker_groups = set(_group_tags(workers, worker_cols))
    for group in _group_tags(clients, client_cols):
        if group not in worker_groups:
            out.add(
                Severity.WARNING,
                IssueType.GROUP_MISMATCH,
                f"Client group '{group}' has no corresponding workers",
                related=(clients.name, workers.name),
            )


def check_capacity(out: _Collector, tasks: Table, workers: Table, profiles: ProfileSet) -> None:
    limit_cols = find_columns(tasks.headers, profiles.column_aliases("max_concurrent"))
    need_cols = find_columns(tasks.headers, profiles.column_aliases("required_skills"))
    have_cols = find_columns(workers.headers, profiles.column_aliases("worker_skills"))
    if not limit_cols or not need_cols or not have_cols:
        return
    worker_skills = [_skill_set(row, have_cols) for row in workers.rows]

    for col in limit_cols:
        for i, value in tasks.iter_cells(col):
            num = to_number(value)
            if num is None or int(num) <= 0:
                continue
            limit = int(num)
            needed = _skill_set(tasks.rows[i], need_cols)
            if not needed:
                continue
            qualified = sum(1 for skills in worker_skills if needed <= skills)
            if limit > qualified:
                out.add(
                    Severity.WARNING,
                    IssueType.INSUFFICIENT_WORKERS,
                    f"{col} ({limit}) exceeds qualified workers ({qualified})",
                    table=tasks,
                    row=i,
                    column=col,
                    value=value,
                    related=(workers.name,),
                )


def check_phase_availability(
    out: _Collector, tasks: Table, workers: Table, profiles: ProfileSet
) -> None:
    available: set[str] = set()
    for col in find_columns(workers.headers, profiles.column_aliases("worker_slots")):
        for _, value in workers.iter_cells(col):
            available.update(parse_phases(value))
    if not available:
        return

    for col in find_columns(tasks.headers, profiles.column_aliases("task_phases")):
        for i, value in tasks.iter_cells(col):
            if is_blank(value):
                continue
            absent = [p for p in parse_phases(value) if p not in available]
            if absent:
                out.add(
                    Severity.WARNING,
                    IssueType.PHASE_AVAILABILITY,
                    f"Preferred phases not available: {', '.join(absent)}",
                    table=tasks,
                    row=i,
                    column=col,
                    value=value,
                    related=(workers.name,),
                )


def validate_cross_file(
    tables: Sequence[Table],
    roles: Optional[Mapping[str, EntityType]] = None,
    config: Optional[Config] = None,
    profiles: Optional[ProfileSet] = None,
) -> ValidationResult:
    """Referential and consistency checks across the client, worker and task tables.

    ``roles`` maps table name to its classified entity type; when omitted each
    table is classified here.
    """
    cfg = config or Config()
    profs = profiles or load_profiles(cfg.profiles_path)
    if roles is None:
        roles = {t.name: classify(t, cfg, profs).entity_type for t in tables}

    resolved = resolve_roles(tables, profs, roles)
    out = _Collector()
    clients = resolved[EntityType.CLIENT]
    workers = resolved[EntityType.WORKER]
    tasks = resolved[EntityType.TASK]
    if clients is None or workers is None or tasks is None:
        missing = [r.value for r in KNOWN_ENTITIES if resolved[r] is None]
        out.add(
            Severity.ERROR,
            IssueType.MISSING_REQUIRED_FILES,
            (
                "Missing required files: expected client, worker and task tables "
                f"(unresolved: {', '.join(missing)})"
            ),
            related=tuple(t.name for t in tables),
        )
        logger.warning("Cross-file checks skipped", extra={"missing_roles": missing})
        return ValidationResult.from_issues(out.issues)

    universes = {
        EntityType.CLIENT: extract_ids(clients, profs.get(EntityType.CLIENT)),
        EntityType.WORKER: extract_ids(workers, profs.get(EntityType.WORKER)),
        EntityType.TASK: extract_ids(tasks, profs.get(EntityType.TASK)),
    }
    task_ids = universes[EntityType.TASK]
    logger.debug(
        "Extracted ID universes",
        extra={"id_counts": {r.value: len(u) for r, u in universes.items()}},
    )

    check_task_references(out, clients, task_ids, profs, tasks)
    for table in (clients, workers, tasks):
        check_attribute_json(out, table, profs)
    check_skill_coverage(out, workers, tasks, profs)
    check_group_alignment(out, clients, workers, profs)
    check_capacity(out, tasks, workers, profs)
    check_phase_availability(out, tasks, workers, profs)

    if len(task_ids):
        preview = task_ids.ids[:INVENTORY_PREVIEW]
        more = "..." if len(task_ids) > INVENTORY_PREVIEW else ""
        out.add(
            Severity.INFO,
            IssueType.TASK_INVENTORY,
            f"Found {len(task_ids)} task IDs in {tasks.name}: {', '.join(preview)}{more}",
            related=(tasks.name,),
        )
    return ValidationResult.from_issues(out.issues)
