from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence

from ..config import Config
from ..domain.errors import DeadlineExceeded, TableShapeError
from ..domain.results import KNOWN_ENTITIES, ValidationResult
from ..domain.table import Table
from ..services.aggregate.report import EngineReport, TableReport, aggregate
from ..services.validation.roles import resolve_roles
from .container import Container


class Deadline:
    """Wall-clock budget checked between pipeline stages, never mid-table."""

    def __init__(self, budget_seconds: Optional[float]) -> None:
        self.budget = budget_seconds
        self.started = time.monotonic()

    def check(self, stage: str) -> None:
        if self.budget is None:
            return
        if time.monotonic() - self.started > self.budget:
            raise DeadlineExceeded(stage, self.budget)


@dataclass(frozen=True)
class _Processed:
    canonical: Table
    report: TableReport


@dataclass(frozen=True)
class Engine:
    container: Container
    cfg: Config
    logger: logging.Logger

    def _process_table(self, table: Table, deadline: Deadline) -> _Processed:
        deadline.check(f"table '{table.name}'")
        c = self.container
        classification = c.inference.classify(table)
        mapping = c.inference.map_headers(table, classification)
        canonical = c.transform.apply_mapping(table, mapping)
        review = tuple(c.inference.review(canonical, mapping, classification))

        if self.cfg.pipeline_stage == "classify":
            report = TableReport(
                name=table.name,
                classification=classification,
                mapping=mapping,
                headers=canonical.headers,
                rows=len(canonical),
                review=review,
            )
            return _Processed(canonical, report)

        result = c.validate.validate_table(canonical)
        report = TableReport(
            name=table.name,
            classification=classification,
            mapping=mapping,
            headers=canonical.headers,
            rows=len(canonical),
            review=review,
            result=result,
            profile=c.validate.profile_table(canonical),
            fixes=tuple(c.validate.suggest_fixes(canonical, result)),
        )
        return _Processed(canonical, report)

    def _fan_out(self, tables: Sequence[Table], deadline: Deadline) -> list[_Processed]:
        workers = max(1, min(self.cfg.max_workers, len(tables)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rostercheck") as pool:
            futures: list[Future[_Processed]] = [
                pool.submit(self._process_table, t, deadline) for t in tables
            ]
            try:
                # Input order is kept regardless of completion order
                return [f.result() for f in futures]
            except BaseException:
                for f in futures:
                    f.cancel()
                raise

    def run(self, tables: Sequence[Table]) -> EngineReport:
        names = [t.name for t in tables]
        if len(set(names)) != len(names):
            raise TableShapeError(f"Table names must be unique, got {names}")

        deadline = Deadline(self.cfg.deadline_seconds)
        self.logger.info(
            f"Processing {len(tables)} tables",
            extra={"tables": names, "workers": self.cfg.max_workers},
        )
        processed = self._fan_out(tables, deadline)
        reports = tuple(p.report for p in processed)
        canonical = [p.canonical for p in processed]
        classified = {r.name: r.entity_type for r in reports}

        # Barrier: every table is canonical before cross-file checks start
        deadline.check("cross-file validation")
        resolved = resolve_roles(canonical, self.container.profiles, classified)
        if self.cfg.pipeline_stage == "classify":
            cross = ValidationResult()
        else:
            cross = self.container.cross_file.validate(canonical, classified)

        deadline.check("aggregation")
        total = aggregate([r.local_result() for r in reports], cross)
        roles: dict[str, Optional[str]] = {}
        for role in KNOWN_ENTITIES:
            match = resolved[role]
            roles[role.value] = match.name if match is not None else None
        summary = total.summary
        self.logger.info(
            f"Done: {summary['errorCount']} errors, {summary['warningCount']} warnings, "
            f"{summary['infoCount']} info",
            extra={"roles": roles, **summary},
        )
        return EngineReport(tables=reports, roles=roles, cross_file=cross, aggregate=total)
