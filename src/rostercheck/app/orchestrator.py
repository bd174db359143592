from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..config import Config
from ..domain.errors import RostercheckError
from ..domain.table import Table
from ..services.output.manifest_writer import write_manifest
from ..services.output.report_writer import write_report
from .container import Container
from .engine import Engine
from .run_manager import start_run, utc_stamp


@dataclass(frozen=True)
class Orchestrator:
    container: Container
    cfg: Config
    logger: logging.Logger

    def _load(self, inputs: Sequence[Path]) -> list[Table]:
        tables: list[Table] = []
        skipped: list[tuple[str, str]] = []
        for path in inputs:
            try:
                tables.extend(self.container.io.read_tables([path]))
            except (OSError, ValueError, RostercheckError) as e:
                skipped.append((path.name, str(e)))
        if skipped:
            self.logger.warning(f"Skipped {len(skipped)} inputs: {[n for n, _ in skipped]}")
            for name, reason in skipped:
                self.logger.warning(f"  - {name}: {reason}")
        return tables

    def run(self, inputs: Sequence[Path], out_dir: Path) -> int:
        """Read inputs, run the engine, write report and manifest.

        Returns 0 when no errors were found, 1 when the data has errors or
        nothing could be read, 3 when the run itself failed.
        """
        run_ctx = start_run(out_dir)
        try:
            tables = self._load(inputs)
            if not tables:
                self.logger.error("No readable input tables")
                return 1

            engine = Engine(
                container=self.container, cfg=self.cfg, logger=self.logger.getChild("engine")
            )
            report = engine.run(tables)
            write_report(report, run_ctx.run_dir, self.logger)
            write_manifest(
                run_dir=run_ctx.run_dir,
                input_paths=inputs,
                started_at=run_ctx.started_at,
                finished_at=utc_stamp(),
                cfg=self.cfg,
                logger=self.logger,
            )

            if report.has_errors:
                self.logger.warning(
                    f"Pipeline finished with {len(report.aggregate.errors)} errors",
                    extra={"run_dir": str(run_ctx.run_dir)},
                )
                return 1
            self.logger.info("Pipeline completed successfully")
            return 0

        except Exception as e:
            self.logger.error(f"Pipeline failed: {e}", exc_info=True)
            return 3
