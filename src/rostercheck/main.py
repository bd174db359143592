from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from .app.container import build_container
from .app.orchestrator import Orchestrator
from .config import Config, load_config
from .types import ConfigOverrides


def _make_orchestrator(cfg: Config) -> Orchestrator:
    container = build_container("rostercheck", cfg)
    return Orchestrator(
        container=container, cfg=cfg, logger=logging.getLogger("rostercheck.main")
    )


def run_pipeline(inputs: Sequence[Path], out_dir: Path, cfg: Config | None = None) -> int:
    orch = _make_orchestrator(cfg or Config())
    return orch.run(inputs, out_dir)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Classify and validate client, worker and task tables"
    )
    ap.add_argument(
        "--input",
        required=True,
        nargs="+",
        type=Path,
        help="One or more CSV/XLSX files (clients, workers, tasks)",
    )
    ap.add_argument(
        "--out", required=False, type=Path, default=Path("runs"), help="Output base dir"
    )
    ap.add_argument("--config", required=False, type=Path, help="Optional YAML config file")
    ap.add_argument(
        "--profiles", required=False, type=Path, help="Optional entity profiles YAML"
    )
    ap.add_argument(
        "--workers", required=False, type=int, help="Tables processed in parallel"
    )
    ap.add_argument(
        "--deadline",
        required=False,
        type=float,
        help="Abort the run after this many seconds",
    )
    ap.add_argument(
        "--stage",
        required=False,
        choices=["full", "classify"],
        default=None,
        help="Pipeline stage: 'classify' to infer types and mappings only, or 'full' (default)",
    )
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    overrides: ConfigOverrides = {}
    # Optional overrides only when provided
    if args.workers is not None:
        overrides["max_workers"] = int(args.workers)
    if args.deadline is not None:
        overrides["deadline_seconds"] = float(args.deadline)
    if args.profiles is not None:
        overrides["profiles_path"] = str(args.profiles)
    if args.stage:
        overrides["pipeline_stage"] = args.stage
    cfg = load_config(args.config, overrides=overrides)

    try:
        return run_pipeline(args.input, args.out, cfg)
    except Exception as exc:  # pragma: no cover
        logging.basicConfig(level=logging.ERROR)
        logging.exception("Unhandled exception: %s", exc)
        return 3


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
