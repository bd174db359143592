from __future__ import annotations

import logging
import platform
import sys
from pathlib import Path
from typing import Sequence

import pandas as pd
import yaml

from ...config import Config
from ...types import (
    Manifest,
    ManifestEnvironment,
    ManifestInputsEntry,
    ManifestParameters,
)
from .utils import sha256_file


def build_manifest(
    *,
    input_paths: Sequence[Path],
    started_at: str,
    finished_at: str,
    cfg: Config,
) -> Manifest:
    inputs: list[ManifestInputsEntry] = [
        {"path": str(p), "sha256": sha256_file(p)} for p in input_paths if p.exists()
    ]

    params: ManifestParameters = {
        "classification_threshold": cfg.classification_threshold,
        "mapping_threshold": cfg.mapping_threshold,
        "iqr_multiplier": cfg.iqr_multiplier,
        "required_null_rate": cfg.required_null_rate,
        "max_workers": cfg.max_workers,
        "pipeline_stage": cfg.pipeline_stage,
    }

    env: ManifestEnvironment = {
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "pandas": pd.__version__,
    }

    return {
        "pipeline_version": cfg.pipeline_version,
        "started_at": started_at,
        "finished_at": finished_at,
        "inputs": inputs,
        "parameters": params,
        "environment": env,
    }


def write_manifest(
    *,
    run_dir: Path,
    input_paths: Sequence[Path],
    started_at: str,
    finished_at: str,
    cfg: Config,
    logger: logging.Logger,
) -> Path:
    manifest = build_manifest(
        input_paths=input_paths, started_at=started_at, finished_at=finished_at, cfg=cfg
    )
    out_path = run_dir / "run_manifest.yaml"
    logger.info("Writing run_manifest.yaml", extra={"path": str(out_path)})
    with out_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(manifest, f, sort_keys=False, allow_unicode=True)
    return out_path
