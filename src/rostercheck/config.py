from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, cast

from .types import ConfigOverrides, YamlConfig


@dataclass(frozen=True)
class Config:
    pipeline_version: str = "v1.0"
    # Classifier: confidence at or below this is reported as "unknown"
    classification_threshold: float = 0.4
    # Header mapper: a (header, field) pair must score strictly above this
    mapping_threshold: float = 1.0
    similarity_threshold: float = 0.7
    sample_rows: int = 5
    # A column whose blank rate is below this counts as required
    required_null_rate: float = 0.10
    iqr_multiplier: float = 1.5
    outlier_numeric_share: float = 0.5
    outlier_min_values: int = 5
    # Fixed (min, max) for priority-like columns; None means data-derived
    priority_bounds: Optional[tuple[float, float]] = None
    max_workers: int = 4
    deadline_seconds: Optional[float] = None
    max_issues_in_log: int = 5
    profiles_path: Optional[Path] = None
    # 'full' (default) or 'classify' for inference-only runs
    pipeline_stage: str = "full"


def _coerce_bounds(raw: object) -> Optional[tuple[float, float]]:
    if raw is None:
        return None
    if isinstance(raw, str):
        parts = [p for p in raw.replace(",", " ").split() if p]
    elif isinstance(raw, (list, tuple)):
        parts = list(raw)
    else:
        raise ValueError(f"priority_bounds must be a pair, got {raw!r}")
    if len(parts) != 2:
        raise ValueError(f"priority_bounds must be a pair, got {raw!r}")
    lo, hi = float(parts[0]), float(parts[1])
    if lo > hi:
        raise ValueError(f"priority_bounds min {lo} exceeds max {hi}")
    return (lo, hi)


def _optional_float(raw: object) -> Optional[float]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    return float(cast(float, raw))


def load_config(path: Optional[Path], overrides: Optional[ConfigOverrides] = None) -> Config:
    import yaml

    data: YamlConfig = {}

    # Always load configs/config.yaml if it exists
    default_config = Path("configs/config.yaml")
    if default_config.exists():
        raw = yaml.safe_load(default_config.read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            data.update(cast(YamlConfig, raw))

    # Then load custom config if provided (overrides default)
    if path is not None and path.exists():
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            data.update(cast(YamlConfig, raw))

    # Finally apply CLI overrides
    if overrides:
        data.update(cast(YamlConfig, {k: v for k, v in overrides.items() if v is not None}))

    defaults = Config()
    profiles_raw = data.get("profiles_path")
    cfg = Config(
        pipeline_version=defaults.pipeline_version,
        classification_threshold=float(
            data.get("classification_threshold", defaults.classification_threshold)
        ),
        mapping_threshold=float(data.get("mapping_threshold", defaults.mapping_threshold)),
        similarity_threshold=float(
            data.get("similarity_threshold", defaults.similarity_threshold)
        ),
        sample_rows=int(data.get("sample_rows", defaults.sample_rows)),
        required_null_rate=float(data.get("required_null_rate", defaults.required_null_rate)),
        iqr_multiplier=float(data.get("iqr_multiplier", defaults.iqr_multiplier)),
        outlier_numeric_share=float(
            data.get("outlier_numeric_share", defaults.outlier_numeric_share)
        ),
        outlier_min_values=int(data.get("outlier_min_values", defaults.outlier_min_values)),
        priority_bounds=_coerce_bounds(data.get("priority_bounds")),
        max_workers=max(1, int(data.get("max_workers", defaults.max_workers))),
        deadline_seconds=_optional_float(data.get("deadline_seconds")),
        max_issues_in_log=int(data.get("max_issues_in_log", defaults.max_issues_in_log)),
        profiles_path=Path(profiles_raw) if profiles_raw else None,
        pipeline_stage=str(data.get("pipeline_stage", defaults.pipeline_stage)),
    )
    return cfg
