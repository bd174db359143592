"""Library entry points.

Every function here works on in-memory ``Table`` objects and returns plain
result objects; nothing is written to disk and no logging is configured.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .app.container import build_container
from .app.engine import Engine
from .config import Config
from .domain.results import ClassificationResult, EntityType, HeaderMapping, ValidationResult
from .domain.table import Table
from .services.aggregate.report import EngineReport, aggregate
from .services.fixes import FixSuggestion, suggest_fixes
from .services.inference.classifier import classify
from .services.inference.header_mapper import map_headers, suggest_header_corrections
from .services.inference.review import review_mapping
from .services.io_tables import read_table
from .services.profiling import TableProfile, profile_table
from .services.transform_service import apply_mapping
from .services.validation.cross_file import validate_cross_file
from .services.validation.fields import validate_table

__all__ = [
    "ClassificationResult",
    "EngineReport",
    "EntityType",
    "FixSuggestion",
    "HeaderMapping",
    "Table",
    "TableProfile",
    "ValidationResult",
    "aggregate",
    "apply_mapping",
    "classify",
    "map_headers",
    "profile_table",
    "read_table",
    "review_mapping",
    "run_engine",
    "suggest_fixes",
    "suggest_header_corrections",
    "validate_cross_file",
    "validate_table",
]


def run_engine(tables: Sequence[Table], config: Optional[Config] = None) -> EngineReport:
    """Classify, map, validate and cross-check ``tables`` in one call."""
    cfg = config or Config()
    container = build_container("rostercheck", cfg)
    engine = Engine(container=container, cfg=cfg, logger=logging.getLogger("rostercheck.engine"))
    return engine.run(tables)
