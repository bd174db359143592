from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from ...config import Config
from ...domain.profiles import EntityProfile, ProfileSet, load_profiles
from ...domain.results import ClassificationResult, EntityType
from ...domain.table import Row, Table
from .scoring import classifier_score, field_evidence

logger = logging.getLogger(__name__)


def header_score(profile: EntityProfile, headers: Sequence[str], cfg: Config) -> float:
    score = 0.0
    for header in headers:
        for field in profile.fields:
            ev = field_evidence(header, field, profile)
            score += classifier_score(ev, profile.is_required(field), cfg.similarity_threshold)
    return score


def content_score(profile: EntityProfile, sample: Sequence[Row]) -> float:
    """Each signal adds its weight once per sampled row in which any cell fires it."""
    score = 0.0
    for row in sample:
        values = list(row.values())
        for signal in profile.signals:
            if any(signal.fires(v) for v in values):
                score += signal.weight
    return score


def score_profiles(
    headers: Sequence[str],
    sample: Sequence[Row],
    profiles: ProfileSet,
    cfg: Config,
) -> Mapping[str, float]:
    """Per-profile score normalized by the profile's field count."""
    scores: dict[str, float] = {}
    for profile in profiles:
        raw = header_score(profile, headers, cfg) + content_score(profile, sample)
        scores[profile.entity_type.value] = raw / max(len(profile.fields), 1)
    return scores


def classify(
    table: Table,
    config: Optional[Config] = None,
    profiles: Optional[ProfileSet] = None,
) -> ClassificationResult:
    """Guess whether a table holds clients, workers or tasks."""
    cfg = config or Config()
    profs = profiles or load_profiles(cfg.profiles_path)
    sample = table.rows[: max(cfg.sample_rows, 0)]
    scores = score_profiles(table.headers, sample, profs, cfg)

    best_type = EntityType.UNKNOWN
    best_score = 0.0
    for profile in profs:
        s = scores[profile.entity_type.value]
        if best_type is EntityType.UNKNOWN or s > best_score:
            best_type, best_score = profile.entity_type, s

    confidence = min(best_score / 3.0, 1.0)
    entity = best_type if confidence > cfg.classification_threshold else EntityType.UNKNOWN
    logger.debug(
        "Classified table",
        extra={
            "table": table.name,
            "entity_type": entity.value,
            "confidence": round(confidence, 3),
            "scores": {k: round(v, 3) for k, v in scores.items()},
        },
    )
    return ClassificationResult(entity_type=entity, confidence=confidence, scores=scores)
