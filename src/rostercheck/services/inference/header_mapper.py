from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Optional, Sequence

from ...config import Config
from ...domain.errors import TableShapeError
from ...domain.profiles import ProfileSet, load_profiles
from ...domain.results import EntityType, HeaderMapping
from ...utils.normalize import normalize_header, similarity
from .scoring import field_evidence, mapper_score

logger = logging.getLogger(__name__)

SUGGESTION_SIMILARITY = 0.6
MAX_SUGGESTIONS = 3


def score_matrix(
    headers: Sequence[str], entity_type: EntityType, profiles: ProfileSet
) -> list[tuple[float, int, int]]:
    """All (score, header_index, field_index) triples in enumeration order."""
    profile = profiles.get(entity_type)
    triples: list[tuple[float, int, int]] = []
    for hi, header in enumerate(headers):
        for fi, field in enumerate(profile.fields):
            triples.append((mapper_score(field_evidence(header, field, profile)), hi, fi))
    return triples


def _identity_name(header: str, taken: set[str]) -> str:
    name = header
    n = 2
    while name in taken:
        name = f"{header}__{n}"
        n += 1
    return name


def map_headers(
    headers: Sequence[str],
    entity_type: EntityType,
    config: Optional[Config] = None,
    profiles: Optional[ProfileSet] = None,
) -> HeaderMapping:
    """Greedy one-to-one assignment of raw headers to canonical fields.

    Pairs are taken by descending score; equal scores fall back to header
    column order, then field declaration order. Headers left over map to
    themselves (suffixed with ``__N`` only if that name is already a target).
    """
    seen: set[str] = set()
    for h in headers:
        if h in seen:
            raise TableShapeError(f"duplicate header '{h}'")
        seen.add(h)

    if entity_type is EntityType.UNKNOWN:
        return HeaderMapping.identity(headers)

    cfg = config or Config()
    profs = profiles or load_profiles(cfg.profiles_path)
    fields = profs.get(entity_type).fields

    # sorted() is stable, so ties keep (header, field) enumeration order
    triples = sorted(
        score_matrix(headers, entity_type, profs), key=lambda t: (-t[0], t[1], t[2])
    )
    assigned: dict[int, str] = {}
    scores: dict[str, float] = {}
    used_fields: set[int] = set()
    for score, hi, fi in triples:
        if score <= cfg.mapping_threshold:
            break
        if hi in assigned or fi in used_fields:
            continue
        assigned[hi] = fields[fi]
        used_fields.add(fi)
        scores[headers[hi]] = score

    taken = set(assigned.values())
    assignments: dict[str, str] = {}
    for hi, header in enumerate(headers):
        if hi in assigned:
            assignments[header] = assigned[hi]
            continue
        name = _identity_name(header, taken)
        taken.add(name)
        assignments[header] = name

    for raw, target in assignments.items():
        if raw in scores:
            logger.debug(
                "Mapped header",
                extra={"header": raw, "field": target, "score": round(scores[raw], 3)},
            )
    return HeaderMapping(
        entity_type=entity_type,
        assignments=MappingProxyType(assignments),
        scores=MappingProxyType(scores),
    )


def suggest_header_corrections(
    headers: Sequence[str],
    profiles: Optional[ProfileSet] = None,
) -> dict[str, list[str]]:
    """Up to three canonical field names per header, across every profile."""
    profs = profiles or load_profiles()
    out: dict[str, list[str]] = {}
    for header in headers:
        hn = normalize_header(header)
        picks: list[str] = []
        for profile in profs:
            for field in profile.fields:
                if field in picks:
                    continue
                fires = any(p.search(header) for p in profile.patterns_for(field))
                if fires or similarity(hn, normalize_header(field)) > SUGGESTION_SIMILARITY:
                    picks.append(field)
                if len(picks) == MAX_SUGGESTIONS:
                    break
            if len(picks) == MAX_SUGGESTIONS:
                break
        out[header] = picks
    return out
