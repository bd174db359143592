from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ...domain.profiles import EntityProfile
from ...utils.normalize import normalize_header, similarity, split_words

# Classifier weights (header x field evidence, summed per profile)
CLS_EXACT: Final = 5.0
CLS_PATTERN_REQUIRED: Final = 3.0
CLS_PATTERN_OPTIONAL: Final = 1.5
CLS_SUBSTRING: Final = 1.0
CLS_SIMILARITY_SCALE: Final = 2.0

# Header mapper weights (one cell of the scoring matrix)
MAP_EXACT: Final = 10.0
MAP_PATTERN: Final = 5.0
MAP_FIELD_IN_HEADER: Final = 3.0
MAP_HEADER_IN_FIELD: Final = 2.0
MAP_SIMILARITY_SCALE: Final = 4.0
MAP_KEYWORD: Final = 1.0

_MIN_SUBSTRING_LEN: Final = 2


@dataclass(frozen=True)
class FieldEvidence:
    """Raw comparison facts between one raw header and one canonical field."""

    header_norm: str
    field_norm: str
    exact: bool
    pattern_hits: int
    header_in_field: bool
    field_in_header: bool
    similarity: float
    keyword_hits: int


def field_evidence(raw_header: str, field: str, profile: EntityProfile) -> FieldEvidence:
    hn = normalize_header(raw_header)
    fn = normalize_header(field)
    hits = sum(1 for p in profile.patterns_for(field) if p.search(raw_header))
    keywords = [w for w in split_words(field) if len(w) > _MIN_SUBSTRING_LEN and w in hn]
    return FieldEvidence(
        header_norm=hn,
        field_norm=fn,
        exact=bool(hn) and hn == fn,
        pattern_hits=hits,
        header_in_field=bool(hn) and hn in fn,
        field_in_header=bool(fn) and fn in hn,
        similarity=similarity(hn, fn),
        keyword_hits=len(keywords),
    )


def classifier_score(
    ev: FieldEvidence, required: bool, similarity_threshold: float
) -> float:
    score = 0.0
    if ev.pattern_hits:
        score += CLS_PATTERN_REQUIRED if required else CLS_PATTERN_OPTIONAL
    if ev.exact:
        score += CLS_EXACT
    if (
        (ev.header_in_field or ev.field_in_header)
        and len(ev.header_norm) > _MIN_SUBSTRING_LEN
        and len(ev.field_norm) > _MIN_SUBSTRING_LEN
    ):
        score += CLS_SUBSTRING
    if ev.similarity > similarity_threshold:
        score += ev.similarity * CLS_SIMILARITY_SCALE
    return score


def mapper_score(ev: FieldEvidence) -> float:
    score = 0.0
    if ev.exact:
        score += MAP_EXACT
    score += MAP_PATTERN * ev.pattern_hits
    if ev.field_in_header:
        score += MAP_FIELD_IN_HEADER
    if ev.header_in_field and len(ev.header_norm) > _MIN_SUBSTRING_LEN:
        score += MAP_HEADER_IN_FIELD
    score += ev.similarity * MAP_SIMILARITY_SCALE
    score += MAP_KEYWORD * ev.keyword_hits
    return score
