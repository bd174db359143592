from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from ...domain.profiles import EntityProfile, ProfileSet
from ...domain.results import EntityType, KNOWN_ENTITIES
from ...domain.table import Table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleCandidate:
    role: EntityType
    table_index: int
    classified: bool
    header_hits: int
    filename_hit: bool

    @property
    def eligible(self) -> bool:
        return self.classified or self.header_hits > 0 or self.filename_hit

    def rank(self, role_index: int) -> tuple[int, int, int, int, int]:
        # Header evidence outranks the filename; earlier table, then earlier role, wins ties
        return (
            -int(self.classified),
            -self.header_hits,
            -int(self.filename_hit),
            self.table_index,
            role_index,
        )


def _candidate(
    profile: EntityProfile, index: int, table: Table, classified_as: Optional[EntityType]
) -> RoleCandidate:
    hits = sum(1 for h in table.headers if any(p.search(h) for p in profile.header_patterns))
    fname = any(p.search(table.name) for p in profile.filename_patterns)
    return RoleCandidate(
        role=profile.entity_type,
        table_index=index,
        classified=classified_as is profile.entity_type,
        header_hits=hits,
        filename_hit=fname,
    )


def resolve_roles(
    tables: Sequence[Table],
    profiles: ProfileSet,
    classified: Optional[Mapping[str, EntityType]] = None,
) -> dict[EntityType, Optional[Table]]:
    """Pick at most one table per role and at most one role per table."""
    classified = classified or {}
    order = {role: i for i, role in enumerate(KNOWN_ENTITIES)}
    candidates = [
        _candidate(profiles.get(role), ti, t, classified.get(t.name))
        for role in KNOWN_ENTITIES
        for ti, t in enumerate(tables)
    ]
    ranked = sorted(
        (c for c in candidates if c.eligible), key=lambda c: c.rank(order[c.role])
    )

    resolved: dict[EntityType, Optional[Table]] = {role: None for role in KNOWN_ENTITIES}
    used_tables: set[int] = set()
    for c in ranked:
        if resolved[c.role] is not None or c.table_index in used_tables:
            continue
        resolved[c.role] = tables[c.table_index]
        used_tables.add(c.table_index)

    logger.debug(
        "Resolved roles",
        extra={"roles": {r.value: (t.name if t else None) for r, t in resolved.items()}},
    )
    return resolved
