from __future__ import annotations

import logging

from ..domain.errors import TableShapeError
from ..domain.results import HeaderMapping
from ..domain.table import Row, Table


def apply_mapping(table: Table, mapping: HeaderMapping) -> Table:
    """Rename the table's columns; row values are carried over untouched."""
    targets = [mapping.target(h) for h in table.headers]
    if len(set(targets)) != len(targets):
        raise TableShapeError(f"Table '{table.name}': mapping sends two headers to one field")
    rows: list[Row] = [
        {mapping.target(h): row.get(h) for h in table.headers} for row in table.rows
    ]
    return Table.from_records(table.name, targets, rows)


class TransformService:
    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    def apply_mapping(self, table: Table, mapping: HeaderMapping) -> Table:
        renamed = mapping.mapped()
        self.logger.info(
            f"Canonicalizing '{table.name}'",
            extra={"table": table.name, "rows": len(table), "renamed": len(renamed)},
        )
        return apply_mapping(table, mapping)
