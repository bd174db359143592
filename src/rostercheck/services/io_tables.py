from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import pandas as pd

from ..domain.errors import TableShapeError
from ..domain.table import Table

EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xls")


def _clean_frame(df: pd.DataFrame) -> pd.DataFrame:
    df = df.dropna(how="all")
    df.columns = [str(c).strip() for c in df.columns]
    # pandas renames repeated headers to 'X.1'; a header left blank becomes 'Unnamed: N'
    return df.reset_index(drop=True)


def read_table(path: Path) -> Table:
    """Load a CSV or Excel sheet as a Table named after the file.

    Values are read as objects so IDs such as '007' keep their text form.
    """
    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        df = pd.read_excel(path, sheet_name=0, dtype=object)
    elif suffix in (".csv", ".txt"):
        df = pd.read_csv(path, dtype=object, keep_default_na=False, na_values=[""])
    else:
        raise TableShapeError(f"Unsupported file type: {path.name}")
    df = _clean_frame(df)
    if len(set(df.columns)) != len(df.columns):
        raise TableShapeError(f"{path.name}: duplicate headers after trimming")
    return Table.from_frame(path.name, df)


class IOService:
    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    def read_tables(self, paths: Sequence[Path]) -> list[Table]:
        tables: list[Table] = []
        for p in paths:
            self.logger.info(f"Reading {p.name}", extra={"path": str(p)})
            table = read_table(p)
            self.logger.info(
                f"Loaded {table.name}",
                extra={"table": table.name, "rows": len(table), "columns": len(table.headers)},
            )
            tables.append(table)
        return tables
