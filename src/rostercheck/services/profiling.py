from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final, Optional

import pandas as pd

from ..domain.table import Table, cell_text, is_blank
from ..types import ColumnProfileDict
from ..utils.normalize import normalize_header

_TYPE_SAMPLE: Final = 100
_ENUM_MAX_DISTINCT: Final = 10
_BOOL_TOKENS: Final = {"true", "false", "1", "0", "yes", "no", "y", "n"}
_DATE_LIKE: Final = re.compile(r"^\d{1,4}[-/.]\d{1,2}[-/.]\d{1,4}([ T].*)?$")


class DataType(str, Enum):
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    EMAIL = "email"
    URL = "url"
    TEXT = "text"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ColumnProfile:
    column: str
    data_type: DataType
    null_rate: float
    distinct: int
    is_key: bool
    is_enumerated: bool
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def to_dict(self) -> ColumnProfileDict:
        return {
            "column": self.column,
            "data_type": self.data_type.value,
            "null_rate": round(self.null_rate, 4),
            "distinct": self.distinct,
            "is_key": self.is_key,
            "is_enumerated": self.is_enumerated,
            "minimum": self.minimum,
            "maximum": self.maximum,
        }


@dataclass(frozen=True)
class TableProfile:
    name: str
    rows: int
    columns: tuple[ColumnProfile, ...]

    def column(self, header: str) -> ColumnProfile:
        for c in self.columns:
            if c.column == header:
                return c
        raise KeyError(header)

    def to_dict(self) -> list[ColumnProfileDict]:
        return [c.to_dict() for c in self.columns]


def infer_type(values: pd.Series) -> DataType:
    """Infer a column type from its non-blank values (first 100 considered)."""
    if values.empty:
        return DataType.UNKNOWN
    sample = values.head(_TYPE_SAMPLE)
    if not any(isinstance(v, bool) for v in sample):
        nums = pd.to_numeric(sample.map(lambda v: cell_text(v).strip()), errors="coerce")
        if nums.notna().all():
            has_point = any("." in cell_text(v) for v in sample)
            return DataType.DECIMAL if has_point else DataType.INTEGER
    texts = sample.map(lambda v: cell_text(v).strip())
    if texts.map(lambda t: bool(_DATE_LIKE.match(t))).all():
        parsed = pd.to_datetime(texts, errors="coerce", format="mixed")
        if parsed.notna().all():
            return DataType.DATE
    if texts.map(lambda t: t.lower() in _BOOL_TOKENS).all():
        return DataType.BOOLEAN
    if texts.map(lambda t: "@" in t and "." in t).any():
        return DataType.EMAIL
    if texts.map(lambda t: t.lower().startswith("http")).any():
        return DataType.URL
    return DataType.TEXT


def profile_column(table: Table, header: str) -> ColumnProfile:
    raw = table.column(header)
    present = pd.Series([v for v in raw if not is_blank(v)], dtype=object)
    keys = present.map(lambda v: cell_text(v).strip())
    n = len(raw)
    distinct = int(keys.nunique())
    data_type = infer_type(present)

    lo: Optional[float] = None
    hi: Optional[float] = None
    if data_type in (DataType.INTEGER, DataType.DECIMAL):
        nums = pd.to_numeric(keys, errors="coerce").dropna()
        if not nums.empty:
            lo, hi = float(nums.min()), float(nums.max())

    name = header.lower()
    named_key = "id" in normalize_header(header) or "key" in name or name == "email"
    return ColumnProfile(
        column=header,
        data_type=data_type,
        null_rate=(n - len(present)) / n if n else 0.0,
        distinct=distinct,
        is_key=named_key or (len(present) > 0 and distinct == len(present)),
        is_enumerated=distinct <= _ENUM_MAX_DISTINCT and len(present) > _ENUM_MAX_DISTINCT,
        minimum=lo,
        maximum=hi,
    )


def profile_table(table: Table) -> TableProfile:
    return TableProfile(
        name=table.name,
        rows=len(table),
        columns=tuple(profile_column(table, h) for h in table.headers),
    )
