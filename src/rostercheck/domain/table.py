from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Sequence

import pandas as pd

from ..types import CellValue
from .errors import TableShapeError

Row = Mapping[str, CellValue]


def is_blank(value: object) -> bool:
    """True for null, NaN and whitespace-only text."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def cell_text(value: object) -> str:
    """Render a cell as text; every format detector works on this rendering.

    Integral floats drop the trailing ``.0`` so ``3.0`` and ``"3"`` compare equal.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def to_number(value: object) -> Optional[float]:
    """Parse a cell as a number. Booleans, blanks, NaN and infinities are not numbers."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            num = float(value)
        except OverflowError:
            return None
        return num if math.isfinite(num) else None
    text = str(value).strip()
    if not text:
        return None
    try:
        num = float(text)
    except ValueError:
        return None
    # 'inf' and digit runs past the float range parse as infinity
    return num if math.isfinite(num) else None


def _py_scalar(value: object) -> CellValue:
    # numpy scalars -> builtin types; NaN/NaT/NA -> None
    if value is None or isinstance(value, (str, bool)):
        return value  # type: ignore[return-value]
    try:
        if pd.isna(value):  # type: ignore[arg-type]
            return None
    except (TypeError, ValueError):
        pass
    item = getattr(value, "item", None)
    if callable(item):
        value = item()
    if isinstance(value, (int, float, bool, str)):
        return value
    return str(value)


@dataclass(frozen=True)
class Table:
    """An in-memory table: unique ordered headers plus rows keyed by header."""

    name: str
    headers: tuple[str, ...]
    rows: tuple[Row, ...]

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for h in self.headers:
            if h in seen:
                raise TableShapeError(f"Table '{self.name}': duplicate header '{h}'")
            seen.add(h)
        for i, row in enumerate(self.rows):
            extra = [k for k in row.keys() if k not in seen]
            if extra:
                raise TableShapeError(
                    f"Table '{self.name}': row {i} has undeclared columns {extra}"
                )

    @classmethod
    def from_records(
        cls, name: str, headers: Sequence[str], rows: Iterable[Mapping[str, CellValue]]
    ) -> "Table":
        hdrs = tuple(str(h) for h in headers)
        frozen: list[Row] = []
        for i, row in enumerate(rows):
            extra = [k for k in row.keys() if k not in hdrs]
            if extra:
                raise TableShapeError(f"Table '{name}': row {i} has undeclared columns {extra}")
            frozen.append(MappingProxyType({h: row.get(h) for h in hdrs}))
        return cls(name=name, headers=hdrs, rows=tuple(frozen))

    @classmethod
    def from_frame(cls, name: str, df: pd.DataFrame) -> "Table":
        headers = [str(c).strip() for c in df.columns]
        records: list[dict[str, CellValue]] = []
        for values in df.itertuples(index=False, name=None):
            records.append({h: _py_scalar(v) for h, v in zip(headers, values)})
        return cls.from_records(name, headers, records)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([dict(r) for r in self.rows], columns=list(self.headers))

    def column(self, header: str) -> list[CellValue]:
        return [row.get(header) for row in self.rows]

    def iter_cells(self, header: str) -> Iterator[tuple[int, CellValue]]:
        for i, row in enumerate(self.rows):
            yield i, row.get(header)

    def __len__(self) -> int:
        return len(self.rows)
