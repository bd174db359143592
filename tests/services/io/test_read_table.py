from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
import pytest

from rostercheck.domain.errors import TableShapeError
from rostercheck.services.io_tables import IOService, read_table


def test_csv_keeps_text_ids_and_drops_blank_rows(tmp_path: Path) -> None:
    p = tmp_path / "workers.csv"
    p.write_text(" WorkerID ,Slots\n007,2\n,\nW2,\n", encoding="utf-8")
    t = read_table(p)
    assert t.name == "workers.csv"
    assert t.headers == ("WorkerID", "Slots")
    assert t.column("WorkerID") == ["007", "W2"]
    assert t.column("Slots") == ["2", None]


def test_xlsx_first_sheet(tmp_path: Path) -> None:
    p = tmp_path / "tasks.xlsx"
    with pd.ExcelWriter(p, engine="openpyxl") as w:
        pd.DataFrame([{"TaskID": "T1", "Duration": 2}]).to_excel(w, sheet_name="Main", index=False)
        pd.DataFrame([{"Other": 1}]).to_excel(w, sheet_name="Extra", index=False)
    t = read_table(p)
    assert t.headers == ("TaskID", "Duration")
    assert t.rows[0]["TaskID"] == "T1"
    assert t.rows[0]["Duration"] == 2


def test_unsupported_suffix(tmp_path: Path) -> None:
    p = tmp_path / "notes.json"
    p.write_text("{}", encoding="utf-8")
    with pytest.raises(TableShapeError):
        read_table(p)


def test_headers_colliding_after_trim(tmp_path: Path) -> None:
    p = tmp_path / "clients.csv"
    p.write_text("ClientID,ClientID \nC1,C2\n", encoding="utf-8")
    with pytest.raises(TableShapeError):
        read_table(p)


def test_io_service_reads_in_order(tmp_path: Path) -> None:
    a = tmp_path / "a.csv"
    b = tmp_path / "b.csv"
    a.write_text("X\n1\n", encoding="utf-8")
    b.write_text("Y\n2\n", encoding="utf-8")
    tables = IOService(logging.getLogger("test.io")).read_tables([b, a])
    assert [t.name for t in tables] == ["b.csv", "a.csv"]
