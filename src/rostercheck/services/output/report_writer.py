from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Sequence

import pandas as pd
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table as XlTable
from openpyxl.worksheet.table import TableStyleInfo
from openpyxl.worksheet.worksheet import Worksheet

from ...domain.errors import ValidationIssue
from ..aggregate.report import EngineReport

ISSUE_COLUMNS = ["Severity", "Type", "Table", "Row", "Column", "Message", "Value", "Fixable"]
TABLE_COLUMNS = ["Table", "EntityType", "Confidence", "Rows", "Errors", "Warnings", "Info"]
FIX_COLUMNS = ["Table", "Row", "Column", "Before", "After", "Description", "Confidence"]


def _cell(value: object) -> object:
    # Lists and dicts do not fit in a worksheet cell
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def _issue_row(issue: ValidationIssue) -> dict[str, object]:
    loc = issue.location
    return {
        "Severity": issue.severity.value,
        "Type": issue.type.value,
        "Table": loc.table if loc else ", ".join(issue.related_tables),
        # 1-based data row for spreadsheet users
        "Row": loc.row + 1 if loc else None,
        "Column": loc.column if loc else None,
        "Message": issue.message,
        "Value": _cell(issue.value),
        "Fixable": issue.fixable,
    }


def issues_frame(issues: Sequence[ValidationIssue]) -> pd.DataFrame:
    return pd.DataFrame([_issue_row(i) for i in issues], columns=ISSUE_COLUMNS)


def tables_frame(report: EngineReport) -> pd.DataFrame:
    rows = []
    for t in report.tables:
        summary = t.local_result().summary
        rows.append(
            {
                "Table": t.name,
                "EntityType": t.entity_type.value,
                "Confidence": round(t.classification.confidence, 3),
                "Rows": t.rows,
                "Errors": summary["errorCount"],
                "Warnings": summary["warningCount"],
                "Info": summary["infoCount"],
            }
        )
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def fixes_frame(report: EngineReport) -> pd.DataFrame:
    rows = [
        {
            "Table": t.name,
            "Row": f.row + 1,
            "Column": f.column,
            "Before": _cell(f.before),
            "After": _cell(f.after),
            "Description": f.description,
            "Confidence": f.confidence,
        }
        for t in report.tables
        for f in t.fixes
    ]
    return pd.DataFrame(rows, columns=FIX_COLUMNS)


def _keep_text(ws: Worksheet) -> None:
    # openpyxl stores any string starting with "=" as a formula
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            if cell.data_type == "f":
                cell.data_type = "s"


def _style_sheet(ws: Worksheet, df: pd.DataFrame, display_name: str) -> None:
    cols = list(df.columns)
    if len(df) > 0:
        ref = f"A1:{get_column_letter(len(cols))}{len(df) + 1}"
        table = XlTable(displayName=display_name, ref=ref)
        table.tableStyleInfo = TableStyleInfo(
            name="TableStyleMedium2",
            showFirstColumn=False,
            showLastColumn=False,
            showRowStripes=True,
            showColumnStripes=False,
        )
        ws.add_table(table)
    for idx, header in enumerate(cols, start=1):
        base = max(len(str(header)), 12) + 2
        ws.column_dimensions[get_column_letter(idx)].width = min(40, base)


def write_issues_workbook(report: EngineReport, path: Path) -> Path:
    total = report.aggregate
    sheets = {
        "Tables": tables_frame(report),
        "Errors": issues_frame(total.errors),
        "Warnings": issues_frame(total.warnings),
        "Info": issues_frame(total.info),
        "Fixes": fixes_frame(report),
    }
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
            _keep_text(writer.sheets[sheet_name])
            _style_sheet(writer.sheets[sheet_name], df, f"{sheet_name}Table")
    return path


def write_report(report: EngineReport, run_dir: Path, logger: logging.Logger) -> list[Path]:
    """Write report.json and issues.xlsx into the run directory."""
    json_path = run_dir / "report.json"
    logger.info("Writing report.json", extra={"path": str(json_path)})
    json_path.write_text(
        json.dumps(report.to_dict(), indent=2, ensure_ascii=False, default=str),
        encoding="utf-8",
    )
    xlsx_path = run_dir / "issues.xlsx"
    logger.info("Writing issues.xlsx", extra={"path": str(xlsx_path)})
    write_issues_workbook(report, xlsx_path)
    return [json_path, xlsx_path]
