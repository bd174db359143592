from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from rostercheck.main import main


def write_dataset(base: Path) -> list[Path]:
    base.mkdir(parents=True, exist_ok=True)
    clients = pd.DataFrame(
        [
            {"ClientID": "C1", "ClientName": "Acme", "PriorityLevel": 1,
             "RequestedTaskIDs": "T1,T2", "GroupTag": "GroupA"},
            {"ClientID": "C2", "ClientName": "Beta", "PriorityLevel": 3,
             "RequestedTaskIDs": "T2", "GroupTag": "GroupA"},
        ]
    )
    workers = pd.DataFrame(
        [
            {"WorkerID": "W1", "WorkerName": "Ann", "Skills": "python, sql",
             "AvailableSlots": "[1,2,3]", "MaxLoadPerPhase": 2, "WorkerGroup": "GroupA"},
            {"WorkerID": "W2", "WorkerName": "Bob", "Skills": "python",
             "AvailableSlots": "[2,3]", "MaxLoadPerPhase": 1, "WorkerGroup": "GroupA"},
        ]
    )
    tasks = pd.DataFrame(
        [
            {"TaskID": "T1", "TaskName": "Build", "Category": "Dev", "Duration": 2,
             "RequiredSkills": "python", "PreferredPhases": "[1,2]", "MaxConcurrent": 2},
            {"TaskID": "T2", "TaskName": "Report", "Category": "Ops", "Duration": 1,
             "RequiredSkills": "sql", "PreferredPhases": "[2,3]", "MaxConcurrent": 1},
        ]
    )
    paths = []
    for name, df in (("clients.csv", clients), ("workers.csv", workers), ("tasks.csv", tasks)):
        p = base / name
        df.to_csv(p, index=False)
        paths.append(p)
    return paths


def test_cli_writes_run_outputs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    inputs = write_dataset(tmp_path / "in")
    out = tmp_path / "runs"

    code = main(["--input", *[str(p) for p in inputs], "--out", str(out), "--workers", "2"])
    assert code == 0

    run_dirs = list(out.iterdir())
    assert len(run_dirs) == 1
    names = {p.name for p in run_dirs[0].iterdir()}
    assert {"report.json", "issues.xlsx", "run_manifest.yaml", "latest_run.log", "logs.jsonl"} <= names

    report = json.loads((run_dirs[0] / "report.json").read_text(encoding="utf-8"))
    assert report["roles"] == {"client": "clients.csv", "worker": "workers.csv", "task": "tasks.csv"}
    assert report["aggregate"]["summary"]["errorCount"] == 0


def test_cli_classify_stage(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    inputs = write_dataset(tmp_path / "in")
    out = tmp_path / "runs"
    assert main(["--input", *[str(p) for p in inputs], "--out", str(out), "--stage", "classify"]) == 0
    run_dir = next(out.iterdir())
    report = json.loads((run_dir / "report.json").read_text(encoding="utf-8"))
    assert report["cross_file"]["summary"]["totalIssues"] == 0
    assert [t["entity_type"] for t in report["tables"]] == ["client", "worker", "task"]
