from __future__ import annotations

from rostercheck.domain.profiles import load_profiles
from rostercheck.domain.results import EntityType
from rostercheck.domain.table import Table
from rostercheck.services.validation.roles import resolve_roles

CLIENT_HEADERS = ["ClientID", "ClientName", "PriorityLevel", "RequestedTaskIDs", "GroupTag"]
WORKER_HEADERS = ["WorkerID", "WorkerName", "Skills", "AvailableSlots", "MaxLoadPerPhase"]
TASK_HEADERS = ["TaskID", "TaskName", "Duration", "RequiredSkills", "PreferredPhases"]


def _t(name: str, headers: list[str]) -> Table:
    return Table.from_records(name, headers, [])


def _names(resolved: dict[EntityType, Table | None]) -> dict[str, str | None]:
    return {r.value: (t.name if t else None) for r, t in resolved.items()}


def test_headers_beat_a_contradicting_filename() -> None:
    tables = [
        _t("workers.csv", CLIENT_HEADERS),
        _t("team.csv", WORKER_HEADERS),
        _t("tasks.csv", TASK_HEADERS),
    ]
    resolved = resolve_roles(tables, load_profiles())
    assert _names(resolved) == {
        "client": "workers.csv",
        "worker": "team.csv",
        "task": "tasks.csv",
    }


def test_filename_alone_is_enough() -> None:
    tables = [
        _t("clients.csv", ["a"]),
        _t("workers.csv", ["b"]),
        _t("tasks.csv", ["c"]),
    ]
    assert _names(resolve_roles(tables, load_profiles())) == {
        "client": "clients.csv",
        "worker": "workers.csv",
        "task": "tasks.csv",
    }


def test_classification_outranks_header_hits() -> None:
    tables = [_t("a.csv", ["x"]), _t("b.csv", ["y"]), _t("c.csv", ["z"])]
    classified = {"a.csv": EntityType.TASK, "b.csv": EntityType.CLIENT, "c.csv": EntityType.WORKER}
    assert _names(resolve_roles(tables, load_profiles(), classified)) == {
        "client": "b.csv",
        "worker": "c.csv",
        "task": "a.csv",
    }


def test_one_table_fills_one_role() -> None:
    tables = [_t("data.csv", CLIENT_HEADERS + ["TaskID"])]
    resolved = resolve_roles(tables, load_profiles())
    assert [r.value for r, t in resolved.items() if t is not None] == ["client"]


def test_no_signal_leaves_role_empty() -> None:
    resolved = resolve_roles([_t("x.csv", ["q"])], load_profiles())
    assert all(t is None for t in resolved.values())
