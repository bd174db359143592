from __future__ import annotations

from rostercheck.domain.errors import IssueType, Severity
from rostercheck.domain.results import EntityType, HeaderMapping
from rostercheck.domain.table import Table
from rostercheck.services.inference.header_mapper import map_headers
from rostercheck.services.inference.review import review_mapping
from rostercheck.services.transform_service import apply_mapping


def test_missing_required_fields_are_warned() -> None:
    raw = Table.from_records(
        "tasks.csv",
        ["TaskID", "TaskName", "Duration"],
        [{"TaskID": "T1", "TaskName": "Build", "Duration": 2}],
    )
    mapping = map_headers(raw.headers, EntityType.TASK)
    issues = review_mapping(apply_mapping(raw, mapping), mapping, EntityType.TASK)
    missing = {i.message.split()[3] for i in issues if i.type is IssueType.MISSING_REQUIRED_FIELD}
    assert missing == {"Category", "RequiredSkills", "PreferredPhases"}
    assert all(i.severity is Severity.WARNING and i.location is None for i in issues)
    assert all(i.related_tables == ("tasks.csv",) for i in issues)


def test_unexpected_id_shape_is_info() -> None:
    raw = Table.from_records(
        "workers.csv",
        ["WorkerID"],
        [{"WorkerID": "W1"}, {"WorkerID": "emp-7"}, {"WorkerID": None}],
    )
    mapping = map_headers(raw.headers, EntityType.WORKER)
    issues = review_mapping(apply_mapping(raw, mapping), mapping, EntityType.WORKER)
    odd = [i for i in issues if i.type is IssueType.UNEXPECTED_ID_FORMAT]
    assert len(odd) == 1
    assert odd[0].severity is Severity.INFO
    assert odd[0].location is not None and odd[0].location.row == 1
    assert odd[0].value == "emp-7"


def test_unknown_table_gets_single_warning() -> None:
    t = Table.from_records("notes.csv", ["a"], [{"a": 1}])
    issues = review_mapping(t, HeaderMapping.identity(t.headers), EntityType.UNKNOWN)
    assert [i.type for i in issues] == [IssueType.UNCLASSIFIED_TABLE]
    assert issues[0].severity is Severity.WARNING
