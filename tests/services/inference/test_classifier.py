from __future__ import annotations

from rostercheck.config import Config
from rostercheck.domain.results import EntityType
from rostercheck.domain.table import Table
from rostercheck.services.inference.classifier import classify, score_profiles
from rostercheck.domain.profiles import load_profiles


def _clients() -> Table:
    return Table.from_records(
        "clients.csv",
        ["ClientID", "ClientName", "PriorityLevel", "RequestedTaskIDs", "GroupTag", "AttributesJSON"],
        [
            {"ClientID": "C1", "ClientName": "Acme", "PriorityLevel": 1,
             "RequestedTaskIDs": "T1,T2", "GroupTag": "GroupA", "AttributesJSON": "{}"},
            {"ClientID": "C2", "ClientName": "Beta", "PriorityLevel": 3,
             "RequestedTaskIDs": "T2", "GroupTag": "GroupB", "AttributesJSON": "{}"},
        ],
    )


def _workers() -> Table:
    return Table.from_records(
        "people.csv",
        ["WorkerID", "WorkerName", "Skills", "AvailableSlots", "MaxLoadPerPhase", "WorkerGroup"],
        [
            {"WorkerID": "W1", "WorkerName": "Ann", "Skills": "python,sql",
             "AvailableSlots": "[1,2]", "MaxLoadPerPhase": 2, "WorkerGroup": "GroupA"},
        ],
    )


def _tasks() -> Table:
    return Table.from_records(
        "jobs.csv",
        ["TaskID", "TaskName", "Category", "Duration", "RequiredSkills", "PreferredPhases", "MaxConcurrent"],
        [
            {"TaskID": "T1", "TaskName": "Build", "Category": "Dev", "Duration": 2,
             "RequiredSkills": "python", "PreferredPhases": "1-3", "MaxConcurrent": 2},
        ],
    )


def test_standard_tables_are_recognized() -> None:
    assert classify(_clients()).entity_type is EntityType.CLIENT
    assert classify(_workers()).entity_type is EntityType.WORKER
    assert classify(_tasks()).entity_type is EntityType.TASK


def test_confidence_is_capped_at_one() -> None:
    result = classify(_clients())
    assert 0.0 <= result.confidence <= 1.0
    assert result.confidence == 1.0
    assert set(result.scores) == {"client", "worker", "task"}


def test_unrelated_table_is_unknown() -> None:
    t = Table.from_records("notes.csv", ["foo", "bar"], [{"foo": "x", "bar": "y"}])
    result = classify(t)
    assert result.entity_type is EntityType.UNKNOWN
    assert result.confidence <= Config().classification_threshold


def test_empty_table_never_raises() -> None:
    result = classify(Table.from_records("empty.csv", [], []))
    assert result.entity_type is EntityType.UNKNOWN
    assert result.confidence == 0.0


def test_adding_matching_headers_never_lowers_score() -> None:
    profiles = load_profiles()
    cfg = Config()
    headers: list[str] = []
    previous = 0.0
    for h in ["ClientID", "ClientName", "PriorityLevel", "RequestedTaskIDs", "GroupTag"]:
        headers.append(h)
        score = score_profiles(headers, [], profiles, cfg)["client"]
        assert score >= previous
        previous = score


def test_threshold_is_configurable() -> None:
    strict = Config(classification_threshold=1.0)
    # confidence can never exceed 1.0, so nothing passes a 1.0 cutoff
    assert classify(_clients(), strict).entity_type is EntityType.UNKNOWN
