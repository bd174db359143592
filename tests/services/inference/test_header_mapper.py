from __future__ import annotations

import pytest

from rostercheck.config import Config
from rostercheck.domain.errors import TableShapeError
from rostercheck.domain.profiles import load_profiles, parse_profiles
from rostercheck.domain.results import EntityType, KNOWN_ENTITIES
from rostercheck.services.inference.header_mapper import map_headers, suggest_header_corrections


def test_spaced_client_id_maps_to_canonical() -> None:
    headers = ["Client Id", "ClientName", "PriorityLevel", "RequestedTaskIDs", "GroupTag"]
    mapping = map_headers(headers, EntityType.CLIENT)
    assert mapping.target("Client Id") == "ClientID"
    assert mapping.source_of("ClientID") == "Client Id"


@pytest.mark.parametrize("role", KNOWN_ENTITIES)
def test_canonical_headers_map_to_themselves(role: EntityType) -> None:
    fields = list(load_profiles().get(role).fields)
    mapping = map_headers(fields, role)
    assert dict(mapping.assignments) == {f: f for f in fields}


def test_messy_worker_headers() -> None:
    headers = ["worker_id", "Employee Name", "skills", "Available Slots", "max load per phase", "Team"]
    mapping = map_headers(headers, EntityType.WORKER)
    assert mapping.target("worker_id") == "WorkerID"
    assert mapping.target("skills") == "Skills"
    assert mapping.target("Available Slots") == "AvailableSlots"
    assert mapping.target("max load per phase") == "MaxLoadPerPhase"


def test_mapping_is_one_to_one_and_total() -> None:
    headers = ["Name", "Worker Name", "Full Name", "Notes"]
    mapping = map_headers(headers, EntityType.WORKER)
    assert set(mapping.assignments) == set(headers)
    targets = list(mapping.assignments.values())
    assert len(targets) == len(set(targets))


def test_unmatched_header_keeps_its_name() -> None:
    mapping = map_headers(["TaskID", "zzqx"], EntityType.TASK)
    assert mapping.target("zzqx") == "zzqx"
    assert "zzqx" not in mapping.scores


def test_identity_fallback_avoids_taken_names() -> None:
    profiles = parse_profiles(
        {
            "profiles": {
                "client": {"required": ["ClientID"]},
                "worker": {"required": ["WorkerID"]},
                "task": {"required": ["TaskID"]},
            }
        }
    )
    # equal scores: the earlier column wins TaskID, the literal 'TaskID' steps aside
    mapping = map_headers(["Task Id", "TaskID"], EntityType.TASK, profiles=profiles)
    assert dict(mapping.assignments) == {"Task Id": "TaskID", "TaskID": "TaskID__2"}


def test_nothing_passes_a_high_threshold() -> None:
    mapping = map_headers(["Task Id", "TaskID"], EntityType.TASK, Config(mapping_threshold=100.0))
    assert dict(mapping.assignments) == {"Task Id": "Task Id", "TaskID": "TaskID"}
    assert dict(mapping.scores) == {}


def test_unknown_entity_gets_identity_mapping() -> None:
    mapping = map_headers(["a", "b"], EntityType.UNKNOWN)
    assert mapping.entity_type is EntityType.UNKNOWN
    assert mapping.mapped() == {}


def test_duplicate_headers_are_a_caller_error() -> None:
    with pytest.raises(TableShapeError):
        map_headers(["TaskID", "TaskID"], EntityType.TASK)


def test_mapping_is_deterministic() -> None:
    headers = ["Name", "Title", "Task", "Description", "Phase", "Stage"]
    first = map_headers(headers, EntityType.TASK)
    for _ in range(3):
        assert dict(map_headers(headers, EntityType.TASK).assignments) == dict(first.assignments)


def test_header_suggestions() -> None:
    out = suggest_header_corrections(["Skils", "zzqx"])
    assert "Skills" in out["Skils"]
    assert len(out["Skils"]) <= 3
    assert out["zzqx"] == []
