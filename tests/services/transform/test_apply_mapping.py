from __future__ import annotations

import logging
from types import MappingProxyType

import pytest

from rostercheck.domain.errors import TableShapeError
from rostercheck.domain.results import EntityType, HeaderMapping
from rostercheck.domain.table import Table
from rostercheck.services.transform_service import TransformService, apply_mapping


def _raw() -> Table:
    return Table.from_records(
        "clients.csv",
        ["Client Id", "Name", "Notes"],
        [
            {"Client Id": "C1", "Name": "Acme", "Notes": None},
            {"Client Id": "C2", "Name": "Beta", "Notes": "vip"},
        ],
    )


def test_headers_are_renamed_and_values_kept() -> None:
    mapping = HeaderMapping(
        entity_type=EntityType.CLIENT,
        assignments=MappingProxyType(
            {"Client Id": "ClientID", "Name": "ClientName", "Notes": "Notes"}
        ),
    )
    out = apply_mapping(_raw(), mapping)
    assert out.name == "clients.csv"
    assert out.headers == ("ClientID", "ClientName", "Notes")
    assert out.column("ClientID") == ["C1", "C2"]
    assert out.rows[1]["Notes"] == "vip"
    assert out.rows[0]["Notes"] is None


def test_identity_mapping_is_a_no_op() -> None:
    raw = _raw()
    out = apply_mapping(raw, HeaderMapping.identity(raw.headers))
    assert out.headers == raw.headers
    assert [dict(r) for r in out.rows] == [dict(r) for r in raw.rows]


def test_colliding_targets_raise() -> None:
    mapping = HeaderMapping(
        entity_type=EntityType.CLIENT,
        assignments=MappingProxyType(
            {"Client Id": "ClientID", "Name": "ClientID", "Notes": "Notes"}
        ),
    )
    with pytest.raises(TableShapeError):
        apply_mapping(_raw(), mapping)


def test_service_logs_renames(caplog: pytest.LogCaptureFixture) -> None:
    svc = TransformService(logging.getLogger("rostercheck.transform"))
    mapping = HeaderMapping(
        entity_type=EntityType.CLIENT,
        assignments=MappingProxyType({"Client Id": "ClientID"}),
    )
    with caplog.at_level(logging.INFO, logger="rostercheck.transform"):
        out = svc.apply_mapping(_raw(), mapping)
    assert out.headers == ("ClientID", "Name", "Notes")
    assert any("Canonicalizing 'clients.csv'" in r.getMessage() for r in caplog.records)
