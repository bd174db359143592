from __future__ import annotations

import pytest

from rostercheck.services.validation.formats import (
    PhaseFormat,
    detect_phase_format,
    is_valid_email,
    is_valid_phone,
    is_valid_url,
    looks_like_json,
    json_parses,
    parse_phases,
    parse_skills,
    parse_task_list,
    phase_error,
    skills_error,
)


@pytest.mark.parametrize(
    "text, fmt",
    [
        ("[1,2,3]", PhaseFormat.JSON_ARRAY),
        ("1-3", PhaseFormat.RANGE),
        ("1, 2,3", PhaseFormat.COMMA_SEPARATED),
        ("4", PhaseFormat.SINGLE_VALUE),
        ("[", PhaseFormat.INVALID),
        ("soon", PhaseFormat.INVALID),
    ],
)
def test_detect_phase_format(text: str, fmt: PhaseFormat) -> None:
    assert detect_phase_format(text) is fmt


def test_equivalent_phase_encodings_are_accepted() -> None:
    for text in ["[1,2,3]", "1,2,3", "1-3", "2", "[2]"]:
        assert phase_error(text) is None


def test_phase_errors() -> None:
    assert phase_error("3-1") is not None
    assert phase_error("[1,a]") == "invalid JSON array format"
    assert phase_error("[1,") is not None
    assert phase_error('["a"]') == "JSON array must contain only numbers"
    assert phase_error("one,two") is not None
    assert phase_error("") == "empty value"


def test_skills_encodings() -> None:
    assert skills_error('["python","sql"]') is None
    assert skills_error("python, sql") is None
    assert skills_error("python; sql") is None
    assert skills_error("python") is None
    assert skills_error("[1,2]") == "JSON array must contain only strings"
    assert skills_error("python,,sql") == "separated skills cannot be empty"


def test_json_detection() -> None:
    assert looks_like_json(' {"a": 1}')
    assert not looks_like_json("plain text")
    assert json_parses('{"a": 1}')
    assert not json_parses("{a: 1}")


def test_contact_formats() -> None:
    assert is_valid_email("ann@example.com")
    assert not is_valid_email("ann@example")
    assert is_valid_phone("+1 (555) 123-4567")
    assert not is_valid_phone("12345")
    assert is_valid_url("https://example.com")
    assert not is_valid_url("example.com")


def test_parse_task_list_formats() -> None:
    assert parse_task_list('["T1","T2"]') == ["T1", "T2"]
    assert parse_task_list("[T1, T2]") == ["T1", "T2"]
    assert parse_task_list("T1,T2 , 999") == ["T1", "T2", "999"]
    assert parse_task_list("T1;T2") == ["T1", "T2"]
    assert parse_task_list("T1 T2") == ["T1", "T2"]
    assert parse_task_list("T1") == ["T1"]
    assert parse_task_list(None) == []


def test_parse_skills_and_phases() -> None:
    assert parse_skills('["Python", "SQL"]') == ["Python", "SQL"]
    assert parse_skills("a;b") == ["a", "b"]
    assert parse_phases("2-4") == ["2", "3", "4"]
    assert parse_phases("[1,2]") == ["1", "2"]
    assert parse_phases("1,3") == ["1", "3"]
    assert parse_phases(5) == ["5"]
    # absurd ranges stay literal instead of expanding
    assert parse_phases("1-999999") == ["1-999999"]
