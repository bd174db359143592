from __future__ import annotations

from rostercheck.domain.errors import IssueLocation, IssueType, Severity, ValidationIssue
from rostercheck.domain.results import EntityType, HeaderMapping, ValidationResult


def _issue(sev: Severity, kind: IssueType = IssueType.OUTLIER) -> ValidationIssue:
    return ValidationIssue(severity=sev, type=kind, message="m")


def test_from_issues_splits_by_severity() -> None:
    result = ValidationResult.from_issues(
        [_issue(Severity.INFO), _issue(Severity.ERROR), _issue(Severity.WARNING), _issue(Severity.ERROR)]
    )
    assert len(result.errors) == 2
    assert len(result.warnings) == 1
    assert len(result.info) == 1
    assert result.summary == {
        "totalIssues": 4,
        "errorCount": 2,
        "warningCount": 1,
        "infoCount": 1,
    }
    assert result.has_errors
    assert [i.severity for i in result.issues] == [
        Severity.ERROR,
        Severity.ERROR,
        Severity.WARNING,
        Severity.INFO,
    ]


def test_empty_result() -> None:
    result = ValidationResult()
    assert result.summary["totalIssues"] == 0
    assert not result.has_errors


def test_issue_to_dict() -> None:
    issue = ValidationIssue(
        severity=Severity.ERROR,
        type=IssueType.DUPLICATE_ID,
        message="dup",
        location=IssueLocation("workers.csv", 3, "WorkerID"),
        value="W1",
        related_tables=("tasks.csv",),
    )
    d = issue.to_dict()
    assert d["severity"] == "error"
    assert d["type"] == "duplicate_id"
    assert d["location"] == {"table": "workers.csv", "row": 3, "column": "WorkerID"}
    assert d["related_tables"] == ["tasks.csv"]
    assert d["fixable"] is False


def test_identity_mapping() -> None:
    mapping = HeaderMapping.identity(["A", "B"])
    assert mapping.entity_type is EntityType.UNKNOWN
    assert mapping.target("A") == "A"
    assert mapping.mapped() == {}
    assert mapping.source_of("B") == "B"
    assert mapping.source_of("C") is None
