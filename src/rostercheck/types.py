from __future__ import annotations

from typing import Optional, TypedDict, Union

# A cell as handed over by the upstream parser.
CellValue = Union[None, str, int, float, bool]


class LocationDict(TypedDict):
    table: str
    row: int
    column: str


class IssueDict(TypedDict):
    severity: str
    type: str
    message: str
    location: Optional[LocationDict]
    value: object
    fixable: bool
    related_tables: list[str]


class SummaryCounts(TypedDict):
    totalIssues: int
    errorCount: int
    warningCount: int
    infoCount: int


class ResultDict(TypedDict):
    errors: list[IssueDict]
    warnings: list[IssueDict]
    info: list[IssueDict]
    summary: SummaryCounts


class ColumnProfileDict(TypedDict):
    column: str
    data_type: str
    null_rate: float
    distinct: int
    is_key: bool
    is_enumerated: bool
    minimum: Optional[float]
    maximum: Optional[float]


class FixDict(TypedDict):
    row: int
    column: str
    before: object
    after: object
    description: str
    confidence: float
    severity: str


class TableReportDict(TypedDict):
    name: str
    entity_type: str
    confidence: float
    scores: dict[str, float]
    mapping: dict[str, str]
    headers: list[str]
    rows: int
    review: list[IssueDict]
    result: ResultDict
    profile: list[ColumnProfileDict]
    fixes: list[FixDict]


class EngineReportDict(TypedDict):
    tables: list[TableReportDict]
    roles: dict[str, Optional[str]]
    cross_file: ResultDict
    aggregate: ResultDict


class ConfigOverrides(TypedDict, total=False):
    classification_threshold: float
    mapping_threshold: float
    similarity_threshold: float
    sample_rows: int
    required_null_rate: float
    iqr_multiplier: float
    outlier_numeric_share: float
    outlier_min_values: int
    priority_bounds: Optional[list[float]]
    max_workers: int
    deadline_seconds: Optional[float]
    max_issues_in_log: int
    profiles_path: Optional[str]
    pipeline_stage: str


class YamlConfig(TypedDict, total=False):
    classification_threshold: float
    mapping_threshold: float
    similarity_threshold: float
    sample_rows: int
    required_null_rate: float
    iqr_multiplier: float
    outlier_numeric_share: float
    outlier_min_values: int
    priority_bounds: Optional[list[float]]
    max_workers: int
    deadline_seconds: Optional[float]
    max_issues_in_log: int
    profiles_path: Optional[str]
    pipeline_stage: str


class ManifestInputsEntry(TypedDict):
    path: str
    sha256: str


class ManifestParameters(TypedDict):
    classification_threshold: float
    mapping_threshold: float
    iqr_multiplier: float
    required_null_rate: float
    max_workers: int
    pipeline_stage: str


class ManifestEnvironment(TypedDict):
    python: str
    platform: str
    pandas: str


class Manifest(TypedDict):
    pipeline_version: str
    started_at: str
    finished_at: str
    inputs: list[ManifestInputsEntry]
    parameters: ManifestParameters
    environment: ManifestEnvironment
