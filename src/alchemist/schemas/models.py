# src/alchemist/schemas/models.py
"""
@brief
Pydantic data models for the Alchemist validation engine.

@details
Defines the canonical model types:
    - ClientRecord / WorkerRecord / TaskRecord: one input row per dataset,
      raw cell values kept as supplied, unknown columns preserved as extras
    - ValidationIssue / ValidationReport: the addressable error model
    - CapacitySummary: intermediate capacity tables exposed to hosts
    - Config: runtime configuration (from config.yaml)

Row records keep their cells raw (strings or numbers). Parsing happens in
alchemist.normalizers so a malformed cell becomes a reported issue instead of
a construction failure.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, Field, model_validator

from alchemist.normalizers.fields import as_text


class DatasetKind(str, Enum):
    CLIENTS = "clients"
    WORKERS = "workers"
    TASKS = "tasks"


class ErrorCategory(str, Enum):
    STRUCTURAL = "structural"
    REFERENCE = "reference"
    CAPACITY = "capacity"


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration contracts.

    @details
    Forbids unknown fields and preserves exact naming rules.
    """

    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "use_enum_values": True,
    }


# ------------------------------------------------------------
# Dataset rows
# ------------------------------------------------------------
class _RecordModel(BaseModel):
    """
    @brief
    Base for one dataset row.

    @details
    Known columns are declared as fields; any other column is accepted and
    kept in the extra-field area so rows round-trip without loss. Records are
    frozen: edits produce a new record with the same `id`.
    """

    model_config = {
        "extra": "allow",
        "frozen": True,
        "populate_by_name": True,
    }

    KIND: ClassVar[DatasetKind]
    KEY_FIELD: ClassVar[str]
    REQUIRED_COLUMNS: ClassVar[tuple[str, ...]]

    id: int | str | None = Field(None, description="Stable row handle assigned by the host")

    def columns(self) -> tuple[str, ...]:
        """Column names this row was built with (row handle excluded)."""
        declared = [
            name for name in type(self).model_fields if name != "id" and name in self.model_fields_set
        ]
        return tuple(declared) + tuple(self.extra_fields)

    @property
    def extra_fields(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def to_row(self) -> dict[str, Any]:
        """Plain row: handle plus exactly the columns the record carries."""
        extras = self.extra_fields
        row: dict[str, Any] = {"id": self.id}
        for name in self.columns():
            row[name] = extras[name] if name in extras else getattr(self, name)
        return row

    @property
    def key(self) -> str | None:
        """Primary key as trimmed text, None when blank."""
        text = as_text(getattr(self, self.KEY_FIELD))
        return text or None


class ClientRecord(_RecordModel):
    """One row of the clients dataset."""

    KIND: ClassVar[DatasetKind] = DatasetKind.CLIENTS
    KEY_FIELD: ClassVar[str] = "ClientID"
    REQUIRED_COLUMNS: ClassVar[tuple[str, ...]] = (
        "ClientID",
        "ClientName",
        "PriorityLevel",
        "RequestedTaskIDs",
        "GroupTag",
        "AttributesJSON",
    )

    ClientID: Any = Field(None, description="External client key (unique)")
    ClientName: Any = None
    PriorityLevel: Any = Field(None, description="Integer 1..5")
    RequestedTaskIDs: Any = Field(None, description="Comma-separated TaskIDs")
    GroupTag: Any = None
    AttributesJSON: Any = Field(None, description="Empty or a JSON document")


class WorkerRecord(_RecordModel):
    """One row of the workers dataset."""

    KIND: ClassVar[DatasetKind] = DatasetKind.WORKERS
    KEY_FIELD: ClassVar[str] = "WorkerID"
    REQUIRED_COLUMNS: ClassVar[tuple[str, ...]] = (
        "WorkerID",
        "WorkerName",
        "Skills",
        "AvailableSlots",
        "MaxLoadPerPhase",
        "WorkerGroup",
        "QualificationLevel",
    )

    WorkerID: Any = Field(None, description="External worker key (unique)")
    WorkerName: Any = None
    Skills: Any = Field(None, description="Comma-separated skill tokens")
    AvailableSlots: Any = Field(None, description="Phase numbers: [1,2], 1-3 or 1,2,3")
    MaxLoadPerPhase: Any = Field(None, description="Integer >= 0")
    WorkerGroup: Any = None
    QualificationLevel: Any = None


class TaskRecord(_RecordModel):
    """One row of the tasks dataset."""

    KIND: ClassVar[DatasetKind] = DatasetKind.TASKS
    KEY_FIELD: ClassVar[str] = "TaskID"
    REQUIRED_COLUMNS: ClassVar[tuple[str, ...]] = (
        "TaskID",
        "TaskName",
        "Category",
        "Duration",
        "RequiredSkills",
        "PreferredPhases",
        "MaxConcurrent",
    )

    TaskID: Any = Field(None, description="External task key (unique)")
    TaskName: Any = None
    Category: Any = None
    Duration: Any = Field(None, description="Integer >= 1 (phases required)")
    RequiredSkills: Any = Field(None, description="Comma-separated skill tokens")
    PreferredPhases: Any = Field(None, description="Phase numbers: [1,2], 1-3 or 1,2,3")
    MaxConcurrent: Any = Field(None, description="Integer >= 1")


RECORD_TYPES: dict[DatasetKind, type[_RecordModel]] = {
    DatasetKind.CLIENTS: ClientRecord,
    DatasetKind.WORKERS: WorkerRecord,
    DatasetKind.TASKS: TaskRecord,
}


# ------------------------------------------------------------
# Validation output
# ------------------------------------------------------------
class RowReference(BaseModel):
    """
    @brief
    Address of the row an issue belongs to.

    @details
    `index` is the 0-based position in the dataset snapshot, `row_id` the
    host's row handle and `key` the external primary key (when not blank).
    """

    model_config = {"frozen": True}

    index: int
    row_id: int | str | None = None
    key: str | None = None


class ValidationIssue(BaseModel):
    """
    @brief
    One finding of a validation pass.

    @details
    Dataset-level findings (missing columns, duplicate keys, phase saturation)
    carry no row reference.
    """

    model_config = {"frozen": True, "use_enum_values": True}

    dataset: DatasetKind
    category: ErrorCategory
    message: str
    row: RowReference | None = None
    field: str | None = None
    entities: dict[str, Any] | None = None


class CapacitySummary(BaseModel):
    """Aggregate tables computed by the capacity analyzer."""

    phase_capacity: dict[int, int] = Field(default_factory=dict)
    phase_demand: dict[int, int] = Field(default_factory=dict)
    worker_count_by_skill: dict[str, int] = Field(default_factory=dict)


class ValidationReport(BaseModel):
    """
    @brief
    Issues of one validation pass, keyed by dataset kind.

    @details
    Each list keeps detection order: schema, then reference, then capacity.
    The report is valid exactly when every list is empty.
    """

    clients: list[ValidationIssue] = Field(default_factory=list)
    workers: list[ValidationIssue] = Field(default_factory=list)
    tasks: list[ValidationIssue] = Field(default_factory=list)
    summary: CapacitySummary | None = None

    def __getitem__(self, kind: DatasetKind | str) -> list[ValidationIssue]:
        return self.for_dataset(kind)

    def for_dataset(self, kind: DatasetKind | str) -> list[ValidationIssue]:
        return getattr(self, DatasetKind(kind).value)

    def iter_issues(self) -> Iterator[ValidationIssue]:
        for kind in DatasetKind:
            yield from self.for_dataset(kind)

    def is_empty(self) -> bool:
        return not any(self.for_dataset(kind) for kind in DatasetKind)

    @property
    def valid(self) -> bool:
        return self.is_empty()

    def by_category(self, category: ErrorCategory | str) -> list[ValidationIssue]:
        wanted = ErrorCategory(category).value
        return [issue for issue in self.iter_issues() if issue.category == wanted]

    def counts(self) -> dict[str, int]:
        return {kind.value: len(self.for_dataset(kind)) for kind in DatasetKind}

    def total(self) -> int:
        return sum(self.counts().values())

    def as_messages(self) -> dict[str, list[str]]:
        """Plain message lists per dataset, empty datasets omitted."""
        return {
            kind.value: [issue.message for issue in self.for_dataset(kind)]
            for kind in DatasetKind
            if self.for_dataset(kind)
        }


# ------------------------------------------------------------
# Runtime configuration
# ------------------------------------------------------------
class CapacityConfig(_StrictBaseModel):
    """
    @brief
    Switches for the capacity feasibility checks.

    @details
    All checks are on by default; disabling one removes its issues from the
    report but the capacity summary is still computed.
    """

    check_worker_overload: bool = Field(True, description="Flag |AvailableSlots| < MaxLoadPerPhase")
    check_phase_saturation: bool = Field(True, description="Flag phase demand > phase capacity")
    check_skill_concurrency: bool = Field(
        True, description="Flag MaxConcurrent above the qualified worker count"
    )


class ReportConfig(_StrictBaseModel):
    """Controls persistence of the validation report."""

    write_report: bool = Field(False, description="Write the report as JSON after each pass")
    output_dir: str = Field("data/output", description="Directory for report files")
    filename: str = Field("validation_report.json", description="Report file name")


class Config(_StrictBaseModel):
    """
    @brief
    Full runtime configuration loaded from config.yaml.

    @details
    Domain bounds for scored fields and phase numbers, capacity check switches, report
    persistence and logging level.
    """

    priority_min: int = Field(1, description="Lowest accepted PriorityLevel")
    priority_max: int = Field(5, description="Highest accepted PriorityLevel")
    max_phase: int = Field(
        1000, ge=0, description="Highest phase accepted in AvailableSlots and PreferredPhases"
    )
    capacity: CapacityConfig = Field(default_factory=CapacityConfig.model_construct)
    report: ReportConfig = Field(default_factory=ReportConfig.model_construct)
    log_level: str = Field("INFO", description="Logging level for host scripts")

    @model_validator(mode="after")
    def _check_priority_bounds(self) -> Config:
        if self.priority_min > self.priority_max:
            raise ValueError(
                f"priority_min ({self.priority_min}) must not exceed priority_max ({self.priority_max})"
            )
        return self


__all__ = [
    "CapacityConfig",
    "CapacitySummary",
    "ClientRecord",
    "Config",
    "DatasetKind",
    "ErrorCategory",
    "RECORD_TYPES",
    "ReportConfig",
    "RowReference",
    "TaskRecord",
    "ValidationIssue",
    "ValidationReport",
    "WorkerRecord",
]
