# src/alchemist/normalizers/canonical.py
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from alchemist.normalizers.fields import (
    ParseResult,
    parse_int,
    parse_json_attributes,
    parse_phases,
    split_list,
    split_set,
)
from alchemist.schemas.models import (
    ClientRecord,
    Config,
    RowReference,
    TaskRecord,
    WorkerRecord,
    _RecordModel,
)


@dataclass(frozen=True, slots=True)
class _CanonicalRow:
    """
    @brief
    Parsed view of one record, built once per validation pass.

    @details
    Holds the source record, its position in the snapshot and the set of
    columns it carried. Subclasses add one ParseResult per structured field;
    the schema validator reports failed results, the other checks read the
    values of successful ones.
    """

    index: int
    record: _RecordModel
    columns: frozenset[str]

    @property
    def key(self) -> str | None:
        return self.record.key

    @property
    def ref(self) -> RowReference:
        return RowReference(index=self.index, row_id=self.record.id, key=self.key)

    @property
    def label(self) -> str:
        return f"Row {self.index + 1} ({self.record.KEY_FIELD}: {self.key or 'N/A'})"

    def has(self, column: str) -> bool:
        return column in self.columns


@dataclass(frozen=True, slots=True)
class CanonicalClient(_CanonicalRow):
    priority: ParseResult
    requested_task_ids: ParseResult
    attributes: ParseResult


@dataclass(frozen=True, slots=True)
class CanonicalWorker(_CanonicalRow):
    skills: ParseResult
    slots: ParseResult
    max_load: ParseResult


@dataclass(frozen=True, slots=True)
class CanonicalTask(_CanonicalRow):
    duration: ParseResult
    required_skills: ParseResult
    phases: ParseResult
    max_concurrent: ParseResult


def value_or(result: ParseResult, default: Any) -> Any:
    """Parsed value of a successful result, default otherwise."""
    return result.value if result.ok else default


def canonicalize_clients(records: Sequence[ClientRecord], cfg: Config) -> list[CanonicalClient]:
    return [
        CanonicalClient(
            index=i,
            record=r,
            columns=frozenset(r.columns()),
            priority=parse_int(r.PriorityLevel, minimum=cfg.priority_min, maximum=cfg.priority_max),
            requested_task_ids=split_list(r.RequestedTaskIDs),
            attributes=parse_json_attributes(r.AttributesJSON),
        )
        for i, r in enumerate(records)
    ]


def canonicalize_workers(records: Sequence[WorkerRecord], cfg: Config) -> list[CanonicalWorker]:
    return [
        CanonicalWorker(
            index=i,
            record=r,
            columns=frozenset(r.columns()),
            skills=split_set(r.Skills),
            slots=parse_phases(r.AvailableSlots, max_phase=cfg.max_phase),
            max_load=parse_int(r.MaxLoadPerPhase, minimum=0),
        )
        for i, r in enumerate(records)
    ]


def canonicalize_tasks(records: Sequence[TaskRecord], cfg: Config) -> list[CanonicalTask]:
    return [
        CanonicalTask(
            index=i,
            record=r,
            columns=frozenset(r.columns()),
            duration=parse_int(r.Duration, minimum=1),
            required_skills=split_set(r.RequiredSkills),
            phases=parse_phases(r.PreferredPhases, max_phase=cfg.max_phase),
            max_concurrent=parse_int(r.MaxConcurrent, minimum=1),
        )
        for i, r in enumerate(records)
    ]


__all__ = [
    "CanonicalClient",
    "CanonicalTask",
    "CanonicalWorker",
    "canonicalize_clients",
    "canonicalize_tasks",
    "canonicalize_workers",
    "value_or",
]
