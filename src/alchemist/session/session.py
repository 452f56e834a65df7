# src/alchemist/session/session.py
"""
@brief
Host-side holder of the current dataset snapshot and its last report.

@details
The engine is a pure function of three datasets. A host that edits data
interactively needs one place that owns "the current snapshot" together with
"the report for exactly that snapshot". ValidationSession is that place:
every mutation (load, row edit, bulk correction) builds a new immutable
snapshot, validates it, and installs snapshot and report together while
holding the session lock. Readers therefore never see a snapshot paired with
a report of another snapshot, and no pass ever observes a half-applied edit.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from alchemist.dataloader.rows import coerce_rows, resolve_kind
from alchemist.errors import DataError
from alchemist.schemas.models import (
    RECORD_TYPES,
    ClientRecord,
    Config,
    DatasetKind,
    TaskRecord,
    ValidationReport,
    WorkerRecord,
    _RecordModel,
)
from alchemist.validator.engine import validate_datasets

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DatasetSnapshot:
    """Point-in-time copy of all three datasets."""

    clients: tuple[ClientRecord, ...] = ()
    workers: tuple[WorkerRecord, ...] = ()
    tasks: tuple[TaskRecord, ...] = ()

    def for_dataset(self, kind: DatasetKind | str) -> tuple[_RecordModel, ...]:
        return getattr(self, resolve_kind(kind, source="DatasetSnapshot.for_dataset").value)

    def replace(self, kind: DatasetKind | str, rows: Any) -> DatasetSnapshot:
        """New snapshot with one dataset swapped for `rows`."""
        dataset = resolve_kind(kind, source="DatasetSnapshot.replace")
        records = coerce_rows(dataset, rows)
        return DatasetSnapshot(
            clients=records if dataset is DatasetKind.CLIENTS else self.clients,  # type: ignore[arg-type]
            workers=records if dataset is DatasetKind.WORKERS else self.workers,  # type: ignore[arg-type]
            tasks=records if dataset is DatasetKind.TASKS else self.tasks,  # type: ignore[arg-type]
        )

    def as_rows(self) -> dict[str, list[dict[str, Any]]]:
        """Plain dict rows per dataset, extra columns included."""
        return {
            kind.value: [record.to_row() for record in self.for_dataset(kind)]
            for kind in DatasetKind
        }


@dataclass(frozen=True, slots=True)
class CorrectionOutcome:
    """
    Result of trying a candidate correction.

    Fields:
        accepted: True if the candidate replaced the current snapshot.
        report: Report of the candidate snapshot (accepted or not).
        previous_total: Issue count of the snapshot the candidate was judged against.
    """

    accepted: bool
    report: ValidationReport
    previous_total: int = 0
    changed: tuple[str, ...] = ()


class ValidationSession:
    """
    @brief
    Owns the current snapshot and the report validated against it.

    @details
    Every public mutator re-validates the whole new snapshot (no incremental
    diffing) and returns the resulting report. The lock is held across
    read, rebuild, validate and install, so concurrent mutators apply one
    after another instead of overwriting each other's edits.
    """

    def __init__(self, cfg: Config | None = None) -> None:
        self.cfg = cfg or Config()
        self._lock = threading.RLock()
        self._snapshot = DatasetSnapshot()
        self._report = self._validate(self._snapshot)

    # ---------- Readers ----------
    @property
    def snapshot(self) -> DatasetSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def report(self) -> ValidationReport:
        with self._lock:
            return self._report

    def state(self) -> tuple[DatasetSnapshot, ValidationReport]:
        """Snapshot and its report, read together."""
        with self._lock:
            return self._snapshot, self._report

    def correction_request(self) -> dict[str, Any]:
        """
        @brief
        Payload for a correction-suggestion collaborator.

        @details
        Carries the three datasets as plain rows plus the current issue
        messages per dataset. Whatever the collaborator returns must go
        back through apply_correction() before it is trusted.
        """
        with self._lock:
            payload: dict[str, Any] = self._snapshot.as_rows()
            payload["validation_errors"] = self._report.as_messages()
            return payload

    # ---------- Mutators ----------
    def load(self, kind: DatasetKind | str, rows: Any) -> ValidationReport:
        """Replace one dataset (file (re)load) and re-validate."""
        with self._lock:
            dataset = resolve_kind(kind, source="ValidationSession.load")
            snapshot = self._snapshot.replace(dataset, rows)
            return self._install(snapshot, reason=f"load {dataset.value}")

    def load_all(
        self, clients: Any = None, workers: Any = None, tasks: Any = None
    ) -> ValidationReport:
        """Replace any of the three datasets in one step; None keeps the current one."""
        with self._lock:
            snapshot = self._snapshot
            for kind, rows in (
                (DatasetKind.CLIENTS, clients),
                (DatasetKind.WORKERS, workers),
                (DatasetKind.TASKS, tasks),
            ):
                if rows is not None:
                    snapshot = snapshot.replace(kind, rows)
            return self._install(snapshot, reason="batch load")

    def edit_row(
        self, kind: DatasetKind | str, row_id: int | str, changes: Mapping[str, Any]
    ) -> ValidationReport:
        """
        @brief
        Apply a cell-level edit to the row whose handle is `row_id`.

        @details
        The edited row keeps its handle and position; `changes` may set
        known or extra columns but never the handle itself.

        @raises
            DataError
                If no row of the dataset has handle `row_id`.
        """
        dataset = resolve_kind(kind, source="ValidationSession.edit_row")
        with self._lock:
            records = list(self._snapshot.for_dataset(dataset))
            position = next((i for i, r in enumerate(records) if r.id == row_id), None)
            if position is None:
                raise DataError(
                    f"No {dataset.value} row with id {row_id!r}",
                    source="ValidationSession.edit_row",
                    suggested_action="Edit rows by the handle they were loaded with.",
                )

            data = records[position].to_row()
            data.update({k: v for k, v in changes.items() if k != "id"})
            records[position] = RECORD_TYPES[dataset].model_validate(data)

            snapshot = self._snapshot.replace(dataset, records)
            return self._install(snapshot, reason=f"edit {dataset.value} row {row_id!r}")

    def apply_correction(
        self, candidate: Mapping[str, Any], *, force: bool = False
    ) -> CorrectionOutcome:
        """
        @brief
        Re-validate candidate replacement datasets and install them if acceptable.

        @details
        `candidate` maps dataset kinds to full replacement row collections;
        datasets it does not name stay as they are. The candidate is
        accepted when it carries no more issues than the current snapshot,
        or unconditionally with `force=True`.

        @returns
            CorrectionOutcome with the candidate's report.
        """
        with self._lock:
            snapshot = self._snapshot
            changed: list[str] = []
            for key, rows in candidate.items():
                dataset = resolve_kind(key, source="ValidationSession.apply_correction")
                snapshot = snapshot.replace(dataset, rows)
                changed.append(dataset.value)

            report = self._validate(snapshot)
            previous_total = self._report.total()
            accepted = force or report.total() <= previous_total

            if accepted:
                self._snapshot, self._report = snapshot, report
                logger.info(
                    "Correction applied to %s: %d -> %d issue(s)",
                    ", ".join(changed) or "nothing",
                    previous_total,
                    report.total(),
                )
            else:
                logger.warning(
                    "Correction rejected: candidate has %d issue(s), current snapshot has %d",
                    report.total(),
                    previous_total,
                )
            return CorrectionOutcome(
                accepted=accepted,
                report=report,
                previous_total=previous_total,
                changed=tuple(changed),
            )

    # ---------- Internals ----------
    def _validate(self, snapshot: DatasetSnapshot) -> ValidationReport:
        return validate_datasets(
            snapshot.clients, snapshot.workers, snapshot.tasks, self.cfg, write_report=False
        )

    def _install(self, snapshot: DatasetSnapshot, reason: str) -> ValidationReport:
        report = self._validate(snapshot)
        self._snapshot, self._report = snapshot, report
        logger.debug("Snapshot replaced (%s): %s", reason, report.counts())
        return report


__all__ = ["CorrectionOutcome", "DatasetSnapshot", "ValidationSession"]
