# src/alchemist/validator/schema_validator.py
from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence

from alchemist.normalizers.canonical import (
    CanonicalClient,
    CanonicalTask,
    CanonicalWorker,
    _CanonicalRow,
)
from alchemist.normalizers.fields import ParseResult, as_text, clip_text
from alchemist.schemas.models import (
    ClientRecord,
    Config,
    DatasetKind,
    ErrorCategory,
    TaskRecord,
    ValidationIssue,
    WorkerRecord,
)
from alchemist.validator.report import IssueLog

logger = logging.getLogger(__name__)


class SchemaValidator:
    """
    @brief
    Per-dataset structural checks.

    @details
    For every dataset: required columns (judged on the first row) and key
    uniqueness, then one pass over the rows (blank key, then the parsed
    domain fields), so row issues come out in row order. Checks never stop
    early: one row can yield several issues, and every row is visited.
    """

    def __init__(self, cfg: Config) -> None:
        self.cfg = cfg
        self.log = IssueLog(ErrorCategory.STRUCTURAL)

    def run(
        self,
        clients: Sequence[CanonicalClient],
        workers: Sequence[CanonicalWorker],
        tasks: Sequence[CanonicalTask],
    ) -> list[ValidationIssue]:
        # (1) Dataset-level checks, then one pass over the rows, per dataset
        for kind, rows, required in (
            (DatasetKind.CLIENTS, clients, ClientRecord.REQUIRED_COLUMNS),
            (DatasetKind.WORKERS, workers, WorkerRecord.REQUIRED_COLUMNS),
            (DatasetKind.TASKS, tasks, TaskRecord.REQUIRED_COLUMNS),
        ):
            self._check_required_columns(kind, rows, required)
            self._check_duplicate_keys(kind, rows)

            # (2) Row issues stay in row order: key first, then domain fields
            for row in rows:
                self._check_missing_key(kind, row)
                if kind is DatasetKind.CLIENTS:
                    self._check_client_domains(row)
                elif kind is DatasetKind.WORKERS:
                    self._check_worker_domains(row)
                else:
                    self._check_task_domains(row)

        logger.debug("Schema checks produced %d issue(s)", len(self.log.issues))
        return self.log.issues

    # ---------- Dataset-level checks ----------
    def _check_required_columns(
        self, kind: DatasetKind, rows: Sequence[_CanonicalRow], required: Sequence[str]
    ) -> None:
        """One aggregated issue naming every required column missing from the first row."""
        if not rows:
            return
        present = rows[0].columns
        missing = [col for col in required if col not in present]
        if missing:
            self.log.add(
                kind,
                f"Missing required columns for {kind.value}: {', '.join(missing)}",
                entities={"missing_columns": missing},
            )

    def _check_duplicate_keys(self, kind: DatasetKind, rows: Sequence[_CanonicalRow]) -> None:
        """
        @brief
        Detect primary keys used by more than one row.

        @details
        Keys compare as trimmed text; blank keys are left to the row pass.
        All duplicated values go into a single issue, each value named once,
        in order of first appearance.
        """
        positions: dict[str, list[int]] = defaultdict(list)
        for row in rows:
            if row.key is not None:
                positions[row.key].append(row.index)

        duplicates = [key for key, idx in positions.items() if len(idx) > 1]
        if duplicates:
            self.log.add(
                kind,
                f"Duplicate IDs found for {kind.value}: {', '.join(duplicates)}",
                entities={
                    "duplicate_ids": duplicates,
                    "rows": {key: [i + 1 for i in positions[key]] for key in duplicates},
                },
            )

    # ---------- Row-level checks ----------
    def _check_missing_key(self, kind: DatasetKind, row: _CanonicalRow) -> None:
        """A key column that is present but blank; an absent column is a missing-columns issue."""
        key_field = row.record.KEY_FIELD
        if row.key is None and row.has(key_field):
            self.log.add(kind, f"{row.label}: Missing {key_field}.", row=row.ref, field=key_field)

    def _report_failure(
        self,
        kind: DatasetKind,
        row: _CanonicalRow,
        field: str,
        result: ParseResult,
        message: str,
    ) -> None:
        # Absent columns are covered by the missing-columns issue
        if not row.has(field) or result.ok:
            return
        self.log.add(
            kind,
            f"{row.label}: {message} ({result.reason}).",
            row=row.ref,
            field=field,
            entities={"value": clip_text(as_text(getattr(row.record, field)))},
        )

    def _check_client_domains(self, row: CanonicalClient) -> None:
        lo, hi = self.cfg.priority_min, self.cfg.priority_max
        self._report_failure(
            DatasetKind.CLIENTS,
            row,
            "PriorityLevel",
            row.priority,
            f"Invalid PriorityLevel, must be between {lo} and {hi}",
        )
        self._report_failure(
            DatasetKind.CLIENTS, row, "AttributesJSON", row.attributes, "Malformed AttributesJSON"
        )

    def _check_worker_domains(self, row: CanonicalWorker) -> None:
        self._report_failure(
            DatasetKind.WORKERS, row, "AvailableSlots", row.slots, "Malformed AvailableSlots"
        )
        self._report_failure(
            DatasetKind.WORKERS,
            row,
            "MaxLoadPerPhase",
            row.max_load,
            "Invalid MaxLoadPerPhase, must be a non-negative integer",
        )

    def _check_task_domains(self, row: CanonicalTask) -> None:
        self._report_failure(
            DatasetKind.TASKS,
            row,
            "Duration",
            row.duration,
            "Invalid Duration, must be 1 or greater",
        )
        self._report_failure(
            DatasetKind.TASKS,
            row,
            "MaxConcurrent",
            row.max_concurrent,
            "Invalid MaxConcurrent, must be 1 or greater",
        )
        self._report_failure(
            DatasetKind.TASKS, row, "PreferredPhases", row.phases, "Malformed PreferredPhases"
        )


__all__ = ["SchemaValidator"]
