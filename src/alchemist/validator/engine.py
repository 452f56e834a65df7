# src/alchemist/validator/engine.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from alchemist.dataloader.rows import coerce_rows
from alchemist.export.report_export import write_report_json
from alchemist.normalizers.canonical import (
    canonicalize_clients,
    canonicalize_tasks,
    canonicalize_workers,
)
from alchemist.schemas.models import (
    CapacitySummary,
    ClientRecord,
    Config,
    DatasetKind,
    TaskRecord,
    ValidationIssue,
    ValidationReport,
    WorkerRecord,
)
from alchemist.validator.capacity import CapacityAnalyzer
from alchemist.validator.reference_validator import ReferenceValidator
from alchemist.validator.report import ReportAggregator
from alchemist.validator.schema_validator import SchemaValidator

logger = logging.getLogger(__name__)


# ---------------------------
# ENGINE CLASS (instance core)
# ----------------------------
class ValidationEngine:
    """
    @brief
    One full validation pass over a clients/workers/tasks snapshot.

    @details
    Runs the schema, cross-reference and capacity stages in that order and
    merges their findings into a ValidationReport. Data-quality problems
    never raise: every malformed cell, dangling reference or infeasible
    configuration becomes an issue and the pass continues. Only inputs that
    are not row collections at all are rejected, with DataError, while the
    engine is constructed.

    The engine keeps no state between passes. Input rows are copied into
    immutable records on construction, so the caller may keep mutating its
    own containers without affecting a running pass.
    """

    # ---------- Constructor ----------
    def __init__(
        self,
        clients: Any,
        workers: Any,
        tasks: Any,
        cfg: Config | None = None,
    ) -> None:
        """
        @brief
        Capture the snapshot to validate.

        @params
            clients, workers, tasks : Any
                Row collections (list of dicts, records, or DataFrame).
            cfg : Config | None
                Runtime configuration; defaults apply when omitted.

        @raises
            DataError
                If any collection is not a row collection.
        """
        self.cfg = cfg or Config()
        self.clients: tuple[ClientRecord, ...] = coerce_rows(DatasetKind.CLIENTS, clients)  # type: ignore[assignment]
        self.workers: tuple[WorkerRecord, ...] = coerce_rows(DatasetKind.WORKERS, workers)  # type: ignore[assignment]
        self.tasks: tuple[TaskRecord, ...] = coerce_rows(DatasetKind.TASKS, tasks)  # type: ignore[assignment]

        self.schema_issues: list[ValidationIssue] = []
        self.reference_issues: list[ValidationIssue] = []
        self.capacity_issues: list[ValidationIssue] = []
        self.summary: CapacitySummary | None = None

    # ---------- Public lifecycle API ----------
    def run_all_checks(self) -> None:
        """
        @brief
        Execute every stage on the captured snapshot.

        @details
        Structured cells are parsed once up front; each stage then reads the
        same canonical rows. Stage results replace those of any earlier call,
        so running twice yields the same outcome.
        """
        # (1) Parse structured cells once
        clients = canonicalize_clients(self.clients, self.cfg)
        workers = canonicalize_workers(self.workers, self.cfg)
        tasks = canonicalize_tasks(self.tasks, self.cfg)

        # (2) Stages in report order
        self.schema_issues = SchemaValidator(self.cfg).run(clients, workers, tasks)
        self.reference_issues = ReferenceValidator().run(clients, workers, tasks)
        self.capacity_issues, self.summary = CapacityAnalyzer(self.cfg.capacity).run(
            workers, tasks
        )

    def build_report(self) -> ValidationReport:
        """Merge stage results (schema, reference, capacity) into one report."""
        aggregator = ReportAggregator()
        aggregator.add("schema", self.schema_issues)
        aggregator.add("reference", self.reference_issues)
        aggregator.add("capacity", self.capacity_issues)
        report = aggregator.build(self.summary)

        counts = report.counts()
        if report.is_empty():
            logger.info(
                "Validation passed: %d client(s), %d worker(s), %d task(s)",
                len(self.clients),
                len(self.workers),
                len(self.tasks),
            )
        else:
            logger.info(
                "Validation found %d issue(s): clients=%d workers=%d tasks=%d",
                report.total(),
                counts["clients"],
                counts["workers"],
                counts["tasks"],
            )
        return report

    def save_report(
        self,
        report: ValidationReport,
        out_dir: Path | None = None,
        filename: str | None = None,
    ) -> Path:
        """Persist the report as JSON; directory and name default to cfg.report."""
        return write_report_json(
            report,
            out_dir=out_dir or Path(self.cfg.report.output_dir),
            filename=filename or self.cfg.report.filename,
        )


# ----------------------------
# THIN FACADE (static script call)
# ----------------------------
def validate_datasets(
    clients: Any,
    workers: Any,
    tasks: Any,
    cfg: Config | None = None,
    *,
    write_report: bool | None = None,
    out_dir: Path | None = None,
    filename: str | None = None,
) -> ValidationReport:
    """
    @brief
    Validate a clients/workers/tasks snapshot in one call.

    @details
    Builds a ValidationEngine, runs every stage and returns the report.
    When `write_report` is True (or left None with cfg.report.write_report
    enabled) the report is also written as JSON. The in-memory report is
    returned either way; an empty report is the only success signal.

    @returns
        ValidationReport keyed by dataset kind.
    """
    engine = ValidationEngine(clients, workers, tasks, cfg)
    engine.run_all_checks()
    report = engine.build_report()

    should_write = engine.cfg.report.write_report if write_report is None else write_report
    if should_write:
        engine.save_report(report, out_dir=out_dir, filename=filename)
    return report


__all__ = ["ValidationEngine", "validate_datasets"]
