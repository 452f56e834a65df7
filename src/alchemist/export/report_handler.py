# src/alchemist/export/report_handler.py
from __future__ import annotations

import json
import logging
from pathlib import Path

from alchemist.schemas.models import ValidationReport
from alchemist.session.session import DatasetSnapshot

logger = logging.getLogger(__name__)


class ReportHandler:
    """
    @brief
    Gates a validated snapshot and writes an error summary when it is not clean.

    @details
    Receives the report of a validation pass together with the snapshot it
    was computed from. A clean report releases the snapshot to downstream
    consumers (export, allocation). Otherwise the per-dataset messages are
    written to 'validation_errors.json' in output_dir and None is returned,
    so the host can stop without losing the diagnostics.
    """

    ERRORS_FILENAME = "validation_errors.json"

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def handle(
        self, report: ValidationReport, snapshot: DatasetSnapshot
    ) -> DatasetSnapshot | None:
        """
        @brief
        Returns the snapshot when valid, otherwise writes the error summary.

        @details
        I/O failures while writing the summary are logged and do not raise;
        the return value alone tells the caller whether to continue.
        """
        # (1) Clean snapshot goes downstream
        if report.is_empty():
            logger.info(
                "PostValidate: %d client(s), %d worker(s), %d task(s) ready.",
                len(snapshot.clients),
                len(snapshot.workers),
                len(snapshot.tasks),
            )
            return snapshot

        # (2) Otherwise write the message summary
        out_path = self.output_dir / self.ERRORS_FILENAME
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with out_path.open("w", encoding="utf-8", errors="backslashreplace") as f:
                json.dump(report.as_messages(), f, ensure_ascii=False, indent=2)
            logger.error(
                "PostValidate: %d issue(s) block the snapshot. See %s",
                report.total(),
                out_path,
            )
        except OSError as e:
            logger.error("PostValidate: failed to write error summary: %s", e)

        return None


__all__ = ["ReportHandler"]
