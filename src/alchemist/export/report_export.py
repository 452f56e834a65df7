# src/alchemist/export/report_export.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import pandas as pd

from alchemist.errors import ValidationError
from alchemist.schemas.models import ValidationReport

logger = logging.getLogger(__name__)

FRAME_COLUMNS = ("dataset", "category", "row", "row_id", "key", "field", "message")


def report_to_frame(report: ValidationReport) -> pd.DataFrame:
    """
    @brief
    Flatten a report into one table row per issue.

    @details
    Rows keep report order (dataset, then detection order), so grouping by
    dataset and category preserves the within-group sequence. `row` is the
    1-based row number shown to users; dataset-level issues leave the row
    columns empty.

    @params
        report : ValidationReport
            Result of a validation pass.

    @returns
        DataFrame with columns FRAME_COLUMNS (empty frame for a clean report).
    """
    records: list[dict[str, Any]] = []
    for issue in report.iter_issues():
        ref = issue.row
        records.append(
            {
                "dataset": issue.dataset,
                "category": issue.category,
                "row": ref.index + 1 if ref is not None else None,
                "row_id": ref.row_id if ref is not None else None,
                "key": ref.key if ref is not None else None,
                "field": issue.field,
                "message": issue.message,
            }
        )
    return pd.DataFrame.from_records(records, columns=list(FRAME_COLUMNS))


def write_report_json(
    report: ValidationReport,
    out_dir: Path | None = None,
    filename: str = "validation_report.json",
) -> Path:
    """
    @brief
    Write the report as JSON, atomically.

    @details
    Keys are sorted and no timestamp is added, so an unchanged snapshot
    always produces a byte-identical file.

    @raises
        ValidationError
            On serialization or filesystem failure.
    """
    target_dir = Path(out_dir or "data/output")
    payload = json.dumps(
        report.model_dump(mode="json"), ensure_ascii=False, sort_keys=True, indent=2
    )
    target = target_dir / filename
    _atomic_write_text(target, payload + "\n")
    logger.info("Validation report saved: %s", target)
    return target


def write_report_csv(
    report: ValidationReport,
    out_dir: Path | None = None,
    filename: str = "validation_report.csv",
) -> Path:
    """Write the flattened issue table as UTF-8 CSV."""
    target_dir = Path(out_dir or "data/output")
    target = target_dir / filename
    text = report_to_frame(report).to_csv(index=False)
    _atomic_write_text(target, text)
    logger.info("Validation table saved: %s", target)
    return target


def _atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """
    @brief
    Replace `path` with `text` through a temporary file in the same directory.

    @details
    Characters the encoding cannot represent (lone surrogates from a
    decoded snapshot) are written as backslash escapes.

    @raises
        ValidationError
            On directory, write or rename failure (the temporary file is removed).
    """
    tmp_path: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=path.name + ".", dir=str(path.parent))
        with open(fd, "w", encoding=encoding, errors="backslashreplace", newline="") as f:
            f.write(text)
        os.replace(tmp_path, path)
        tmp_path = None
    except (OSError, ValueError) as e:
        raise ValidationError(
            f"Failed to write validation report {path}: {e}",
            source="report_export._atomic_write_text",
            suggested_action="Check the output directory, disk permissions and free space.",
        ) from e
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)


__all__ = ["FRAME_COLUMNS", "report_to_frame", "write_report_csv", "write_report_json"]
