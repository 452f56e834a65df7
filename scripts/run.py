# scripts/run.py
from __future__ import annotations

import argparse
import json
import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Any

from alchemist.dataloader.config_loader import ConfigLoader
from alchemist.errors import AlchemistError, DataError
from alchemist.export.report_export import write_report_csv, write_report_json
from alchemist.export.report_handler import ReportHandler
from alchemist.session import ValidationSession


def _setup_logging() -> None:
    """
    @brief
    Initializes global logging configuration.

    @details
    INFO until the config is read; run_validation() then applies cfg.log_level.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="alchemist-run",
        description="Validate a clients/workers/tasks snapshot: load → validate → report",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config YAML (defaults apply when omitted)",
    )
    parser.add_argument(
        "--input",
        type=str,
        default="data/input/snapshot.json",
        help="Snapshot JSON with 'clients', 'workers' and 'tasks' arrays "
        "(default: data/input/snapshot.json)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="data/output",
        help="Output directory for reports (default: data/output)",
    )
    return parser.parse_args(argv)


def _load_snapshot(input_path: Path) -> dict[str, Any]:
    """
    @brief
    Reads the snapshot JSON file.

    @details
    A dataset key missing from the file is treated as an empty dataset.
    Shape problems inside the arrays are left to the engine.

    @raises
        DataError
            If the file is missing, unreadable, not JSON or not a JSON object.
    """
    try:
        text = input_path.read_text(encoding="utf-8")
    except OSError as e:
        raise DataError(
            f"Cannot read snapshot {input_path}: {e}",
            source="scripts.run",
            suggested_action="Check the --input path.",
        ) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DataError(
            f"Snapshot {input_path} is not valid JSON: {e}",
            source="scripts.run",
            suggested_action="Export the datasets as a JSON object of arrays.",
        ) from e

    if not isinstance(data, dict):
        raise DataError(
            f"Snapshot {input_path} must be a JSON object, got {type(data).__name__}",
            source="scripts.run",
            suggested_action='Use {"clients": [...], "workers": [...], "tasks": [...]}.',
        )
    return {key: data.get(key, []) for key in ("clients", "workers", "tasks")}


def run_validation(
    config_path: Path | None, input_path: Path, output_dir: Path
) -> dict[str, Any]:
    """
    @brief
    Executes one validation pass over a snapshot file.

    @details
    (1) Load configuration and snapshot.
    (2) Validate through a ValidationSession.
    (3) Write validation_report.json and validation_report.csv; when the
        report is not empty, also validation_errors.json.

    @returns
        Dictionary with the validity flag, per-dataset issue counts and
        artifact paths.

    @raises
        AlchemistError
            On configuration, input contract or report persistence failures.
    """
    t0 = time.perf_counter()

    # (1) Config and snapshot
    cfg = ConfigLoader().load_or_default(config_path)
    logging.getLogger().setLevel(cfg.log_level.upper())

    logging.info("Loading snapshot: %s", input_path)
    data = _load_snapshot(input_path)

    # (2) Validate
    session = ValidationSession(cfg)
    report = session.load_all(data["clients"], data["workers"], data["tasks"])

    # (3) Artifacts
    report_path = write_report_json(report, out_dir=output_dir, filename=cfg.report.filename)
    table_path = write_report_csv(report, out_dir=output_dir)
    released = ReportHandler(output_dir).handle(report, session.snapshot)

    errors_path = output_dir / ReportHandler.ERRORS_FILENAME
    logging.info("Validation finished in %.2f s", time.perf_counter() - t0)

    return {
        "valid": released is not None,
        "counts": report.counts(),
        "messages": report.as_messages(),
        "artifacts": {
            "validation_report": report_path,
            "validation_table": table_path,
            "validation_errors": errors_path if released is None else None,
        },
    }


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point.

    @details
    Exit codes:
      0 – the snapshot is valid (empty report)
      1 – the report lists issues
      2 – config/input contract failure or unexpected crash
    """
    _setup_logging()
    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    input_path = Path(args.input)
    output_dir = Path(args.output)

    try:
        result = run_validation(config_path, input_path, output_dir)
    except AlchemistError as e:
        logging.error(str(e))
        print(json.dumps({"error": e.to_dict()}, ensure_ascii=False, indent=2))
        return 2
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2

    print(json.dumps(result["messages"], ensure_ascii=False, indent=2))
    return 0 if result["valid"] else 1


if __name__ == "__main__":
    sys.exit(main())
