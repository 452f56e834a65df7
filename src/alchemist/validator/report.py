# src/alchemist/validator/report.py
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from alchemist.schemas.models import (
    CapacitySummary,
    DatasetKind,
    ErrorCategory,
    RowReference,
    ValidationIssue,
    ValidationReport,
)

logger = logging.getLogger(__name__)

# Merge order of the report lists
STAGES: tuple[str, ...] = ("schema", "reference", "capacity")


class IssueLog:
    """
    @brief
    Append-only issue accumulator for one check family.

    @details
    Every issue recorded through one log shares the log's category.
    """

    def __init__(self, category: ErrorCategory) -> None:
        self.category = category
        self.issues: list[ValidationIssue] = []

    def add(
        self,
        dataset: DatasetKind,
        message: str,
        row: RowReference | None = None,
        field: str | None = None,
        entities: dict[str, Any] | None = None,
    ) -> None:
        self.issues.append(
            ValidationIssue(
                dataset=dataset,
                category=self.category,
                message=message,
                row=row,
                field=field,
                entities=entities or None,
            )
        )


class ReportAggregator:
    """
    @brief
    Merges the issue lists of all stages into one ValidationReport.

    @details
    Issues are routed to their dataset and concatenated stage by stage
    (schema, reference, capacity). Within a stage the order the check
    produced them is kept. Nothing is deduplicated across stages: a row may
    carry a structural and a capacity issue at the same time.
    """

    def __init__(self) -> None:
        self._stages: dict[str, list[ValidationIssue]] = {stage: [] for stage in STAGES}

    def add(self, stage: str, issues: Iterable[ValidationIssue]) -> None:
        if stage not in self._stages:
            raise ValueError(f"Unknown validation stage: {stage!r} (expected one of {STAGES})")
        self._stages[stage].extend(issues)

    def build(self, summary: CapacitySummary | None = None) -> ValidationReport:
        per_dataset: dict[DatasetKind, list[ValidationIssue]] = {kind: [] for kind in DatasetKind}
        for stage in STAGES:
            for issue in self._stages[stage]:
                per_dataset[DatasetKind(issue.dataset)].append(issue)

        report = ValidationReport(
            clients=per_dataset[DatasetKind.CLIENTS],
            workers=per_dataset[DatasetKind.WORKERS],
            tasks=per_dataset[DatasetKind.TASKS],
            summary=summary,
        )
        logger.debug("Report assembled: %s", report.counts())
        return report


__all__ = ["IssueLog", "ReportAggregator", "STAGES"]
