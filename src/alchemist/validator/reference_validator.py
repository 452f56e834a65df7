# src/alchemist/validator/reference_validator.py
from __future__ import annotations

import logging
from collections.abc import Sequence

from alchemist.normalizers.canonical import (
    CanonicalClient,
    CanonicalTask,
    CanonicalWorker,
    value_or,
)
from alchemist.schemas.models import DatasetKind, ErrorCategory, ValidationIssue
from alchemist.validator.report import IssueLog

logger = logging.getLogger(__name__)


class ReferenceValidator:
    """
    @brief
    Referential integrity between datasets.

    @details
    Client -> task: every requested TaskID must exist in tasks.
    Task -> worker: every required skill must be held by at least one worker.
    A direction is evaluated only when both of its datasets are non-empty.
    These checks look at identifiers only; capacity is judged elsewhere.
    """

    def __init__(self) -> None:
        self.log = IssueLog(ErrorCategory.REFERENCE)

    def run(
        self,
        clients: Sequence[CanonicalClient],
        workers: Sequence[CanonicalWorker],
        tasks: Sequence[CanonicalTask],
    ) -> list[ValidationIssue]:
        if clients and tasks:
            self._check_requested_tasks(clients, tasks)
        if tasks and workers:
            self._check_required_skills(tasks, workers)

        logger.debug("Reference checks produced %d issue(s)", len(self.log.issues))
        return self.log.issues

    def _check_requested_tasks(
        self, clients: Sequence[CanonicalClient], tasks: Sequence[CanonicalTask]
    ) -> None:
        task_ids = {task.key for task in tasks if task.key is not None}
        for client in clients:
            for task_id in value_or(client.requested_task_ids, ()):
                if task_id not in task_ids:
                    self.log.add(
                        DatasetKind.CLIENTS,
                        f"{client.label}: Requested Task ID '{task_id}' not found in tasks data.",
                        row=client.ref,
                        field="RequestedTaskIDs",
                        entities={"task_id": task_id},
                    )

    def _check_required_skills(
        self, tasks: Sequence[CanonicalTask], workers: Sequence[CanonicalWorker]
    ) -> None:
        known_skills: set[str] = set()
        for worker in workers:
            known_skills.update(value_or(worker.skills, ()))

        for task in tasks:
            for skill in value_or(task.required_skills, ()):
                if skill not in known_skills:
                    self.log.add(
                        DatasetKind.TASKS,
                        f"{task.label}: Required skill '{skill}' not found in any worker's skills.",
                        row=task.ref,
                        field="RequiredSkills",
                        entities={"skill": skill},
                    )


__all__ = ["ReferenceValidator"]
