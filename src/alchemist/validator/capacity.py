# src/alchemist/validator/capacity.py
"""
@brief
Capacity and concurrency feasibility analysis over phase-indexed resources.

@details
Three necessary-condition checks. Each one proves a configuration
impossible; none of them proves a configuration possible:

    (1) worker overload     |AvailableSlots| < MaxLoadPerPhase
    (2) phase saturation    Σ Duration of tasks preferring phase p
                            > Σ MaxLoadPerPhase of workers available in p
    (3) skill concurrency   workers holding skill s < MaxConcurrent of a
                            task requiring s

Exact feasibility (bin packing across phases, skills and concurrency) is
NP-hard; the checks deliberately ignore that the same workers may be shared
by several tasks. Cost stays linear in the parsed cells:
O(tasks x phases + tasks x skills + workers x skills).

Cells that failed to parse are already reported by the schema stage. Here
they count as empty (phase sets) or zero (loads, durations) and a row whose
inputs to a check did not parse is left out of that check.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from collections.abc import Sequence

from alchemist.normalizers.canonical import CanonicalTask, CanonicalWorker, value_or
from alchemist.schemas.models import (
    CapacityConfig,
    CapacitySummary,
    DatasetKind,
    ErrorCategory,
    ValidationIssue,
)
from alchemist.validator.report import IssueLog

logger = logging.getLogger(__name__)


class CapacityAnalyzer:
    """
    @brief
    Computes capacity tables and flags definite infeasibility.

    @details
    `run()` builds the phase capacity, phase demand and skill supply tables
    once, then applies the enabled checks. The tables are returned as a
    CapacitySummary whether or not any check is enabled.
    """

    def __init__(self, cfg: CapacityConfig | None = None) -> None:
        self.cfg = cfg or CapacityConfig()
        self.log = IssueLog(ErrorCategory.CAPACITY)

    def run(
        self, workers: Sequence[CanonicalWorker], tasks: Sequence[CanonicalTask]
    ) -> tuple[list[ValidationIssue], CapacitySummary]:
        # (1) Aggregate tables
        phase_capacity = self._phase_capacity(workers)
        phase_demand, contributors = self._phase_demand(tasks)
        skill_supply = self._worker_count_by_skill(workers)

        # (2) Checks in fixed order: workers first, then tasks by phase, then tasks by row
        if self.cfg.check_worker_overload:
            self._check_worker_overload(workers)
        if self.cfg.check_phase_saturation:
            self._check_phase_saturation(phase_demand, phase_capacity, contributors)
        if self.cfg.check_skill_concurrency:
            self._check_skill_concurrency(tasks, skill_supply)

        summary = CapacitySummary(
            phase_capacity=dict(sorted(phase_capacity.items())),
            phase_demand=dict(sorted(phase_demand.items())),
            worker_count_by_skill=dict(sorted(skill_supply.items())),
        )
        logger.debug(
            "Capacity analysis: %d phase(s) demanded, %d phase(s) staffed, %d skill(s), %d issue(s)",
            len(phase_demand),
            len(phase_capacity),
            len(skill_supply),
            len(self.log.issues),
        )
        return self.log.issues, summary

    # ---------- Aggregate tables ----------
    @staticmethod
    def _phase_capacity(workers: Sequence[CanonicalWorker]) -> dict[int, int]:
        """phaseCapacity[p] = Σ MaxLoadPerPhase over workers available in p."""
        capacity: dict[int, int] = defaultdict(int)
        for worker in workers:
            load = value_or(worker.max_load, 0)
            for phase in value_or(worker.slots, ()):
                capacity[phase] += load
        return dict(capacity)

    @staticmethod
    def _phase_demand(
        tasks: Sequence[CanonicalTask],
    ) -> tuple[dict[int, int], dict[int, list[str]]]:
        """demand[p] = Σ Duration over tasks preferring p, plus the tasks behind each sum."""
        demand: dict[int, int] = defaultdict(int)
        contributors: dict[int, list[str]] = defaultdict(list)
        for task in tasks:
            duration = value_or(task.duration, 0)
            for phase in value_or(task.phases, ()):
                demand[phase] += duration
                contributors[phase].append(task.key or f"row {task.index + 1}")
        return dict(demand), dict(contributors)

    @staticmethod
    def _worker_count_by_skill(workers: Sequence[CanonicalWorker]) -> Counter[str]:
        # Skill tuples are already distinct per worker, so this counts workers
        supply: Counter[str] = Counter()
        for worker in workers:
            supply.update(value_or(worker.skills, ()))
        return supply

    # ---------- Checks ----------
    def _check_worker_overload(self, workers: Sequence[CanonicalWorker]) -> None:
        """A worker declaring more per-phase load than it has phases available."""
        for worker in workers:
            if not (worker.slots.ok and worker.max_load.ok):
                continue
            available = len(worker.slots.value)
            max_load = worker.max_load.value
            if available < max_load:
                self.log.add(
                    DatasetKind.WORKERS,
                    (
                        f"{worker.label}: Worker is overloaded. Available slots ({available}) "
                        f"are less than MaxLoadPerPhase ({max_load})."
                    ),
                    row=worker.ref,
                    field="MaxLoadPerPhase",
                    entities={"available_slots": available, "max_load_per_phase": max_load},
                )

    def _check_phase_saturation(
        self,
        demand: dict[int, int],
        capacity: dict[int, int],
        contributors: dict[int, list[str]],
    ) -> None:
        """Aggregate demand above aggregate capacity, phase by phase in ascending order."""
        for phase in sorted(demand):
            needed = demand[phase]
            available = capacity.get(phase, 0)
            if needed > available:
                self.log.add(
                    DatasetKind.TASKS,
                    (
                        f"Phase {phase}: Total task duration ({needed}) exceeds available "
                        f"worker capacity ({available})."
                    ),
                    field="PreferredPhases",
                    entities={
                        "phase": phase,
                        "demand": needed,
                        "capacity": available,
                        "task_ids": contributors.get(phase, []),
                    },
                )

    def _check_skill_concurrency(
        self, tasks: Sequence[CanonicalTask], supply: Counter[str]
    ) -> None:
        """
        @brief
        Flag tasks whose MaxConcurrent exceeds the qualified worker count of any skill.

        @details
        k concurrent instances need at least k distinct workers for every
        required skill. Tasks without required skills, or whose MaxConcurrent
        or RequiredSkills did not parse, are not judged.
        """
        for task in tasks:
            if not (task.max_concurrent.ok and task.required_skills.ok):
                continue
            k = task.max_concurrent.value
            short = {
                skill: supply.get(skill, 0)
                for skill in task.required_skills.value
                if supply.get(skill, 0) < k
            }
            if not short:
                continue
            detail = ", ".join(f"'{skill}' has {count}" for skill, count in short.items())
            self.log.add(
                DatasetKind.TASKS,
                (
                    f"{task.label}: MaxConcurrent ({k}) is not feasible for all required skills. "
                    f"Not enough qualified workers ({detail})."
                ),
                row=task.ref,
                field="MaxConcurrent",
                entities={"max_concurrent": k, "qualified_workers": short},
            )


__all__ = ["CapacityAnalyzer"]
