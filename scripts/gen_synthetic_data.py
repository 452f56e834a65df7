# scripts/gen_synthetic_data.py
from __future__ import annotations

import json
import random
import sys
from dataclasses import asdict, dataclass
from pathlib import Path

"""
Synthetic snapshot generator (single run → single JSON file).

- Parameters are hard-coded as constants below (no CLI args).
- Workers get a random skill subset, a random phase window and a per-phase
  load; tasks only require skills some worker holds and prefer phases inside
  the horizon; clients request existing tasks. With INJECT_DEFECTS off the
  result is structurally and referentially clean (capacity issues may still
  appear, depending on the random loads).
- With INJECT_DEFECTS on, a handful of known defects are appended: a
  duplicate ClientID, an out-of-range PriorityLevel, a dangling TaskID, a
  malformed phase range and an unstaffed skill.
- Output: {"clients": [...], "workers": [...], "tasks": [...]} for scripts/run.py.
"""

# =========================
# CONFIG: EDIT THESE
# =========================
CLIENTS: int = 20
WORKERS: int = 12
TASKS: int = 15
PHASES: int = 6  # phases are numbered 1..PHASES
SKILLS: tuple[str, ...] = ("python", "sql", "ml", "ops", "design", "qa")
GROUPS: tuple[str, ...] = ("alpha", "beta", "gamma")
INJECT_DEFECTS: bool = False
OUTPUT: str = f"data/input/synthetic_{CLIENTS}c_{WORKERS}w_{TASKS}t.json"

RANDOM_SEED: int = 42
# =========================


@dataclass(frozen=True, slots=True)
class ClientRow:
    ClientID: str
    ClientName: str
    PriorityLevel: int
    RequestedTaskIDs: str
    GroupTag: str
    AttributesJSON: str


@dataclass(frozen=True, slots=True)
class WorkerRow:
    WorkerID: str
    WorkerName: str
    Skills: str
    AvailableSlots: str
    MaxLoadPerPhase: int
    WorkerGroup: str
    QualificationLevel: int


@dataclass(frozen=True, slots=True)
class TaskRow:
    TaskID: str
    TaskName: str
    Category: str
    Duration: int
    RequiredSkills: str
    PreferredPhases: str
    MaxConcurrent: int


def _phase_cell(phases: list[int]) -> str:
    """Render a phase set in one of the three accepted syntaxes."""
    style = random.choice(("array", "range", "list"))
    contiguous = phases == list(range(phases[0], phases[-1] + 1))
    if style == "range" and contiguous and len(phases) > 1:
        return f"{phases[0]}-{phases[-1]}"
    if style == "array":
        return json.dumps(phases)
    return ",".join(str(p) for p in phases)


def _window(max_len: int) -> list[int]:
    length = random.randint(1, max_len)
    start = random.randint(1, PHASES - length + 1)
    return list(range(start, start + length))


def _make_workers() -> list[WorkerRow]:
    rows: list[WorkerRow] = []
    for i in range(1, WORKERS + 1):
        slots = _window(PHASES)
        rows.append(
            WorkerRow(
                WorkerID=f"W{i}",
                WorkerName=f"Worker {i}",
                Skills=",".join(random.sample(SKILLS, k=random.randint(1, 3))),
                AvailableSlots=_phase_cell(slots),
                MaxLoadPerPhase=random.randint(1, len(slots)),
                WorkerGroup=random.choice(GROUPS),
                QualificationLevel=random.randint(1, 5),
            )
        )
    return rows


def _make_tasks(workers: list[WorkerRow]) -> list[TaskRow]:
    held = sorted({s for w in workers for s in w.Skills.split(",")})
    rows: list[TaskRow] = []
    for i in range(1, TASKS + 1):
        rows.append(
            TaskRow(
                TaskID=f"T{i}",
                TaskName=f"Task {i}",
                Category=random.choice(("build", "review", "support")),
                Duration=random.randint(1, 2),
                RequiredSkills=",".join(random.sample(held, k=min(len(held), random.randint(1, 2)))),
                PreferredPhases=_phase_cell(_window(3)),
                MaxConcurrent=1,
            )
        )
    return rows


def _make_clients(tasks: list[TaskRow]) -> list[ClientRow]:
    task_ids = [t.TaskID for t in tasks]
    rows: list[ClientRow] = []
    for i in range(1, CLIENTS + 1):
        attributes = {
            "location": random.choice(("north", "south")),
            "budget": random.randint(1, 9) * 1000,
        }
        rows.append(
            ClientRow(
                ClientID=f"C{i}",
                ClientName=f"Client {i}",
                PriorityLevel=random.randint(1, 5),
                RequestedTaskIDs=",".join(random.sample(task_ids, k=random.randint(1, 3))),
                GroupTag=random.choice(GROUPS),
                AttributesJSON=json.dumps(attributes),
            )
        )
    return rows


def _inject_defects(snapshot: dict[str, list[dict]]) -> None:
    clients, tasks = snapshot["clients"], snapshot["tasks"]
    dup = dict(clients[0], ClientName="Duplicate of C1")
    clients.append(dup)
    clients.append(dict(clients[1], ClientID=f"C{CLIENTS + 1}", PriorityLevel=7))
    clients.append(dict(clients[2], ClientID=f"C{CLIENTS + 2}", RequestedTaskIDs="T1,T999"))
    tasks.append(dict(tasks[0], TaskID=f"T{TASKS + 1}", PreferredPhases="x-y"))
    tasks.append(dict(tasks[0], TaskID=f"T{TASKS + 2}", RequiredSkills="quantum"))


def _validate_config_or_die() -> None:
    problems: list[str] = []
    if min(CLIENTS, WORKERS, TASKS) < 3:
        problems.append("CLIENTS, WORKERS and TASKS must each be >= 3")
    if PHASES < 3:
        problems.append("PHASES must be >= 3")
    if len(SKILLS) < 3:
        problems.append("SKILLS must list at least 3 skills")
    if problems:
        print("Invalid generator configuration:\n- " + "\n- ".join(problems), file=sys.stderr)
        sys.exit(2)


def main() -> int:
    _validate_config_or_die()
    random.seed(RANDOM_SEED)

    workers = _make_workers()
    tasks = _make_tasks(workers)
    clients = _make_clients(tasks)
    snapshot = {
        "clients": [asdict(r) for r in clients],
        "workers": [asdict(r) for r in workers],
        "tasks": [asdict(r) for r in tasks],
    }
    if INJECT_DEFECTS:
        _inject_defects(snapshot)

    output = Path(OUTPUT)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(snapshot, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")

    print(
        f"[GEN] clients={len(snapshot['clients'])}, workers={len(snapshot['workers'])}, "
        f"tasks={len(snapshot['tasks'])}, defects={'on' if INJECT_DEFECTS else 'off'}"
    )
    print(f"[GEN] wrote: {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
