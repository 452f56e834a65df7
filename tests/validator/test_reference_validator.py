# tests/validator/test_reference_validator.py
from alchemist.normalizers.canonical import (
    canonicalize_clients,
    canonicalize_tasks,
    canonicalize_workers,
)
from alchemist.schemas.models import ClientRecord, Config, TaskRecord, WorkerRecord
from alchemist.validator import validate_datasets
from alchemist.validator.reference_validator import ReferenceValidator


def test_unknown_requested_task_named_once(clients_rows, workers_rows, tasks_rows):
    """
    @brief
    A client requesting T1 and T9 when only T1 exists yields one issue naming T9.
    """
    # --- Arrange ---
    tasks = [tasks_rows[0]]
    clients = [dict(clients_rows[0], RequestedTaskIDs="T1,T9")]

    # --- Act ---
    report = validate_datasets(clients, workers_rows, tasks)

    # --- Assert ---
    assert len(report.clients) == 1
    issue = report.clients[0]
    assert issue.category == "reference"
    assert issue.field == "RequestedTaskIDs"
    assert issue.entities == {"task_id": "T9"}
    assert issue.message == "Row 1 (ClientID: C1): Requested Task ID 'T9' not found in tasks data."


def test_unheld_required_skill(clients_rows, workers_rows, tasks_rows):
    tasks_rows[1]["RequiredSkills"] = "ml,quantum"

    report = validate_datasets(clients_rows, workers_rows, tasks_rows)

    refs = report.by_category("reference")
    assert [i.message for i in refs] == [
        "Row 2 (TaskID: T2): Required skill 'quantum' not found in any worker's skills."
    ]


def test_direction_skipped_when_other_dataset_empty():
    """
    @brief
    A reference direction is only evaluated when both datasets have rows.

    @details
    With no tasks loaded, client requests cannot be judged; with no
    workers loaded, required skills cannot be judged.
    """
    # --- Arrange ---
    clients = canonicalize_clients(
        [ClientRecord(id=0, ClientID="C1", RequestedTaskIDs="T9")], Config()
    )
    tasks = canonicalize_tasks([TaskRecord(id=0, TaskID="T1", RequiredSkills="quantum")], Config())

    # --- Act ---
    no_tasks = ReferenceValidator().run(clients, [], [])
    no_workers = ReferenceValidator().run(clients, [], tasks)

    # --- Assert ---
    assert no_tasks == []
    assert [i.entities for i in no_workers] == [{"task_id": "T9"}]


def test_skill_tokens_are_trimmed_before_lookup():
    workers = canonicalize_workers([WorkerRecord(id=0, WorkerID="W1", Skills=" , python ,")], Config())
    tasks = canonicalize_tasks([TaskRecord(id=0, TaskID="T1", RequiredSkills="python")], Config())

    assert ReferenceValidator().run([], workers, tasks) == []
