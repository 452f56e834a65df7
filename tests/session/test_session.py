# tests/session/test_session.py
import logging
import threading

import pytest

from alchemist.errors import DataError
from alchemist.schemas.models import Config
from alchemist.session import DatasetSnapshot, ValidationSession


@pytest.fixture()
def session(clients_rows, workers_rows, tasks_rows) -> ValidationSession:
    s = ValidationSession()
    s.load_all(clients_rows, workers_rows, tasks_rows)
    return s


def test_new_session_is_empty_and_valid():
    s = ValidationSession()
    snapshot, report = s.state()
    assert snapshot == DatasetSnapshot()
    assert report.is_empty()


def test_load_replaces_one_dataset(session, tasks_rows):
    """
    @brief
    Reloading one dataset re-validates the whole snapshot.

    @details
    Dropping T2 from tasks leaves both clients with a dangling request,
    while workers and clients stay as they were.
    """
    # --- Arrange ---
    before = session.snapshot

    # --- Act ---
    report = session.load("tasks", [tasks_rows[0]])

    # --- Assert ---
    assert session.snapshot.clients is before.clients
    assert len(session.snapshot.tasks) == 1
    assert [i.entities["task_id"] for i in report.clients] == ["T2", "T2"]
    assert session.report is report


def test_edit_row_keeps_handle_and_position(session):
    # --- Act ---
    report = session.edit_row("clients", 0, {"PriorityLevel": 9, "id": "ignored"})

    # --- Assert ---
    edited = session.snapshot.clients[0]
    assert edited.id == 0
    assert edited.PriorityLevel == 9
    assert edited.ClientID == "C1"
    assert [i.field for i in report.clients] == ["PriorityLevel"]


def test_edit_row_does_not_invent_columns(clients_rows, workers_rows, tasks_rows):
    for row in clients_rows:
        row.pop("GroupTag")
    s = ValidationSession()
    s.load_all(clients_rows, workers_rows, tasks_rows)

    report = s.edit_row("clients", 1, {"PriorityLevel": 2})

    assert s.snapshot.clients[1].columns() == s.snapshot.clients[0].columns()
    assert [i.message for i in report.clients] == [
        "Missing required columns for clients: GroupTag"
    ]


def test_edit_unknown_row_raises(session):
    with pytest.raises(DataError):
        session.edit_row("workers", "nope", {"Skills": "ml"})


def test_unknown_dataset_kind_raises_dataerror(session):
    """
    @brief
    Every mutator rejects an unknown dataset name with DataError and leaves
    the installed snapshot untouched.
    """
    # --- Arrange ---
    before, _ = session.state()

    # --- Act / Assert ---
    with pytest.raises(DataError) as loaded:
        session.load("jobs", [])
    with pytest.raises(DataError):
        session.edit_row("jobs", 0, {"Skills": "ml"})
    with pytest.raises(DataError):
        session.apply_correction({"jobs": []})

    # --- Assert ---
    assert "Unknown dataset kind: 'jobs'" in loaded.value.message
    assert session.state()[0] == before


def test_correction_request_payload(session):
    session.edit_row("tasks", 1, {"RequiredSkills": "ml,quantum"})

    payload = session.correction_request()

    assert set(payload) == {"clients", "workers", "tasks", "validation_errors"}
    assert payload["tasks"][1]["RequiredSkills"] == "ml,quantum"
    assert payload["tasks"][1]["id"] == 1
    assert payload["validation_errors"] == {
        "tasks": [
            "Row 2 (TaskID: T2): Required skill 'quantum' not found in any worker's skills.",
            "Row 2 (TaskID: T2): MaxConcurrent (1) is not feasible for all required skills. "
            "Not enough qualified workers ('quantum' has 0).",
        ]
    }


def test_apply_correction_accepts_improvement(session, clients_rows):
    """
    @brief
    A candidate with fewer issues replaces the current snapshot.
    """
    # --- Arrange ---
    session.edit_row("clients", 0, {"PriorityLevel": 9})
    fixed = [dict(row) for row in clients_rows]

    # --- Act ---
    outcome = session.apply_correction({"clients": fixed})

    # --- Assert ---
    assert outcome.accepted
    assert outcome.previous_total == 1
    assert outcome.changed == ("clients",)
    assert outcome.report.is_empty()
    assert session.report is outcome.report


def test_apply_correction_rejects_regression(session, tasks_rows, caplog):
    # --- Arrange ---
    caplog.set_level(logging.WARNING)
    before = session.state()
    worse = [dict(tasks_rows[0], Duration=0), tasks_rows[1]]

    # --- Act ---
    outcome = session.apply_correction({"tasks": worse})

    # --- Assert ---
    assert not outcome.accepted
    assert not outcome.report.is_empty()
    assert session.state() == before
    assert "Correction rejected" in caplog.text


def test_apply_correction_force(session, tasks_rows):
    outcome = session.apply_correction({"tasks": [dict(tasks_rows[0], Duration=0)]}, force=True)

    assert outcome.accepted
    assert session.report is outcome.report


def test_session_uses_its_config(clients_rows, workers_rows, tasks_rows):
    clients_rows[0]["PriorityLevel"] = 8
    s = ValidationSession(Config(priority_max=10))

    assert s.load_all(clients_rows, workers_rows, tasks_rows).is_empty()


def test_concurrent_edits_are_all_applied(session):
    """
    @brief
    Concurrent mutators serialize instead of losing each other's edits.

    @details
    Two threads edit different clients many times; the final snapshot
    carries the last value of both, and its report matches it.
    """
    # --- Arrange ---
    def edit(row_id: int, value: int) -> None:
        for _ in range(20):
            session.edit_row("clients", row_id, {"GroupTag": f"g{value}"})

    threads = [
        threading.Thread(target=edit, args=(0, 1)),
        threading.Thread(target=edit, args=(1, 2)),
    ]

    # --- Act ---
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # --- Assert ---
    snapshot, report = session.state()
    assert [c.GroupTag for c in snapshot.clients] == ["g1", "g2"]
    assert report.is_empty()
