import sys
from pathlib import Path

import pytest

# (1) Add repository root to sys.path to enable absolute imports
#     The root directory contains scripts/, src/ and config/.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


# (2) A consistent clients/workers/tasks trio: validates to an empty report.
#     Fixtures return fresh lists, so tests may edit rows in place.
@pytest.fixture()
def clients_rows() -> list[dict]:
    return [
        {
            "ClientID": "C1",
            "ClientName": "Acme",
            "PriorityLevel": 3,
            "RequestedTaskIDs": "T1,T2",
            "GroupTag": "alpha",
            "AttributesJSON": '{"location": "north"}',
        },
        {
            "ClientID": "C2",
            "ClientName": "Globex",
            "PriorityLevel": "5",
            "RequestedTaskIDs": "T2",
            "GroupTag": "beta",
            "AttributesJSON": "",
        },
    ]


@pytest.fixture()
def workers_rows() -> list[dict]:
    return [
        {
            "WorkerID": "W1",
            "WorkerName": "Ann",
            "Skills": "python,sql",
            "AvailableSlots": "1-3",
            "MaxLoadPerPhase": 2,
            "WorkerGroup": "alpha",
            "QualificationLevel": 3,
        },
        {
            "WorkerID": "W2",
            "WorkerName": "Bob",
            "Skills": "python, ml",
            "AvailableSlots": "[2,3,4]",
            "MaxLoadPerPhase": "1",
            "WorkerGroup": "beta",
            "QualificationLevel": 4,
        },
    ]


@pytest.fixture()
def tasks_rows() -> list[dict]:
    return [
        {
            "TaskID": "T1",
            "TaskName": "Data cleanup",
            "Category": "build",
            "Duration": 1,
            "RequiredSkills": "python",
            "PreferredPhases": "1,2",
            "MaxConcurrent": 2,
        },
        {
            "TaskID": "T2",
            "TaskName": "Model training",
            "Category": "build",
            "Duration": "2",
            "RequiredSkills": "ml",
            "PreferredPhases": "[3]",
            "MaxConcurrent": 1,
        },
    ]
