from datetime import datetime, timezone

import pytest

from quiz_kiosk.core.models import Attempt, AttemptStatus, Participant
from quiz_kiosk.core.results_exporter import (
    filter_attempts,
    filter_participants,
    render_attempts_csv,
)


def make_attempt(attempt_id, name, class_name, phone, status, completed=True):
    started = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
    return Attempt(
        id=attempt_id,
        quiz_id="quiz-default",
        participant_id=f"p-{attempt_id}",
        participant_name=name,
        class_name=class_name,
        phone=phone,
        answers=(),
        score=3,
        total_questions=5,
        started_at=started,
        completed_at=datetime(2024, 5, 1, 9, 2, tzinfo=timezone.utc) if completed else None,
        status=status,
        time_taken_seconds=120,
    )


@pytest.fixture
def attempts():
    return [
        make_attempt("a1", "Asha Rao", "10-B", "9876543210", AttemptStatus.COMPLETED),
        make_attempt("a2", "Ravi Kumar", "9-A", "9000000001", AttemptStatus.TIMEOUT, completed=False),
        make_attempt("a3", "Meera, Jr.", "10-B", "9111111111", AttemptStatus.COMPLETED),
    ]


def test_filter_attempts_by_search_and_status(attempts):
    assert [a.id for a in filter_attempts(attempts, "asha")] == ["a1"]
    assert [a.id for a in filter_attempts(attempts, "10-b")] == ["a1", "a3"]
    assert [a.id for a in filter_attempts(attempts, "90000")] == ["a2"]
    assert [a.id for a in filter_attempts(attempts, "", AttemptStatus.TIMEOUT)] == ["a2"]
    assert [a.id for a in filter_attempts(attempts, "10-B", AttemptStatus.TIMEOUT)] == []


def test_filter_participants():
    participants = [
        Participant(id="p1", name="Asha", phone="9876543210", class_name="10-B"),
        Participant(id="p2", name="Ravi", phone="9000000001", class_name="9-A"),
    ]
    assert [p.id for p in filter_participants(participants, "  ")] == ["p1", "p2"]
    assert [p.id for p in filter_participants(participants, "9-a")] == ["p2"]


def test_render_csv_quotes_fields_and_blanks_missing_completion(attempts):
    document = render_attempts_csv(attempts, {"quiz-default": "Students Quiz Competition"})
    lines = document.splitlines()

    assert lines[0] == "Student,Class,Phone,Quiz,Score,Total,Status,Time taken (s),Started,Completed"
    assert lines[1].startswith("Asha Rao,10-B,9876543210,Students Quiz Competition,3,5,completed,120,")
    assert lines[2].endswith(",timeout,120,2024-05-01T09:00:00+00:00,")
    assert lines[3].startswith('"Meera, Jr.",10-B')
