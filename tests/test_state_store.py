import json
import random

import pytest

from quiz_kiosk.constants.kiosk_constants import ADMIN_STATE_STORAGE_KEY, DEFAULT_QUIZ_ID
from quiz_kiosk.core.models import AttemptResult, AttemptStatus, utc_now
from quiz_kiosk.core.services.local_storage import LocalStorage, MemoryStorage
from quiz_kiosk.core.services.state_store import (
    AdminStateStore,
    QuizValidationError,
    RecordNotFoundError,
    StoreEventKind,
)

from conftest import FailingStorage, make_draft


def make_result(participant, quiz_id, score=2):
    return AttemptResult(
        quiz_id=quiz_id,
        participant_id=participant.id,
        participant_name=participant.name,
        class_name=participant.class_name,
        phone=participant.phone,
        answers=(),
        score=score,
        total_questions=3,
        started_at=utc_now(),
        completed_at=utc_now(),
        status=AttemptStatus.COMPLETED,
        time_taken_seconds=40,
    )


def test_default_state_has_one_active_quiz(store, catalog):
    state = store.get_state()
    assert state.active_quiz_id == DEFAULT_QUIZ_ID
    quiz = state.active_quiz
    assert quiz.title == "Students Quiz Competition"
    assert quiz.question_pool == tuple(catalog.ids())
    assert quiz.seconds_per_question == 36
    assert quiz.questions_per_attempt == 5
    assert quiz.time_limit_seconds == 180
    assert quiz.is_active and quiz.allow_retake


def test_get_state_is_stable_between_mutations(store):
    assert store.get_state() is store.get_state()
    before = store.get_state()
    store.add_participant("Asha", "9876543210", "10-B")
    assert store.get_state() is not before


def test_mutations_persist_and_reload(storage, catalog):
    store = AdminStateStore(storage, catalog)
    participant = store.add_participant(" Asha ", "98765 43210", "10-B")
    assert participant.name == "Asha"
    assert participant.phone == "9876543210"

    stored = json.loads(storage.read(ADMIN_STATE_STORAGE_KEY))
    assert stored["students"][0]["phone"] == "9876543210"
    assert stored["activeQuizId"] == DEFAULT_QUIZ_ID

    reloaded = AdminStateStore(storage, catalog)
    assert reloaded.get_state().participants == store.get_state().participants


def test_local_storage_round_trip_through_store(tmp_path, catalog):
    store = AdminStateStore(LocalStorage(tmp_path), catalog)
    quiz_id = store.save_quiz_definition(make_draft(is_active=True))
    reloaded = AdminStateStore(LocalStorage(tmp_path), catalog)
    assert reloaded.get_state().active_quiz_id == quiz_id


def test_corrupt_blob_falls_back_to_defaults(catalog):
    storage = MemoryStorage({ADMIN_STATE_STORAGE_KEY: "{broken"})
    store = AdminStateStore(storage, catalog)
    assert store.get_state().active_quiz_id == DEFAULT_QUIZ_ID


def test_load_reconciles_legacy_definitions(catalog):
    blob = {
        "students": [],
        "quizzes": [
            {"id": "q1", "title": "Old", "questionIds": [1, 2, 3, 4], "perQuestionSeconds": 25, "isActive": False},
            {"id": "q2", "title": "Flagged", "questionIds": [1, 2, 3], "perQuestionSeconds": 10, "isActive": True},
        ],
        "attempts": [],
    }
    store = AdminStateStore(MemoryStorage({ADMIN_STATE_STORAGE_KEY: json.dumps(blob)}), catalog)
    state = store.get_state()

    assert state.active_quiz_id == "q2"
    legacy = state.find_quiz("q1")
    assert legacy.questions_per_attempt == 4
    assert legacy.time_limit_seconds == 100


def test_load_clears_dangling_active_id(catalog):
    blob = {
        "quizzes": [{"id": "q1", "title": "Only", "questionIds": [1, 2, 3], "perQuestionSeconds": 10, "isActive": True}],
        "activeQuizId": "gone",
    }
    store = AdminStateStore(MemoryStorage({ADMIN_STATE_STORAGE_KEY: json.dumps(blob)}), catalog)
    state = store.get_state()
    assert state.active_quiz_id is None
    assert not state.find_quiz("q1").is_active


def test_save_clamps_questions_per_attempt_and_derives_time_limit(store):
    quiz_id = store.save_quiz_definition(make_draft(question_pool=(1, 2, 3, 3), questions_per_attempt=9))
    quiz = store.get_state().find_quiz(quiz_id)
    assert quiz.question_pool == (1, 2, 3)
    assert quiz.questions_per_attempt == 3
    assert quiz.time_limit_seconds == 90

    store.save_quiz_definition(make_draft(questions_per_attempt=0, seconds_per_question=12), quiz_id=quiz_id)
    quiz = store.get_state().find_quiz(quiz_id)
    assert quiz.questions_per_attempt == 1
    assert quiz.time_limit_seconds == 12


def test_active_quiz_is_exclusive(store):
    first = store.save_quiz_definition(make_draft(title="First", is_active=True))
    second = store.save_quiz_definition(make_draft(title="Second", is_active=True))

    state = store.get_state()
    assert state.active_quiz_id == second
    assert [quiz.id for quiz in state.quizzes if quiz.is_active] == [second]

    store.set_active_quiz(first)
    state = store.get_state()
    assert [quiz.id for quiz in state.quizzes if quiz.is_active] == [first]


def test_saving_active_quiz_as_inactive_leaves_no_active_quiz(store):
    store.save_quiz_definition(make_draft(title="Renamed", is_active=False), quiz_id=DEFAULT_QUIZ_ID)
    state = store.get_state()
    assert state.active_quiz_id is None
    assert not any(quiz.is_active for quiz in state.quizzes)


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "   "},
        {"question_pool": (1, 2)},
        {"question_pool": (1, 2, 99)},
        {"seconds_per_question": 0},
    ],
)
def test_invalid_drafts_are_rejected(store, overrides):
    revision = store.revision
    with pytest.raises(QuizValidationError):
        store.save_quiz_definition(make_draft(**overrides))
    assert store.revision == revision


def test_unknown_records_raise(store):
    with pytest.raises(RecordNotFoundError):
        store.set_active_quiz("missing")
    with pytest.raises(RecordNotFoundError):
        store.update_participant("missing", name="Nobody")
    with pytest.raises(RecordNotFoundError):
        store.save_quiz_definition(make_draft(), quiz_id="missing")


def test_deleting_active_quiz_promotes_first_remaining(store):
    other = store.save_quiz_definition(make_draft(title="Backup"))
    assert store.delete_quiz_definition(DEFAULT_QUIZ_ID)
    state = store.get_state()
    assert state.active_quiz_id == other
    assert state.find_quiz(other).is_active

    assert store.delete_quiz_definition(other)
    assert store.get_state().active_quiz_id is None
    assert not store.delete_quiz_definition(other)


def test_delete_quiz_removes_its_attempts(store):
    participant = store.add_participant("Asha", "9876543210", "10-B")
    store.record_attempt(make_result(participant, DEFAULT_QUIZ_ID))
    store.delete_quiz_definition(DEFAULT_QUIZ_ID)
    assert store.get_state().attempts == ()


def test_record_attempt_prepends_and_sets_latest_score(store):
    participant = store.add_participant("Asha", "9876543210", "10-B")
    first = store.record_attempt(make_result(participant, DEFAULT_QUIZ_ID, score=1))
    second = store.record_attempt(make_result(participant, DEFAULT_QUIZ_ID, score=3))

    state = store.get_state()
    assert [attempt.id for attempt in state.attempts] == [second.id, first.id]
    assert len(first.id) == 32
    assert state.find_participant(participant.id).latest_score == 3


def test_delete_participant_cascades_to_attempts(store):
    asha = store.add_participant("Asha", "9876543210", "10-B")
    ravi = store.add_participant("Ravi", "9000000001", "9-A")
    store.record_attempt(make_result(asha, DEFAULT_QUIZ_ID))
    store.record_attempt(make_result(ravi, DEFAULT_QUIZ_ID))

    assert store.delete_participant(asha.id)
    state = store.get_state()
    assert [p.id for p in state.participants] == [ravi.id]
    assert [a.participant_id for a in state.attempts] == [ravi.id]


def test_delete_unknown_participant_emits_nothing(store):
    events = []
    store.subscribe(events.append)
    assert store.delete_participant("missing") is False
    assert events == []


def test_subscribers_receive_typed_events_until_unsubscribed(store):
    events = []
    unsubscribe = store.subscribe(events.append)

    participant = store.add_participant("Asha", "9876543210", "10-B")
    store.update_participant(participant.id, class_name="11-A")
    unsubscribe()
    unsubscribe()
    store.delete_participant(participant.id)

    assert [event.kind for event in events] == [
        StoreEventKind.PARTICIPANT_ADDED,
        StoreEventKind.PARTICIPANT_UPDATED,
    ]
    assert [event.revision for event in events] == [1, 2]
    assert events[0].record_id == participant.id
    assert store.revision == 3


def test_failing_listener_does_not_block_others(store):
    received = []

    def broken(_event):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(received.append)
    store.add_participant("Asha", "9876543210", "10-B")
    assert len(received) == 1


def test_persistence_failure_keeps_session_state(catalog):
    store = AdminStateStore(FailingStorage(), catalog)
    events = []
    store.subscribe(events.append)

    participant = store.add_participant("Asha", "9876543210", "10-B")

    assert store.get_state().find_participant(participant.id) is not None
    assert len(events) == 1


def test_find_participant_by_phone(store):
    participant = store.add_participant("Asha", "9876543210", "10-B")
    assert store.find_participant_by_phone("98765-43210") == participant
    assert store.find_participant_by_phone("9000000001") is None


def test_allocate_question_ids_draws_from_pool(catalog):
    store = AdminStateStore(MemoryStorage(), catalog, rng=random.Random(3))
    quiz_id = store.save_quiz_definition(make_draft(question_pool=(2, 4, 6, 8), questions_per_attempt=3))

    drawn = store.allocate_question_ids(quiz_id)

    assert len(drawn) == 3
    assert len(set(drawn)) == 3
    assert set(drawn) <= {2, 4, 6, 8}
    assert store.allocate_question_ids("missing") is None
