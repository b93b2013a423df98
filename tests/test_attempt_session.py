import pytest

from quiz_kiosk.core.models import AttemptStatus
from quiz_kiosk.core.services.attempt_session import (
    AttemptEventKind,
    AttemptPhase,
    AttemptSession,
)

from conftest import make_draft


@pytest.fixture
def participant(store):
    return store.add_participant("Asha", "9876543210", "10-B")


def build_session(store, catalog, participant, scheduler, question_ids=(1, 2, 3), seconds_per_question=30):
    quiz_id = store.save_quiz_definition(
        make_draft(
            question_pool=(1, 2, 3, 4, 5, 6),
            questions_per_attempt=len(question_ids),
            seconds_per_question=seconds_per_question,
            is_active=True,
        )
    )
    quiz = store.get_state().find_quiz(quiz_id)
    return AttemptSession(quiz, participant, catalog.by_ids(question_ids), store, scheduler)


def answer_current(session, correct=True):
    question = session.current_question
    index = question.correct_option_index
    if not correct:
        index = (index + 1) % len(question.options)
    assert session.select_answer(index)


def test_all_correct_answers_complete_the_attempt(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler)
    events = []
    session.subscribe(lambda event: events.append(event.kind))
    session.start()

    for _ in range(3):
        answer_current(session)
        scheduler.advance(1.5)

    assert session.phase is AttemptPhase.FINALIZING
    assert session.status is AttemptStatus.COMPLETED
    scheduler.advance(1.5)
    assert session.phase is AttemptPhase.DONE

    attempts = store.get_state().attempts
    assert len(attempts) == 1
    attempt = attempts[0]
    assert attempt == session.attempt
    assert attempt.score == 3
    assert attempt.total_questions == 3
    assert attempt.completed_at is not None
    assert attempt.time_taken_seconds == 90 - session.remaining_seconds
    assert store.get_state().find_participant(participant.id).latest_score == 3
    assert events.count(AttemptEventKind.FINALIZED) == 1
    assert events[-1] is AttemptEventKind.DONE


def test_feedback_delay_holds_the_current_question(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler)
    session.start()
    answer_current(session, correct=False)

    assert session.is_current_answered
    assert session.current_score == 0
    assert not session.select_answer(0)

    scheduler.advance(1.4)
    assert session.question_index == 0
    scheduler.advance(0.1)
    assert session.question_index == 1
    assert not session.is_current_answered


def test_out_of_range_answer_raises(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler)
    session.start()
    with pytest.raises(ValueError):
        session.select_answer(7)
    assert not session.is_current_answered


def test_timeout_scenario_records_unanswered_questions(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler, seconds_per_question=1)
    assert session.quiz.time_limit_seconds == 3
    session.start()
    answer_current(session)
    scheduler.advance(1.5)
    assert session.timer_label == "0:02"

    scheduler.advance(1.5)

    assert session.phase is AttemptPhase.DONE
    attempt = session.attempt
    assert attempt.status is AttemptStatus.TIMEOUT
    assert attempt.completed_at is None
    assert attempt.time_taken_seconds == 3
    assert attempt.score == 1
    assert [answer.selected_option_index for answer in attempt.answers] == [
        catalog.by_id(1).correct_option_index,
        None,
        None,
    ]
    assert [answer.is_correct for answer in attempt.answers] == [True, False, False]
    assert scheduler.pending_count == 0


def test_timeout_during_final_feedback_writes_one_attempt(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler, question_ids=(1, 2), seconds_per_question=1)
    session.start()
    answer_current(session)
    scheduler.advance(1.5)
    # The last answer lands at t=1.5; its feedback would end after the 2s limit.
    answer_current(session)
    scheduler.advance(5)

    assert len(store.get_state().attempts) == 1
    assert session.status is AttemptStatus.TIMEOUT
    assert session.attempt.score == 2
    assert session.attempt.completed_at is None
    assert session.attempt.time_taken_seconds == 2


def test_finalize_is_exactly_once(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler)
    session.start()

    assert session.finalize(AttemptStatus.COMPLETED)
    assert not session.finalize(AttemptStatus.TIMEOUT)
    scheduler.advance(100)

    assert len(store.get_state().attempts) == 1
    assert session.status is AttemptStatus.COMPLETED


def test_answers_after_finalize_are_ignored(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler)
    session.start()
    session.finalize(AttemptStatus.TIMEOUT)
    assert not session.select_answer(0)


def test_cancel_records_nothing(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler)
    session.start()
    answer_current(session)
    session.cancel()
    scheduler.advance(200)

    assert store.get_state().attempts == ()
    assert session.phase is AttemptPhase.DONE
    assert scheduler.pending_count == 0


def test_store_failure_still_reaches_done(store, catalog, participant, scheduler, monkeypatch):
    session = build_session(store, catalog, participant, scheduler)

    def reject(_result):
        raise RuntimeError("store offline")

    monkeypatch.setattr(store, "record_attempt", reject)
    session.start()
    session.finalize(AttemptStatus.COMPLETED)
    scheduler.advance(1.5)

    assert session.phase is AttemptPhase.DONE
    assert session.attempt is None
    assert session.result.status is AttemptStatus.COMPLETED


def test_timer_label_formats_minutes(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler, seconds_per_question=36)
    assert session.timer_label == "1:48"
    session.start()
    scheduler.advance(9)
    assert session.remaining_seconds == 99
    assert session.timer_label == "1:39"


def test_session_requires_questions(store, participant, scheduler):
    quiz = store.get_state().active_quiz
    with pytest.raises(ValueError):
        AttemptSession(quiz, participant, [], store, scheduler)


def test_timeout_with_no_answers_scores_zero(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler, seconds_per_question=1)
    events = []
    session.subscribe(lambda event: events.append(event.kind))
    session.start()

    scheduler.advance(5)

    attempts = store.get_state().attempts
    assert len(attempts) == 1
    attempt = attempts[0]
    assert attempt.status is AttemptStatus.TIMEOUT
    assert attempt.score == 0
    assert attempt.time_taken_seconds == 3
    assert attempt.completed_at is None
    assert [answer.selected_option_index for answer in attempt.answers] == [None, None, None]
    assert events.count(AttemptEventKind.FINALIZED) == 1
    assert session.phase is AttemptPhase.DONE


def test_failing_listener_does_not_block_finalize(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler, seconds_per_question=1)
    seen = []

    def broken(event):
        if event.kind is AttemptEventKind.TICK and event.remaining_seconds == 0:
            raise RuntimeError("display unavailable")

    session.subscribe(broken)
    session.subscribe(lambda event: seen.append(event.kind))
    session.start()
    scheduler.advance(5)

    assert session.phase is AttemptPhase.DONE
    assert len(store.get_state().attempts) == 1
    assert session.attempt.status is AttemptStatus.TIMEOUT
    assert AttemptEventKind.DONE in seen
    assert scheduler.pending_count == 0


def test_start_twice_keeps_one_countdown(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler)
    session.start()
    session.start()

    scheduler.advance(1)

    assert session.remaining_seconds == 89
    assert scheduler.pending_count == 1


def test_start_after_cancel_is_ignored(store, catalog, participant, scheduler):
    session = build_session(store, catalog, participant, scheduler)
    session.start()
    session.cancel()
    session.start()

    assert scheduler.pending_count == 0
