"""Timing and finalization state machine for a single quiz attempt.

The session counts down the quiz time limit one second at a time, captures at
most one answer per question, advances after a short feedback pause, and hands
exactly one finalized attempt to the state store, whichever of the last answer
or the timeout arrives first.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
import logging
from typing import Protocol

from quiz_kiosk.constants.kiosk_constants import (
    ANSWER_FEEDBACK_DELAY_SECONDS,
    RESULTS_DELAY_SECONDS,
    TICK_INTERVAL_SECONDS,
    TIMEOUT_RESULTS_DELAY_SECONDS,
)
from quiz_kiosk.core.models import (
    UNANSWERED,
    Attempt,
    AttemptAnswer,
    AttemptResult,
    AttemptStatus,
    Participant,
    Question,
    QuizDefinition,
    Selected,
    Selection,
    utc_now,
)
from quiz_kiosk.core.services.state_store import AdminStateStore

logger = logging.getLogger(__name__)


class ScheduledCall(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Source of delayed callbacks; the Qt UI uses QTimer, tests a manual clock."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall: ...


class AttemptPhase(Enum):
    RUNNING = auto()
    FINALIZING = auto()
    DONE = auto()


class AttemptEventKind(Enum):
    TICK = auto()
    ANSWER_RECORDED = auto()
    ADVANCED = auto()
    FINALIZED = auto()
    DONE = auto()


@dataclass(frozen=True, slots=True)
class AttemptEvent:
    kind: AttemptEventKind
    question_index: int
    remaining_seconds: int
    is_correct: bool | None = None
    status: AttemptStatus | None = None


AttemptListener = Callable[[AttemptEvent], None]


class AttemptSession:
    """Drives one participant through one allocated question set."""

    def __init__(
        self,
        quiz: QuizDefinition,
        participant: Participant,
        questions: list[Question],
        store: AdminStateStore,
        scheduler: Scheduler,
    ) -> None:
        if not questions:
            raise ValueError("An attempt needs at least one question.")
        self._quiz = quiz
        self._participant = participant
        self._questions = list(questions)
        self._store = store
        self._scheduler = scheduler

        self._phase = AttemptPhase.RUNNING
        self._status: AttemptStatus | None = None
        self._question_index = 0
        self._selections: list[Selection] = [UNANSWERED] * len(self._questions)
        self._remaining_seconds = quiz.time_limit_seconds
        self._started_at = utc_now()
        self._result: AttemptResult | None = None
        self._attempt: Attempt | None = None

        self._tick_call: ScheduledCall | None = None
        self._feedback_call: ScheduledCall | None = None
        self._done_call: ScheduledCall | None = None
        self._listeners: list[AttemptListener] = []

    # --- Read-only view ---

    @property
    def quiz(self) -> QuizDefinition:
        return self._quiz

    @property
    def participant(self) -> Participant:
        return self._participant

    @property
    def questions(self) -> list[Question]:
        return list(self._questions)

    @property
    def phase(self) -> AttemptPhase:
        return self._phase

    @property
    def status(self) -> AttemptStatus | None:
        return self._status

    @property
    def question_index(self) -> int:
        return self._question_index

    @property
    def current_question(self) -> Question:
        return self._questions[self._question_index]

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    @property
    def timer_label(self) -> str:
        minutes, seconds = divmod(max(self._remaining_seconds, 0), 60)
        return f"{minutes}:{seconds:02d}"

    @property
    def is_current_answered(self) -> bool:
        return isinstance(self._selections[self._question_index], Selected)

    @property
    def current_score(self) -> int:
        return sum(
            1
            for question, selection in zip(self._questions, self._selections)
            if question.is_correct(selection)
        )

    @property
    def result(self) -> AttemptResult | None:
        return self._result

    @property
    def attempt(self) -> Attempt | None:
        """The stored attempt; ``None`` before finalize or if the store rejected it."""
        return self._attempt

    @property
    def answers(self) -> list[AttemptAnswer]:
        if self._result is not None:
            return list(self._result.answers)
        return self._build_answers()

    def subscribe(self, listener: AttemptListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Driving the attempt ---

    def start(self) -> None:
        if self._tick_call is not None or self._phase is not AttemptPhase.RUNNING:
            return
        self._started_at = utc_now()
        self._schedule_tick()
        logger.info(
            "Attempt started for participant %s on quiz %s (%d questions, %ds)",
            self._participant.id,
            self._quiz.id,
            len(self._questions),
            self._remaining_seconds,
        )

    def tick(self) -> None:
        self._tick_call = None
        if self._phase is not AttemptPhase.RUNNING:
            return
        self._remaining_seconds = max(self._remaining_seconds - 1, 0)
        self._emit(AttemptEventKind.TICK)
        if self._remaining_seconds == 0:
            self.finalize(AttemptStatus.TIMEOUT)
        else:
            self._schedule_tick()

    def select_answer(self, option_index: int) -> bool:
        """Record the participant's choice for the current question.

        Returns ``False`` when the choice is ignored because the attempt is no
        longer running or the question already has an answer.
        """
        if self._phase is not AttemptPhase.RUNNING or self.is_current_answered:
            return False
        question = self.current_question
        if not 0 <= option_index < len(question.options):
            raise ValueError(
                f"Option index {option_index} is out of range for question {question.id}."
            )
        selection = Selected(option_index)
        self._selections[self._question_index] = selection
        self._emit(AttemptEventKind.ANSWER_RECORDED, is_correct=question.is_correct(selection))
        self._feedback_call = self._scheduler.call_later(
            ANSWER_FEEDBACK_DELAY_SECONDS, self._after_feedback
        )
        return True

    def finalize(self, status: AttemptStatus) -> bool:
        """Finish the attempt once; later requests return ``False``."""
        if self._phase is not AttemptPhase.RUNNING:
            return False
        self._phase = AttemptPhase.FINALIZING
        self._status = status
        self._cancel_pending()

        answers = tuple(self._build_answers())
        score = sum(1 for answer in answers if answer.is_correct)
        time_taken = max(self._quiz.time_limit_seconds - self._remaining_seconds, 0)
        self._result = AttemptResult(
            quiz_id=self._quiz.id,
            participant_id=self._participant.id,
            participant_name=self._participant.name,
            class_name=self._participant.class_name,
            phone=self._participant.phone,
            answers=answers,
            score=score,
            total_questions=len(self._questions),
            started_at=self._started_at,
            completed_at=None if status is AttemptStatus.TIMEOUT else utc_now(),
            status=status,
            time_taken_seconds=time_taken,
        )
        try:
            self._attempt = self._store.record_attempt(self._result)
        except Exception:
            logger.exception(
                "Could not record attempt for participant %s; showing results anyway",
                self._participant.id,
            )
        self._emit(AttemptEventKind.FINALIZED, status=status)

        delay = TIMEOUT_RESULTS_DELAY_SECONDS if status is AttemptStatus.TIMEOUT else RESULTS_DELAY_SECONDS
        self._done_call = self._scheduler.call_later(delay, self._mark_done)
        return True

    def cancel(self) -> None:
        """Tear down without recording anything."""
        self._cancel_pending()
        if self._done_call is not None:
            self._done_call.cancel()
            self._done_call = None
        if self._phase is AttemptPhase.RUNNING:
            logger.info("Attempt for participant %s abandoned", self._participant.id)
        self._phase = AttemptPhase.DONE

    # --- Internals ---

    def _after_feedback(self) -> None:
        self._feedback_call = None
        if self._phase is not AttemptPhase.RUNNING:
            return
        if self._question_index >= len(self._questions) - 1:
            self.finalize(AttemptStatus.COMPLETED)
            return
        self._question_index += 1
        self._emit(AttemptEventKind.ADVANCED)

    def _mark_done(self) -> None:
        self._done_call = None
        if self._phase is not AttemptPhase.FINALIZING:
            return
        self._phase = AttemptPhase.DONE
        self._emit(AttemptEventKind.DONE, status=self._status)

    def _schedule_tick(self) -> None:
        self._tick_call = self._scheduler.call_later(TICK_INTERVAL_SECONDS, self.tick)

    def _cancel_pending(self) -> None:
        for call in (self._tick_call, self._feedback_call):
            if call is not None:
                call.cancel()
        self._tick_call = None
        self._feedback_call = None

    def _build_answers(self) -> list[AttemptAnswer]:
        return [
            AttemptAnswer(
                question_id=question.id,
                selection=selection,
                is_correct=question.is_correct(selection),
            )
            for question, selection in zip(self._questions, self._selections)
        ]

    def _emit(
        self,
        kind: AttemptEventKind,
        *,
        is_correct: bool | None = None,
        status: AttemptStatus | None = None,
    ) -> None:
        event = AttemptEvent(
            kind=kind,
            question_index=self._question_index,
            remaining_seconds=self._remaining_seconds,
            is_correct=is_correct,
            status=status,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Attempt listener failed on %s", kind.name)
