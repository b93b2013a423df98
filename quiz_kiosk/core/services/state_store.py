"""Persistent store for participants, quiz definitions, and attempts.

The store is the single source of truth for everything the administrator
manages. State is an immutable ``AdminState`` snapshot; every mutation builds
the next snapshot, swaps it in, persists it, and notifies subscribers before
returning, so readers never observe a half-applied change.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum, auto
from itertools import count
import json
import logging
import random
from threading import RLock
from uuid import uuid4

from quiz_kiosk.constants.kiosk_constants import (
    ADMIN_STATE_STORAGE_KEY,
    DEFAULT_QUESTIONS_PER_ATTEMPT,
    DEFAULT_QUIZ_DESCRIPTION,
    DEFAULT_QUIZ_ID,
    DEFAULT_QUIZ_TITLE,
    DEFAULT_SECONDS_PER_QUESTION,
    MIN_QUESTION_POOL_SIZE,
)
from quiz_kiosk.core.identity import normalize_phone
from quiz_kiosk.core.models import (
    AdminState,
    Attempt,
    AttemptResult,
    Participant,
    QuizDefinition,
    QuizDraft,
    utc_now,
)
from quiz_kiosk.core.question_catalog import QuestionCatalog
from quiz_kiosk.core.services.local_storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)


class QuizValidationError(ValueError):
    """Raised when a quiz draft cannot be saved as a definition."""


class RecordNotFoundError(LookupError):
    """Raised when a mutation names a record the store does not hold."""


class StoreEventKind(Enum):
    PARTICIPANT_ADDED = auto()
    PARTICIPANT_UPDATED = auto()
    PARTICIPANT_DELETED = auto()
    QUIZ_SAVED = auto()
    QUIZ_ACTIVATED = auto()
    QUIZ_DELETED = auto()
    ATTEMPT_RECORDED = auto()


@dataclass(frozen=True, slots=True)
class StoreEvent:
    """Payload delivered to subscribers after each successful mutation."""

    kind: StoreEventKind
    revision: int
    record_id: str | None = None


StoreListener = Callable[[StoreEvent], None]


class AdminStateStore:
    """Owns participant, quiz definition, and attempt records."""

    def __init__(
        self,
        storage: KeyValueStorage,
        catalog: QuestionCatalog,
        *,
        storage_key: str = ADMIN_STATE_STORAGE_KEY,
        rng: random.Random | None = None,
    ) -> None:
        self._storage = storage
        self._catalog = catalog
        self._storage_key = storage_key
        self._rng = rng or random.Random()
        self._lock = RLock()
        self._listeners: dict[int, StoreListener] = {}
        self._listener_ids = count()
        self._revision = 0
        self._state = self._load_state()

    # --- Reading ---

    def get_state(self) -> AdminState:
        with self._lock:
            return self._state

    @property
    def revision(self) -> int:
        with self._lock:
            return self._revision

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        with self._lock:
            listener_id = next(self._listener_ids)
            self._listeners[listener_id] = listener

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        return unsubscribe

    def find_participant_by_phone(self, phone: str) -> Participant | None:
        digits = normalize_phone(phone)
        return next((p for p in self.get_state().participants if p.phone == digits), None)

    # --- Participants ---

    def add_participant(self, name: str, phone: str, class_name: str) -> Participant:
        timestamp = utc_now()
        participant = Participant(
            id=uuid4().hex,
            name=name.strip(),
            phone=normalize_phone(phone),
            class_name=class_name.strip(),
            created_at=timestamp,
            updated_at=timestamp,
        )
        with self._lock:
            state = self._state
            self._commit(
                replace(state, participants=state.participants + (participant,)),
                StoreEventKind.PARTICIPANT_ADDED,
                participant.id,
            )
        logger.info("Registered participant %s", participant.id)
        return participant

    def update_participant(
        self,
        participant_id: str,
        *,
        name: str | None = None,
        phone: str | None = None,
        class_name: str | None = None,
        latest_score: int | None = None,
    ) -> Participant:
        changes: dict[str, object] = {}
        if name is not None:
            changes["name"] = name.strip()
        if phone is not None:
            changes["phone"] = normalize_phone(phone)
        if class_name is not None:
            changes["class_name"] = class_name.strip()
        if latest_score is not None:
            changes["latest_score"] = latest_score

        with self._lock:
            state = self._state
            existing = state.find_participant(participant_id)
            if existing is None:
                raise RecordNotFoundError(f"Unknown participant '{participant_id}'.")
            updated = replace(existing, **changes, updated_at=utc_now())
            participants = tuple(
                updated if p.id == participant_id else p for p in state.participants
            )
            self._commit(
                replace(state, participants=participants),
                StoreEventKind.PARTICIPANT_UPDATED,
                participant_id,
            )
        return updated

    def delete_participant(self, participant_id: str) -> bool:
        """Remove a participant together with all of their attempts."""
        with self._lock:
            state = self._state
            if state.find_participant(participant_id) is None:
                return False
            self._commit(
                replace(
                    state,
                    participants=tuple(p for p in state.participants if p.id != participant_id),
                    attempts=tuple(a for a in state.attempts if a.participant_id != participant_id),
                ),
                StoreEventKind.PARTICIPANT_DELETED,
                participant_id,
            )
        logger.info("Deleted participant %s and their attempts", participant_id)
        return True

    # --- Quiz definitions ---

    def save_quiz_definition(self, draft: QuizDraft, quiz_id: str | None = None) -> str:
        """Create or update a definition and return its id.

        ``questions_per_attempt`` is clamped into ``[1, len(pool)]`` and the
        time limit is recomputed from it. Saving with ``is_active`` makes the
        definition the only active quiz.
        """
        pool = self._validate_draft(draft)
        questions_per_attempt = max(1, min(draft.questions_per_attempt, len(pool)))
        time_limit_seconds = questions_per_attempt * draft.seconds_per_question
        timestamp = utc_now()

        with self._lock:
            state = self._state
            if quiz_id is not None:
                existing = state.find_quiz(quiz_id)
                if existing is None:
                    raise RecordNotFoundError(f"Unknown quiz '{quiz_id}'.")
                quiz = replace(
                    existing,
                    title=draft.title.strip(),
                    description=draft.description.strip(),
                    question_pool=pool,
                    seconds_per_question=draft.seconds_per_question,
                    questions_per_attempt=questions_per_attempt,
                    time_limit_seconds=time_limit_seconds,
                    allow_retake=draft.allow_retake,
                    is_active=draft.is_active,
                    updated_at=timestamp,
                )
                quizzes = tuple(quiz if q.id == quiz_id else q for q in state.quizzes)
            else:
                quiz = QuizDefinition(
                    id=uuid4().hex,
                    title=draft.title.strip(),
                    description=draft.description.strip(),
                    question_pool=pool,
                    seconds_per_question=draft.seconds_per_question,
                    questions_per_attempt=questions_per_attempt,
                    time_limit_seconds=time_limit_seconds,
                    allow_retake=draft.allow_retake,
                    is_active=draft.is_active,
                    created_at=timestamp,
                    updated_at=timestamp,
                )
                quizzes = state.quizzes + (quiz,)

            active_quiz_id = state.active_quiz_id
            if draft.is_active:
                active_quiz_id = quiz.id
            elif active_quiz_id == quiz.id:
                active_quiz_id = None

            self._commit(
                _with_active_quiz(replace(state, quizzes=quizzes), active_quiz_id),
                StoreEventKind.QUIZ_SAVED,
                quiz.id,
            )
        logger.info(
            "Saved quiz %s: %d of %d questions, %ds limit",
            quiz.id,
            questions_per_attempt,
            len(pool),
            time_limit_seconds,
        )
        return quiz.id

    def set_active_quiz(self, quiz_id: str) -> None:
        with self._lock:
            state = self._state
            quiz = state.find_quiz(quiz_id)
            if quiz is None:
                raise RecordNotFoundError(f"Unknown quiz '{quiz_id}'.")
            touched = replace(quiz, updated_at=utc_now())
            quizzes = tuple(touched if q.id == quiz_id else q for q in state.quizzes)
            self._commit(
                _with_active_quiz(replace(state, quizzes=quizzes), quiz_id),
                StoreEventKind.QUIZ_ACTIVATED,
                quiz_id,
            )
        logger.info("Activated quiz %s", quiz_id)

    def delete_quiz_definition(self, quiz_id: str) -> bool:
        """Remove a definition and its attempts.

        When the active quiz is deleted the first remaining definition becomes
        active; with nothing left there is no active quiz.
        """
        with self._lock:
            state = self._state
            remaining = tuple(q for q in state.quizzes if q.id != quiz_id)
            if len(remaining) == len(state.quizzes):
                return False
            active_quiz_id = state.active_quiz_id
            if active_quiz_id == quiz_id:
                active_quiz_id = remaining[0].id if remaining else None
            next_state = AdminState(
                participants=state.participants,
                quizzes=remaining,
                attempts=tuple(a for a in state.attempts if a.quiz_id != quiz_id),
                active_quiz_id=active_quiz_id,
            )
            self._commit(
                _with_active_quiz(next_state, active_quiz_id),
                StoreEventKind.QUIZ_DELETED,
                quiz_id,
            )
        logger.info("Deleted quiz %s; active quiz is now %s", quiz_id, active_quiz_id)
        return True

    # --- Attempts ---

    def record_attempt(self, result: AttemptResult) -> Attempt:
        """Store a finalized attempt; the only path that creates attempts."""
        attempt = Attempt.from_result(uuid4().hex, result)
        with self._lock:
            state = self._state
            timestamp = utc_now()
            participants = tuple(
                replace(p, latest_score=attempt.score, updated_at=timestamp)
                if p.id == attempt.participant_id
                else p
                for p in state.participants
            )
            self._commit(
                replace(
                    state,
                    participants=participants,
                    attempts=(attempt,) + state.attempts,
                ),
                StoreEventKind.ATTEMPT_RECORDED,
                attempt.id,
            )
        logger.info(
            "Recorded attempt %s for participant %s: %s, %d/%d in %ds",
            attempt.id,
            attempt.participant_id,
            attempt.status.value,
            attempt.score,
            attempt.total_questions,
            attempt.time_taken_seconds,
        )
        return attempt

    def allocate_question_ids(self, quiz_id: str) -> list[int] | None:
        """Draw a random permutation of the quiz pool without replacement.

        Ignores usage history; personalized draws go through
        ``QuestionAllocator`` instead.
        """
        quiz = self.get_state().find_quiz(quiz_id)
        if quiz is None:
            return None
        pool = list(quiz.question_pool)
        required = min(quiz.questions_per_attempt, len(pool))
        if required < 1 or len(pool) < required:
            return None
        self._rng.shuffle(pool)
        return pool[:required]

    # --- Internals ---

    def _commit(self, next_state: AdminState, kind: StoreEventKind, record_id: str | None) -> None:
        # Caller holds self._lock.
        self._state = next_state
        self._persist(next_state)
        self._revision += 1
        event = StoreEvent(kind=kind, revision=self._revision, record_id=record_id)
        for listener in list(self._listeners.values()):
            try:
                listener(event)
            except Exception:
                # The snapshot is already committed; keep notifying the rest.
                logger.exception("Store listener failed while handling %s", kind.name)

    def _persist(self, state: AdminState) -> None:
        try:
            self._storage.write(self._storage_key, json.dumps(state.to_dict()))
        except StorageError as exc:
            logger.error("Admin state kept in memory only: %s", exc)

    def _validate_draft(self, draft: QuizDraft) -> tuple[int, ...]:
        if not draft.title.strip():
            raise QuizValidationError("Quiz title must not be empty.")
        pool = tuple(dict.fromkeys(int(question_id) for question_id in draft.question_pool))
        if len(pool) < MIN_QUESTION_POOL_SIZE:
            raise QuizValidationError(
                f"Question pool must contain at least {MIN_QUESTION_POOL_SIZE} questions."
            )
        unknown = [question_id for question_id in pool if question_id not in self._catalog]
        if unknown:
            raise QuizValidationError(f"Unknown question ids in pool: {unknown}.")
        if draft.seconds_per_question <= 0:
            raise QuizValidationError("Seconds per question must be a positive integer.")
        return pool

    def _load_state(self) -> AdminState:
        try:
            raw = self._storage.read(self._storage_key)
        except StorageError as exc:
            logger.error("Admin state unavailable, starting from defaults: %s", exc)
            return self._default_state()
        if raw is None:
            return self._default_state()
        try:
            return _reconcile_state(json.loads(raw))
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error("Stored admin state is unreadable, starting from defaults: %s", exc)
            return self._default_state()

    def _default_state(self) -> AdminState:
        pool = tuple(self._catalog.ids())
        questions_per_attempt = max(1, min(DEFAULT_QUESTIONS_PER_ATTEMPT, len(pool)))
        timestamp = utc_now()
        default_quiz = QuizDefinition(
            id=DEFAULT_QUIZ_ID,
            title=DEFAULT_QUIZ_TITLE,
            description=DEFAULT_QUIZ_DESCRIPTION,
            question_pool=pool,
            seconds_per_question=DEFAULT_SECONDS_PER_QUESTION,
            questions_per_attempt=questions_per_attempt,
            time_limit_seconds=questions_per_attempt * DEFAULT_SECONDS_PER_QUESTION,
            allow_retake=True,
            is_active=True,
            created_at=timestamp,
            updated_at=timestamp,
        )
        return AdminState(quizzes=(default_quiz,), active_quiz_id=default_quiz.id)


def _reconcile_state(data: dict) -> AdminState:
    """Rebuild a snapshot from stored JSON written by any schema version."""
    quizzes = tuple(QuizDefinition.from_dict(item) for item in data.get("quizzes") or [])
    active_quiz_id = data.get("activeQuizId")
    if active_quiz_id is None:
        active_quiz_id = next((quiz.id for quiz in quizzes if quiz.is_active), None)
    if active_quiz_id is not None and not any(quiz.id == active_quiz_id for quiz in quizzes):
        logger.warning("Stored active quiz %s no longer exists; clearing it", active_quiz_id)
        active_quiz_id = None
    state = AdminState(
        participants=tuple(Participant.from_dict(item) for item in data.get("students") or []),
        quizzes=quizzes,
        attempts=tuple(Attempt.from_dict(item) for item in data.get("attempts") or []),
        active_quiz_id=active_quiz_id,
    )
    return _with_active_quiz(state, active_quiz_id)


def _with_active_quiz(state: AdminState, active_quiz_id: str | None) -> AdminState:
    quizzes = tuple(
        quiz if quiz.is_active == (quiz.id == active_quiz_id)
        else replace(quiz, is_active=quiz.id == active_quiz_id)
        for quiz in state.quizzes
    )
    return replace(state, quizzes=quizzes, active_quiz_id=active_quiz_id)
