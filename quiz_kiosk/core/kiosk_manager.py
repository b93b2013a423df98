"""Business logic shared by the kiosk window: registration, allocation, attempts."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from quiz_kiosk.core.identity import RegistrationForm, validate_registration
from quiz_kiosk.core.models import Participant, QuizDefinition
from quiz_kiosk.core.question_catalog import QuestionCatalog
from quiz_kiosk.core.services.attempt_session import AttemptSession, Scheduler
from quiz_kiosk.core.services.question_allocator import QuestionAllocator
from quiz_kiosk.core.services.state_store import AdminStateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class QuizSummary:
    """What the registration screen shows about the active quiz."""

    quiz_id: str
    title: str
    description: str
    question_count: int
    time_limit_seconds: int
    time_limit_minutes: int
    allow_retake: bool


class KioskManager:
    """Facade for the store, catalog, and allocator used by the kiosk UI."""

    def __init__(
        self,
        store: AdminStateStore,
        catalog: QuestionCatalog,
        allocator: QuestionAllocator,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._allocator = allocator

    @property
    def store(self) -> AdminStateStore:
        return self._store

    @property
    def catalog(self) -> QuestionCatalog:
        return self._catalog

    def active_quiz(self) -> QuizDefinition | None:
        return self._store.get_state().active_quiz

    def quiz_summary(self) -> QuizSummary | None:
        quiz = self.active_quiz()
        if quiz is None:
            return None
        return QuizSummary(
            quiz_id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            question_count=quiz.questions_per_attempt,
            time_limit_seconds=quiz.time_limit_seconds,
            time_limit_minutes=quiz.time_limit_minutes,
            allow_retake=quiz.allow_retake,
        )

    def register_participant(self, form: RegistrationForm) -> Participant:
        """Validate ``form`` and return the matching participant record.

        A returning phone number updates the stored name and class instead of
        creating a duplicate participant.
        """
        cleaned = validate_registration(form)
        existing = self._store.find_participant_by_phone(cleaned.phone)
        if existing is None:
            return self._store.add_participant(cleaned.name, cleaned.phone, cleaned.class_name)
        if existing.name == cleaned.name and existing.class_name == cleaned.class_name:
            return existing
        return self._store.update_participant(
            existing.id, name=cleaned.name, class_name=cleaned.class_name
        )

    def start_attempt(self, form: RegistrationForm, scheduler: Scheduler) -> AttemptSession | None:
        """Register the participant and build an attempt over personalized questions.

        Returns ``None`` when there is no active quiz or nothing can be
        allocated; the session is returned unstarted.
        """
        quiz = self.active_quiz()
        if quiz is None:
            logger.warning("Attempt refused: no active quiz")
            return None
        participant = self.register_participant(form)
        questions = self._allocator.allocate(
            participant.name, participant.phone, quiz.questions_per_attempt
        )
        if not questions:
            logger.warning("Attempt refused: no questions could be allocated for quiz %s", quiz.id)
            return None
        return AttemptSession(quiz, participant, questions, self._store, scheduler)
