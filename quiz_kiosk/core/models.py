"""Domain models for the quiz kiosk.

Every record is a frozen dataclass: the state store swaps whole snapshots
instead of mutating records in place. ``to_dict``/``from_dict`` use the
camelCase keys of the persisted JSON layout.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice catalog question with at least two options."""

    id: int
    category: str
    text: str
    options: tuple[str, ...]
    correct_option_index: int

    def __post_init__(self) -> None:
        if len(self.options) < 2:
            raise ValueError(f"Question {self.id} must have at least two options.")
        if not 0 <= self.correct_option_index < len(self.options):
            raise ValueError(
                f"Question {self.id} correct option index {self.correct_option_index} is out of range."
            )

    def is_correct(self, selection: Selection) -> bool:
        return isinstance(selection, Selected) and selection.index == self.correct_option_index


@dataclass(frozen=True, slots=True)
class Unanswered:
    """The participant never picked an option for the question."""


@dataclass(frozen=True, slots=True)
class Selected:
    """The participant picked the option at ``index``."""

    index: int


Selection = Unanswered | Selected

UNANSWERED = Unanswered()


def selection_from_index(index: int | None) -> Selection:
    return UNANSWERED if index is None else Selected(index)


class AttemptStatus(str, Enum):
    COMPLETED = "completed"
    # Reserved for abnormal termination; normal finalization never produces it.
    INCOMPLETE = "incomplete"
    TIMEOUT = "timeout"


@dataclass(frozen=True, slots=True)
class Participant:
    """Registered walk-up participant."""

    id: str
    name: str
    phone: str
    class_name: str
    latest_score: int | None = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "className": self.class_name,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
        if self.latest_score is not None:
            data["quizMark"] = self.latest_score
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Participant:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            phone=str(data.get("phone", "")),
            class_name=str(data.get("className", "")),
            latest_score=data.get("quizMark"),
            created_at=parse_timestamp(data.get("createdAt")) or utc_now(),
            updated_at=parse_timestamp(data.get("updatedAt")) or utc_now(),
        )


@dataclass(frozen=True, slots=True)
class QuizDraft:
    """Administrator input for creating or updating a quiz definition."""

    title: str
    description: str
    question_pool: tuple[int, ...]
    seconds_per_question: int
    questions_per_attempt: int
    allow_retake: bool = True
    is_active: bool = False


@dataclass(frozen=True, slots=True)
class QuizDefinition:
    """Stored quiz configuration. ``time_limit_seconds`` is always derived."""

    id: str
    title: str
    description: str
    question_pool: tuple[int, ...]
    seconds_per_question: int
    questions_per_attempt: int
    time_limit_seconds: int
    allow_retake: bool
    is_active: bool
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def time_limit_minutes(self) -> int:
        return self.time_limit_seconds // 60

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "questionIds": list(self.question_pool),
            "perQuestionSeconds": self.seconds_per_question,
            "questionsPerAttempt": self.questions_per_attempt,
            "timeLimitSeconds": self.time_limit_seconds,
            "allowRetake": self.allow_retake,
            "isActive": self.is_active,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuizDefinition:
        """Build a definition, backfilling fields written by older schema versions."""
        pool = tuple(int(question_id) for question_id in data.get("questionIds", []))
        seconds_per_question = int(data.get("perQuestionSeconds", 0))
        questions_per_attempt = data.get("questionsPerAttempt")
        if questions_per_attempt is None:
            questions_per_attempt = len(pool)
        time_limit_seconds = data.get("timeLimitSeconds")
        if time_limit_seconds is None:
            time_limit_seconds = int(questions_per_attempt) * seconds_per_question
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            question_pool=pool,
            seconds_per_question=seconds_per_question,
            questions_per_attempt=int(questions_per_attempt),
            time_limit_seconds=int(time_limit_seconds),
            allow_retake=bool(data.get("allowRetake", True)),
            is_active=bool(data.get("isActive", False)),
            created_at=parse_timestamp(data.get("createdAt")) or utc_now(),
            updated_at=parse_timestamp(data.get("updatedAt")) or utc_now(),
        )


@dataclass(frozen=True, slots=True)
class AttemptAnswer:
    """Correctness record for one served question."""

    question_id: int
    selection: Selection
    is_correct: bool

    @property
    def selected_option_index(self) -> int | None:
        if isinstance(self.selection, Selected):
            return self.selection.index
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "questionId": self.question_id,
            "selectedOption": self.selected_option_index,
            "isCorrect": self.is_correct,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AttemptAnswer:
        selected = data.get("selectedOption")
        return cls(
            question_id=int(data["questionId"]),
            selection=selection_from_index(None if selected is None else int(selected)),
            is_correct=bool(data.get("isCorrect", False)),
        )


@dataclass(frozen=True, slots=True)
class AttemptResult:
    """Everything finalize knows about an attempt before the store assigns an id."""

    quiz_id: str
    participant_id: str
    participant_name: str
    class_name: str
    phone: str
    answers: tuple[AttemptAnswer, ...]
    score: int
    total_questions: int
    started_at: datetime
    completed_at: datetime | None
    status: AttemptStatus
    time_taken_seconds: int


@dataclass(frozen=True, slots=True)
class Attempt:
    """Finalized, immutable quiz attempt."""

    id: str
    quiz_id: str
    participant_id: str
    participant_name: str
    class_name: str
    phone: str
    answers: tuple[AttemptAnswer, ...]
    score: int
    total_questions: int
    started_at: datetime
    completed_at: datetime | None
    status: AttemptStatus
    time_taken_seconds: int

    @classmethod
    def from_result(cls, attempt_id: str, result: AttemptResult) -> Attempt:
        return cls(
            id=attempt_id,
            quiz_id=result.quiz_id,
            participant_id=result.participant_id,
            participant_name=result.participant_name,
            class_name=result.class_name,
            phone=result.phone,
            answers=result.answers,
            score=result.score,
            total_questions=result.total_questions,
            started_at=result.started_at,
            completed_at=result.completed_at,
            status=result.status,
            time_taken_seconds=result.time_taken_seconds,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "quizId": self.quiz_id,
            "studentId": self.participant_id,
            "studentName": self.participant_name,
            "className": self.class_name,
            "phone": self.phone,
            "answers": [answer.to_dict() for answer in self.answers],
            "score": self.score,
            "totalQuestions": self.total_questions,
            "startedAt": format_timestamp(self.started_at),
            "status": self.status.value,
            "timeTakenSeconds": self.time_taken_seconds,
        }
        if self.completed_at is not None:
            data["completedAt"] = format_timestamp(self.completed_at)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Attempt:
        return cls(
            id=str(data["id"]),
            quiz_id=str(data["quizId"]),
            participant_id=str(data["studentId"]),
            participant_name=str(data.get("studentName", "")),
            class_name=str(data.get("className", "")),
            phone=str(data.get("phone", "")),
            answers=tuple(AttemptAnswer.from_dict(item) for item in data.get("answers", [])),
            score=int(data.get("score", 0)),
            total_questions=int(data.get("totalQuestions", 0)),
            started_at=parse_timestamp(data.get("startedAt")) or utc_now(),
            completed_at=parse_timestamp(data.get("completedAt")),
            status=AttemptStatus(data.get("status", AttemptStatus.INCOMPLETE.value)),
            time_taken_seconds=int(data.get("timeTakenSeconds", 0)),
        )


@dataclass(frozen=True, slots=True)
class AdminState:
    """Immutable snapshot of everything the state store owns."""

    participants: tuple[Participant, ...] = ()
    quizzes: tuple[QuizDefinition, ...] = ()
    attempts: tuple[Attempt, ...] = ()
    active_quiz_id: str | None = None

    @property
    def active_quiz(self) -> QuizDefinition | None:
        if self.active_quiz_id is None:
            return None
        return self.find_quiz(self.active_quiz_id)

    def find_quiz(self, quiz_id: str) -> QuizDefinition | None:
        return next((quiz for quiz in self.quizzes if quiz.id == quiz_id), None)

    def find_participant(self, participant_id: str) -> Participant | None:
        return next((p for p in self.participants if p.id == participant_id), None)

    def find_attempt(self, attempt_id: str) -> Attempt | None:
        return next((a for a in self.attempts if a.id == attempt_id), None)

    def attempts_for_participant(self, participant_id: str) -> list[Attempt]:
        return [attempt for attempt in self.attempts if attempt.participant_id == participant_id]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "students": [participant.to_dict() for participant in self.participants],
            "quizzes": [quiz.to_dict() for quiz in self.quizzes],
            "attempts": [attempt.to_dict() for attempt in self.attempts],
        }
        if self.active_quiz_id is not None:
            data["activeQuizId"] = self.active_quiz_id
        return data
