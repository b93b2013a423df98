import random

import pytest

from quiz_kiosk.core.models import Question, QuizDraft
from quiz_kiosk.core.question_catalog import QuestionCatalog
from quiz_kiosk.core.services.local_storage import MemoryStorage, StorageError
from quiz_kiosk.core.services.question_allocator import QuestionAllocator
from quiz_kiosk.core.services.state_store import AdminStateStore
from quiz_kiosk.core.services.usage_ledger import UsageLedger


def make_question(question_id, correct_option_index=0, category="General"):
    return Question(
        id=question_id,
        category=category,
        text=f"Question {question_id}?",
        options=("Alpha", "Bravo", "Charlie", "Delta"),
        correct_option_index=correct_option_index,
    )


def make_draft(**overrides):
    values = {
        "title": "Science Round",
        "description": "Short science quiz",
        "question_pool": (1, 2, 3, 4, 5, 6),
        "seconds_per_question": 30,
        "questions_per_attempt": 3,
        "allow_retake": True,
        "is_active": False,
    }
    values.update(overrides)
    return QuizDraft(**values)


class FakeCall:
    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Manual clock: callbacks run only when the test advances time."""

    def __init__(self):
        self.now = 0.0
        self._sequence = 0
        self._pending = []

    def call_later(self, delay_seconds, callback):
        call = FakeCall()
        self._sequence += 1
        self._pending.append((self.now + delay_seconds, self._sequence, call, callback))
        return call

    @property
    def pending_count(self):
        return sum(1 for _, _, call, _ in self._pending if not call.cancelled)

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [entry for entry in self._pending if not entry[2].cancelled and entry[0] <= target + 1e-9]
            if not due:
                break
            entry = min(due, key=lambda item: (item[0], item[1]))
            self._pending.remove(entry)
            self.now = max(self.now, entry[0])
            entry[3]()
        self._pending = [entry for entry in self._pending if not entry[2].cancelled]
        self.now = target


class FailingStorage(MemoryStorage):
    def write(self, key, value):
        raise StorageError("disk full")


@pytest.fixture
def catalog():
    return QuestionCatalog(make_question(i, correct_option_index=i % 4) for i in range(1, 11))


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage, catalog):
    return AdminStateStore(storage, catalog, rng=random.Random(7))


@pytest.fixture
def allocator(storage, catalog):
    return QuestionAllocator(catalog, UsageLedger(storage))


@pytest.fixture
def scheduler():
    return FakeScheduler()
