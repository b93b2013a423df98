"""Personalized question allocation.

Each identity walks through the catalog without repeats until too few unseen
questions remain, then starts over. Draws are reproducible: the shuffle is
seeded from the participant's raw details and how many ids they have already
been served, so the same inputs against the same ledger always produce the
same questions.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
import math
from typing import TypeVar

from quiz_kiosk.core.identity import build_identity_key
from quiz_kiosk.core.models import Question
from quiz_kiosk.core.question_catalog import QuestionCatalog
from quiz_kiosk.core.services.usage_ledger import UsageLedger

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LCG_MULTIPLIER = 9301
_LCG_INCREMENT = 49297
_LCG_MODULUS = 233280


def rolling_hash(text: str) -> int:
    """31-based multiply-add hash over UTF-16 code units, wrapped to signed 32 bits.

    Returns the absolute value, so the result lies in ``[0, 2**31]``.
    """
    encoded = text.encode("utf-16-le", "surrogatepass")
    value = 0
    for offset in range(0, len(encoded), 2):
        code_unit = encoded[offset] | (encoded[offset + 1] << 8)
        value = (value * 31 + code_unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return abs(value)


def derive_seed(name: str, phone: str, used_count: int) -> int:
    return rolling_hash(f"{name}-{phone}-{used_count}")


class LinearCongruentialRandom:
    """Small LCG yielding floats in ``[0, 1)``."""

    def __init__(self, seed: int) -> None:
        self._state = seed

    def random(self) -> float:
        self._state = (self._state * _LCG_MULTIPLIER + _LCG_INCREMENT) % _LCG_MODULUS
        return self._state / _LCG_MODULUS


def seeded_shuffle(items: Sequence[T], seed: int) -> list[T]:
    """Fisher-Yates shuffle driven by ``LinearCongruentialRandom``; input is untouched."""
    shuffled = list(items)
    generator = LinearCongruentialRandom(seed)
    for i in range(len(shuffled) - 1, 0, -1):
        j = math.floor(generator.random() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


class QuestionAllocator:
    """Draws per-identity question sets from the catalog and records them in the ledger."""

    def __init__(self, catalog: QuestionCatalog, ledger: UsageLedger) -> None:
        self._catalog = catalog
        self._ledger = ledger

    @property
    def ledger(self) -> UsageLedger:
        return self._ledger

    def allocate(self, name: str, phone: str, count: int) -> list[Question]:
        if count <= 0:
            return []

        identity_key = build_identity_key(name, phone)
        used = self._ledger.used_ids(identity_key)
        used_set = set(used)
        questions = self._catalog.list_questions()
        available = [question for question in questions if question.id not in used_set]

        needs_reset = len(available) < count
        pool = questions if needs_reset else available

        seed = derive_seed(name, phone, len(used_set))
        selected = seeded_shuffle(pool, seed)[:count]
        selected_ids = [question.id for question in selected]

        if needs_reset:
            self._ledger.replace(identity_key, selected_ids)
            logger.info(
                "Question history exhausted for %s; starting a new cycle with %d questions",
                identity_key,
                len(selected_ids),
            )
        else:
            self._ledger.extend(identity_key, selected_ids, limit=len(questions))
            logger.debug(
                "Allocated %d questions to %s (%d previously served)",
                len(selected_ids),
                identity_key,
                len(used_set),
            )
        return selected
