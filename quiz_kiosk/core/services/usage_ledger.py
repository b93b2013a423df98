"""Persisted record of which question ids each identity has already been served."""

from __future__ import annotations

import json
import logging

from quiz_kiosk.constants.kiosk_constants import QUESTION_USAGE_STORAGE_KEY
from quiz_kiosk.core.services.local_storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)


class UsageLedger:
    """Maps identity keys to the ordered list of question ids already served.

    Owned by the allocator. Unreadable storage yields an empty ledger and
    failed writes keep the in-memory copy, so allocation degrades to
    session-only history instead of failing.
    """

    def __init__(self, storage: KeyValueStorage, storage_key: str = QUESTION_USAGE_STORAGE_KEY) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._entries: dict[str, list[int]] = self._load()

    def used_ids(self, identity_key: str) -> list[int]:
        return list(self._entries.get(identity_key, []))

    def replace(self, identity_key: str, question_ids: list[int]) -> None:
        self._entries[identity_key] = list(question_ids)
        self._persist()

    def extend(self, identity_key: str, question_ids: list[int], limit: int) -> list[int]:
        """Append ids, de-duplicate keeping first occurrences, keep the last ``limit``."""
        merged = list(dict.fromkeys(self._entries.get(identity_key, []) + list(question_ids)))
        if limit > 0:
            merged = merged[-limit:]
        self._entries[identity_key] = merged
        self._persist()
        return list(merged)

    def _load(self) -> dict[str, list[int]]:
        try:
            raw = self._storage.read(self._storage_key)
        except StorageError as exc:
            logger.error("Question usage unavailable, starting empty: %s", exc)
            return {}
        if raw is None:
            return {}
        try:
            data = json.loads(raw)
            return {str(key): [int(value) for value in ids] for key, ids in data.items()}
        except (ValueError, TypeError, AttributeError) as exc:
            logger.error("Stored question usage is unreadable, starting empty: %s", exc)
            return {}

    def _persist(self) -> None:
        try:
            self._storage.write(self._storage_key, json.dumps(self._entries))
        except StorageError as exc:
            logger.error("Question usage kept in memory only: %s", exc)
