"""Search helpers and CSV export for recorded attempts."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import csv
import io

from quiz_kiosk.core.models import Attempt, AttemptStatus, Participant, format_timestamp

CSV_HEADER = (
    "Student",
    "Class",
    "Phone",
    "Quiz",
    "Score",
    "Total",
    "Status",
    "Time taken (s)",
    "Started",
    "Completed",
)

UNKNOWN_QUIZ_LABEL = "Unknown quiz"


def filter_attempts(
    attempts: Iterable[Attempt],
    search: str = "",
    status: AttemptStatus | None = None,
) -> list[Attempt]:
    """Match the search term against name, class (case-insensitive) or phone."""
    term = search.strip().lower()
    matches: list[Attempt] = []
    for attempt in attempts:
        if status is not None and attempt.status is not status:
            continue
        if term and not (
            term in attempt.participant_name.lower()
            or term in attempt.class_name.lower()
            or term in attempt.phone
        ):
            continue
        matches.append(attempt)
    return matches


def filter_participants(participants: Iterable[Participant], search: str = "") -> list[Participant]:
    term = search.strip().lower()
    if not term:
        return list(participants)
    return [
        participant
        for participant in participants
        if term in participant.name.lower()
        or term in participant.phone
        or term in participant.class_name.lower()
    ]


def render_attempts_csv(attempts: Iterable[Attempt], quiz_titles: Mapping[str, str]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for attempt in attempts:
        writer.writerow(
            (
                attempt.participant_name,
                attempt.class_name,
                attempt.phone,
                quiz_titles.get(attempt.quiz_id, UNKNOWN_QUIZ_LABEL),
                attempt.score,
                attempt.total_questions,
                attempt.status.value,
                attempt.time_taken_seconds,
                format_timestamp(attempt.started_at),
                format_timestamp(attempt.completed_at) or "",
            )
        )
    return buffer.getvalue()
