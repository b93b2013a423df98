"""Read-only question catalog and its plain-text loader.

File format (repeat blocks separated by blank lines or '---'):

    ID: 12
    CATEGORY: World Geography
    Q: Question text (supports markdown). Additional lines until the
       next marker are treated as part of the question.
    A: First option text
    B: Second option text
    C: Third option text      (optional, up to F)
    CORRECT: B

Example:

    ID: 7
    CATEGORY: Science Basics
    Q: What is the freezing point of water?
    A: 0°C or 32°F
    B: 10°C or 50°F
    CORRECT: A

Catalog ids are stable: usage history and attempts reference them, so the
loader never renumbers questions.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

from quiz_kiosk.core.models import Question


class CatalogImportError(Exception):
    """Raised when a catalog file cannot be parsed."""


_OPTION_ORDER = ["A", "B", "C", "D", "E", "F"]

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "questions.txt"


class QuestionCatalog:
    """Immutable, ordered collection of questions keyed by stable integer id."""

    def __init__(self, questions: Iterable[Question]) -> None:
        ordered = list(questions)
        lookup: dict[int, Question] = {}
        for question in ordered:
            if question.id in lookup:
                raise ValueError(f"Duplicate question id {question.id} in catalog.")
            lookup[question.id] = question
        self._questions: tuple[Question, ...] = tuple(ordered)
        self._lookup = lookup

    def list_questions(self) -> list[Question]:
        return list(self._questions)

    def by_id(self, question_id: int) -> Question | None:
        return self._lookup.get(question_id)

    def by_ids(self, question_ids: Iterable[int]) -> list[Question]:
        """Resolve ids in order, skipping ids the catalog does not know."""
        resolved = (self._lookup.get(question_id) for question_id in question_ids)
        return [question for question in resolved if question is not None]

    def ids(self) -> list[int]:
        return [question.id for question in self._questions]

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._lookup

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def __len__(self) -> int:
        return len(self._questions)


def load_catalog_from_file(file_path: Path = DEFAULT_CATALOG_PATH) -> QuestionCatalog:
    text = file_path.read_text(encoding="utf-8")
    questions = parse_catalog_text(text)
    if not questions:
        raise CatalogImportError("Catalog file did not contain any questions.")
    try:
        return QuestionCatalog(questions)
    except ValueError as exc:
        raise CatalogImportError(str(exc)) from exc


def parse_catalog_text(text: str) -> list[Question]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())

    return [_parse_block(block) for block in blocks if block]


def _parse_block(block: str) -> Question:
    question_id: int | None = None
    category = ""
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letter: str | None = None
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        upper = line.upper()
        if upper.startswith("ID:"):
            raw_value = line.split(":", 1)[1].strip()
            try:
                question_id = int(raw_value)
            except ValueError as exc:
                raise CatalogImportError(f"ID must be an integer, got '{raw_value}'.") from exc
            current_section = None
            continue

        if upper.startswith("CATEGORY:"):
            category = line.split(":", 1)[1].strip()
            current_section = None
            continue

        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("CORRECT:"):
            correct_letter = line.split(":", 1)[1].strip().upper()
            current_section = None
            continue

        if len(line) > 2 and line[0].upper() in _OPTION_ORDER and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in _OPTION_ORDER:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise CatalogImportError(f"Encountered text outside of a known section: '{line}'.")

    if question_id is None:
        raise CatalogImportError("Question id missing (ID: ...)")
    if not question_lines:
        raise CatalogImportError(f"Question {question_id}: text missing (Q: ...)")

    letters = _OPTION_ORDER[: len(options)]
    if sorted(options) != letters:
        raise CatalogImportError(
            f"Question {question_id}: options must be consecutive letters starting at A."
        )
    if len(letters) < 2:
        raise CatalogImportError(f"Question {question_id}: at least two options are required.")

    option_list = tuple(options[letter].strip() for letter in letters)
    if any(not option for option in option_list):
        raise CatalogImportError(f"Question {question_id}: option text cannot be empty.")

    if correct_letter is None:
        raise CatalogImportError(f"Question {question_id}: CORRECT is required.")
    if correct_letter not in letters:
        raise CatalogImportError(
            f"Question {question_id}: CORRECT must be one of {', '.join(letters)}."
        )

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise CatalogImportError(f"Question {question_id}: text cannot be empty.")

    return Question(
        id=question_id,
        category=category or "General",
        text=question_text,
        options=option_list,
        correct_option_index=letters.index(correct_letter),
    )
