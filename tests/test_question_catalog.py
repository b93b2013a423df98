import pytest

from quiz_kiosk.core.question_catalog import (
    CatalogImportError,
    QuestionCatalog,
    load_catalog_from_file,
    parse_catalog_text,
)

from conftest import make_question


def test_default_catalog_ships_forty_questions():
    catalog = load_catalog_from_file()
    assert len(catalog) == 40
    assert catalog.ids() == list(range(1, 41))
    assert catalog.by_id(2).options[catalog.by_id(2).correct_option_index] == "Japan"


def test_parse_block_with_multiline_question_and_separator():
    text = """ID: 5
CATEGORY: Science
Q: What is the boiling point
of water at sea level?
A: 90°C
B: 100°C
C: 110°C
CORRECT: b
---
ID: 6
Q: Two plus two?
A: 4
B: 5
CORRECT: A
"""
    questions = parse_catalog_text(text)
    assert [question.id for question in questions] == [5, 6]
    assert questions[0].text == "What is the boiling point\nof water at sea level?"
    assert questions[0].correct_option_index == 1
    assert questions[1].category == "General"


@pytest.mark.parametrize(
    "block",
    [
        "Q: Missing id\nA: 1\nB: 2\nCORRECT: A",
        "ID: x\nQ: Bad id\nA: 1\nB: 2\nCORRECT: A",
        "ID: 1\nQ: One option\nA: 1\nCORRECT: A",
        "ID: 1\nQ: Gap\nA: 1\nC: 3\nCORRECT: A",
        "ID: 1\nQ: No answer\nA: 1\nB: 2",
        "ID: 1\nQ: Wrong letter\nA: 1\nB: 2\nCORRECT: D",
    ],
)
def test_parse_rejects_malformed_blocks(block):
    with pytest.raises(CatalogImportError):
        parse_catalog_text(block)


def test_catalog_rejects_duplicate_ids():
    with pytest.raises(ValueError):
        QuestionCatalog([make_question(1), make_question(1)])


def test_by_ids_preserves_order_and_skips_unknown(catalog):
    assert [question.id for question in catalog.by_ids([4, 99, 2])] == [4, 2]
    assert 4 in catalog
    assert 99 not in catalog


def test_load_catalog_rejects_empty_file(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("\n\n", encoding="utf-8")
    with pytest.raises(CatalogImportError):
        load_catalog_from_file(path)
