from __future__ import annotations

import pytest

from pdfstructx.index import (
    IndexEntryParser,
    TokenKind,
    chunk_to_entry,
    classify_token,
    parse_page_number,
    parse_page_range,
    parse_roman_number,
    trim_token,
)
from pdfstructx.types import IndexEntry


def _parse(text: str) -> list[IndexEntry]:
    return IndexEntryParser().parse(text.split())


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("12,", "12"),
        ("...5.", "5"),
        ("Apple,", "Apple"),
        ("Apple.", "Apple"),
        ("ix,\t", "ix"),
    ],
)
def test_trim_token(raw: str, expected: str) -> None:
    assert trim_token(raw) == expected


@pytest.mark.parametrize("text", ["12-14", "12–14", "12—14", "12-14,"])
def test_parse_page_range_accepts_dash_variants(text: str) -> None:
    assert parse_page_range(text) == (12, 14)


def test_parse_page_number() -> None:
    assert parse_page_number("12") == 12
    assert parse_page_number("12,") == 12
    assert parse_page_number("12a") is None
    assert parse_page_number("-12") is None


@pytest.mark.parametrize(("text", "expected"), [("ii", "II"), ("II", "II"), ("xiv,", "XIV"), ("MCM", "MCM")])
def test_parse_roman_number(text: str, expected: str) -> None:
    assert parse_roman_number(text) == expected


@pytest.mark.parametrize("text", ["", "IIII", "Apple", "VV"])
def test_parse_roman_number_rejects(text: str) -> None:
    assert parse_roman_number(text) is None


def test_classify_token_rule_order() -> None:
    assert classify_token("12") is TokenKind.PAGE_NUMBER
    assert classify_token("12-14") is TokenKind.PAGE_NUMBER
    assert classify_token("II", ["Alpha"]) is TokenKind.FRONT_MATTER
    assert classify_token("II", ["Alpha", "2"]) is TokenKind.TITLE_WORD
    assert classify_token("Alpha", ["Beta"]) is TokenKind.TITLE_WORD


def test_chunk_to_entry_expands_ranges_and_dedupes() -> None:
    entry = chunk_to_entry(["Range", "12–14", "13", "ii", "II"])

    assert entry == IndexEntry(name="Range", pages=(12, 13, 14), front_matter_pages=("II",))


def test_chunk_to_entry_strips_title_punctuation() -> None:
    entry = chunk_to_entry(["Far", "away,", "2"])

    assert entry.name == "Far away"
    assert entry.pages == (2,)


def test_parses_document_example() -> None:
    entries = _parse("At 5, 6, 7 Lorem II, III, 2")

    assert entries == [
        IndexEntry(name="At", pages=(5, 6, 7), front_matter_pages=()),
        IndexEntry(name="Lorem", pages=(2,), front_matter_pages=("II", "III")),
    ]


def test_multi_word_titles_accumulate() -> None:
    entries = _parse("Far away 2 Near by 4-5")

    assert entries == [
        IndexEntry(name="Far away", pages=(2,)),
        IndexEntry(name="Near by", pages=(4, 5)),
    ]


def test_letter_headers_and_keywords_are_skipped() -> None:
    entries = _parse("Index A Apple 3 Axe 4, 9 B Banana 12")

    assert [entry.name for entry in entries] == ["Apple", "Axe", "Banana"]
    assert entries[1].pages == (4, 9)


def test_custom_keywords_are_skipped() -> None:
    entries = IndexEntryParser(["Register"]).parse("Register Apple 3".split())

    assert entries == [IndexEntry(name="Apple", pages=(3,))]


def test_folio_before_first_entry_is_discarded() -> None:
    entries = _parse("214 Apple 3")

    assert entries == [IndexEntry(name="Apple", pages=(3,))]


def test_trailing_entry_is_flushed() -> None:
    entries = _parse("Apple 3 Axe 4, 5")

    assert entries == [IndexEntry(name="Apple", pages=(3,)), IndexEntry(name="Axe", pages=(4, 5))]


def test_trailing_entry_without_locator_is_dropped() -> None:
    assert _parse("Apple 3 Dangling") == [IndexEntry(name="Apple", pages=(3,))]
    assert _parse("Apple 3 Far away") == [IndexEntry(name="Apple", pages=(3,))]


def test_absurd_number_ranges_are_title_words() -> None:
    assert parse_page_range("0800-99999999") is None
    assert parse_page_range("14-12") is None
    assert parse_page_range("1-501") == (1, 501)
    assert classify_token("0800-99999999") is TokenKind.TITLE_WORD

    entries = _parse("Hotline 0800-99999999 12 Apple 3")

    assert entries == [
        IndexEntry(name="Hotline 0800-99999999", pages=(12,)),
        IndexEntry(name="Apple", pages=(3,)),
    ]


def test_no_empty_entries_are_emitted() -> None:
    entries = _parse(". , ; Apple 3 ...")

    assert entries
    assert all(not entry.is_empty for entry in entries)


def test_empty_stream() -> None:
    assert IndexEntryParser().parse([]) == []
