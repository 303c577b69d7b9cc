"""Back-of-book index location and parsing."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Sequence

from .types import DEFAULT_INDEX_KEYWORDS, IndexEntry, OutlineNode, Word
from .utils import parse_integer

__all__ = [
    "IndexEntryParser",
    "IndexLocation",
    "IndexLocator",
    "TokenKind",
    "chunk_to_entry",
    "classify_token",
    "parse_page_number",
    "parse_page_range",
    "parse_roman_number",
    "trim_token",
]

LOGGER = logging.getLogger(__name__)

_SIMPLE_NUMBER_RE = re.compile(r"\d+,?")
_NUMBER_RANGE_RE = re.compile(r"(\d+)(-|–|—)(\d+),?")
_ROMAN_NUMBER_RE = re.compile(
    r"(M{0,3})?(CM|CD|D?C{0,3})(XC|XL|L?X{0,3})(IX|IV|V?I{0,3}),?", re.IGNORECASE
)
_CONTAINS_DIGIT_RE = re.compile(r"\d+")
_TITLE_TRAILING = ".,;: \t"
# Wider spans are not page ranges.
MAX_PAGE_RANGE_SPAN = 500

WordSource = Callable[[int], Sequence[Word]]


# --------------------------------------------------------------------------
# Index location
# --------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class IndexLocation:
    """Physical pages holding the index and how they were found."""

    pages: tuple[int, ...]
    strategy: str


class IndexLocator:
    """Find the index pages via the outline or, failing that, page heuristics."""

    def __init__(
        self,
        keywords: Sequence[str] = DEFAULT_INDEX_KEYWORDS,
        *,
        tail_pages: int = 15,
        min_digit_words: int = 20,
        min_a_words: int = 10,
    ) -> None:
        self.keywords = tuple(keywords)
        self.tail_pages = tail_pages
        self.min_digit_words = min_digit_words
        self.min_a_words = min_a_words

    def locate(
        self,
        outline: Sequence[OutlineNode],
        page_count: int,
        words_for: WordSource,
    ) -> IndexLocation | None:
        location = self.from_outline(outline, page_count)
        if location is None:
            location = self.from_page_heuristics(page_count, words_for)
        if location is None:
            LOGGER.info("No index found")
        else:
            LOGGER.info(
                "Index found via %s on pages %d-%d",
                location.strategy,
                location.pages[0],
                location.pages[-1],
            )
        return location

    def from_outline(self, outline: Sequence[OutlineNode], page_count: int) -> IndexLocation | None:
        start_page: int | None = None
        end_page: int | None = None
        level = 0

        for node in outline:
            if node.title in self.keywords and node.is_page_bearing:
                start_page = node.page_number
                level = node.level
                continue
            if start_page is None:
                continue
            if node.level != level or not node.is_page_bearing:
                continue
            end_page = node.page_number
            break

        if start_page is None:
            return None
        if end_page is None:
            end_page = page_count + 1
        end_page = max(end_page, start_page + 1)
        return IndexLocation(pages=tuple(range(start_page, end_page)), strategy="outline")

    def is_index_page(self, words: Sequence[Word]) -> bool:
        texts = [word.text for word in words]
        if not any(text in self.keywords for text in texts):
            return False
        digit_words = sum(1 for text in texts if _CONTAINS_DIGIT_RE.search(text))
        if digit_words < self.min_digit_words:
            return False
        a_words = sum(1 for text in texts if text.startswith("A"))
        return a_words >= self.min_a_words

    def from_page_heuristics(self, page_count: int, words_for: WordSource) -> IndexLocation | None:
        first_candidate = max(1, page_count - self.tail_pages + 1)
        for page_number in range(first_candidate, page_count + 1):
            if self.is_index_page(words_for(page_number)):
                return IndexLocation(
                    pages=tuple(range(page_number, page_count + 1)),
                    strategy="page heuristics",
                )
            LOGGER.debug("Page %d rejected as index start", page_number)
        return None


# --------------------------------------------------------------------------
# Token helpers
# --------------------------------------------------------------------------
class TokenKind(Enum):
    PAGE_NUMBER = "page-number"
    FRONT_MATTER = "front-matter"
    TITLE_WORD = "title-word"


def trim_token(text: str) -> str:
    """Strip surrounding periods, then trailing commas and blanks."""
    return text.strip(".").rstrip(", \t")


def parse_page_number(text: str) -> int | None:
    if not _SIMPLE_NUMBER_RE.fullmatch(text):
        return None
    return int(text.rstrip(","))


def parse_page_range(text: str) -> tuple[int, int] | None:
    """Return the inclusive bounds of an ascending range no wider than MAX_PAGE_RANGE_SPAN."""
    match = _NUMBER_RANGE_RE.fullmatch(text)
    if match is None:
        return None
    start, end = int(match.group(1)), int(match.group(3))
    if end < start or end - start > MAX_PAGE_RANGE_SPAN:
        return None
    return start, end


def parse_roman_number(text: str) -> str | None:
    """Return the upper-cased numeral, or None if ``text`` is not one."""
    numeral = text.rstrip(",")
    if not numeral or not _ROMAN_NUMBER_RE.fullmatch(text):
        return None
    return numeral.upper()


def _is_page_number(text: str, chunk: Sequence[str]) -> bool:
    if not text:
        return False
    return parse_page_number(text) is not None or parse_page_range(text) is not None


def _is_front_matter(text: str, chunk: Sequence[str]) -> bool:
    # A numeral right after a page number is a new heading, not a locator.
    if chunk and parse_integer(chunk[-1]) is not None:
        return False
    return parse_roman_number(text) is not None


# Evaluated in order, first match wins.
TOKEN_RULES: tuple[tuple[Callable[[str, Sequence[str]], bool], TokenKind], ...] = (
    (_is_page_number, TokenKind.PAGE_NUMBER),
    (_is_front_matter, TokenKind.FRONT_MATTER),
)


def classify_token(trimmed: str, chunk: Sequence[str] = ()) -> TokenKind:
    for predicate, kind in TOKEN_RULES:
        if predicate(trimmed, chunk):
            return kind
    return TokenKind.TITLE_WORD


def chunk_to_entry(chunk: Iterable[str]) -> IndexEntry:
    """Convert accumulated tokens into an index entry."""

    title_words: list[str] = []
    pages: list[int] = []
    front_matter: list[str] = []

    for token in chunk:
        number = parse_page_number(token)
        if number is not None:
            pages.append(number)
            continue
        bounds = parse_page_range(token)
        if bounds is not None:
            pages.extend(range(bounds[0], bounds[1] + 1))
            continue
        numeral = parse_roman_number(token)
        if numeral is not None:
            front_matter.append(numeral)
            continue
        title_words.append(token)

    return IndexEntry(
        name=" ".join(title_words).rstrip(_TITLE_TRAILING),
        pages=tuple(dict.fromkeys(pages)),
        front_matter_pages=tuple(dict.fromkeys(front_matter)),
    )


def _is_complete(entry: IndexEntry) -> bool:
    return bool(entry.name.strip()) and entry.has_locators


# --------------------------------------------------------------------------
# Parsing
# --------------------------------------------------------------------------
@dataclass(slots=True)
class _Chunk:
    """Token accumulator; idle while empty."""

    tokens: list[str]

    @property
    def idle(self) -> bool:
        return not self.tokens

    def close(self) -> IndexEntry | None:
        """Return the finished entry and reset, or None while incomplete."""
        if self.idle:
            return None
        entry = chunk_to_entry(self.tokens)
        if not _is_complete(entry):
            return None
        self.tokens = []
        return entry

    def flush(self) -> IndexEntry | None:
        """Return the last entry at the end of the stream.

        The same completeness rule as :meth:`close` applies: a chunk without
        a name or without a locator is dropped.
        """
        entry = self.close()
        self.tokens = []
        return entry


class IndexEntryParser:
    """Group the word stream of index pages into index entries."""

    def __init__(self, keywords: Sequence[str] = DEFAULT_INDEX_KEYWORDS) -> None:
        self.keywords = tuple(keywords)

    def _is_heading(self, word: str) -> bool:
        if word in self.keywords:
            return True
        # Indexes are usually grouped under single capital letters.
        return len(word) == 1 and word.isupper()

    def parse(self, words: Iterable[str]) -> list[IndexEntry]:
        entries: list[IndexEntry] = []
        chunk = _Chunk(tokens=[])

        for word in words:
            trimmed = trim_token(word)
            kind = classify_token(trimmed, chunk.tokens)

            if kind is TokenKind.PAGE_NUMBER:
                if chunk.idle and parse_integer(trimmed) is not None:
                    # Folio of the index page itself.
                    continue
                chunk.tokens.append(trimmed)
            elif kind is TokenKind.FRONT_MATTER:
                chunk.tokens.append(trimmed)
            else:
                entry = chunk.close()
                if entry is not None:
                    entries.append(entry)
                if chunk.idle and self._is_heading(word):
                    continue
                chunk.tokens.append(word)

        entry = chunk.flush()
        if entry is not None:
            entries.append(entry)

        LOGGER.debug("Parsed %d index entries", len(entries))
        return entries
