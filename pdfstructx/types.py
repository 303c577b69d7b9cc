"""
Type definitions and dataclasses for pdfstructx.

This module defines the data structures shared by the document backends, the
structure heuristics and the page assembler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


DEFAULT_INDEX_KEYWORDS: tuple[str, ...] = ("Index", "Stichwortverzeichnis")


@dataclass(slots=True, frozen=True)
class BoundingBox:
    """Axis-aligned rectangle using PDF coordinates (y grows upward)."""

    left: float
    bottom: float
    right: float
    top: float

    def width(self) -> float:
        return max(0.0, self.right - self.left)

    def height(self) -> float:
        return max(0.0, self.top - self.bottom)

    def intersects(self, other: BoundingBox) -> bool:
        return (
            self.left <= other.right
            and other.left <= self.right
            and self.bottom <= other.top
            and other.bottom <= self.top
        )

    def union(self, other: BoundingBox) -> BoundingBox:
        return BoundingBox(
            left=min(self.left, other.left),
            bottom=min(self.bottom, other.bottom),
            right=max(self.right, other.right),
            top=max(self.top, other.top),
        )


@dataclass(slots=True, frozen=True)
class Word:
    """A single word extracted from a page."""

    text: str
    bbox: BoundingBox


@dataclass(slots=True, frozen=True)
class OutlineNode:
    """
    Flattened bookmark entry.

    Attributes:
        title: Bookmark title as stored in the document
        level: Hierarchy depth, 0 for top-level bookmarks
        page_number: 1-based physical page, or None when the bookmark does
            not point at a page of this document
    """

    title: str
    level: int = 0
    page_number: int | None = None

    @property
    def is_page_bearing(self) -> bool:
        return self.page_number is not None


@dataclass(slots=True, frozen=True)
class Chapter:
    """Chapter start derived from a page-bearing bookmark."""

    title: str
    start_page: int

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "start_page": self.start_page}


@dataclass(slots=True, frozen=True)
class IndexEntry:
    """
    One line of a back-of-book index.

    Attributes:
        name: Entry title
        pages: Referenced page numbers, in order of appearance
        front_matter_pages: Referenced roman-numeral labels, upper-cased
    """

    name: str
    pages: tuple[int, ...] = ()
    front_matter_pages: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.name.strip() and not self.pages and not self.front_matter_pages

    @property
    def has_locators(self) -> bool:
        return bool(self.pages or self.front_matter_pages)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "pages": list(self.pages),
            "front_matter_pages": list(self.front_matter_pages),
        }


@dataclass(slots=True, frozen=True)
class Index:
    """Parsed back-of-book index of one document."""

    index_pages: tuple[int, ...]
    entries: tuple[IndexEntry, ...] = ()

    def entries_by_page(self) -> dict[int, tuple[IndexEntry, ...]]:
        lookup: dict[int, list[IndexEntry]] = {}
        for entry in self.entries:
            for page in entry.pages:
                lookup.setdefault(page, []).append(entry)
        return {page: tuple(entries) for page, entries in lookup.items()}


@dataclass(slots=True, frozen=True)
class PageRecord:
    """
    Structured view of one physical page.

    Attributes:
        physical_page: 1-based page position in the file
        chapter: Enclosing chapter, if any bookmark precedes the page
        index_entries: Index entries referencing the page
        words: Page words in reading order
        logical_page: Printed page number the index refers to
    """

    physical_page: int
    chapter: Chapter | None
    index_entries: tuple[IndexEntry, ...]
    words: tuple[str, ...]
    logical_page: int | None = None

    @property
    def text(self) -> str:
        return " ".join(self.words)

    def to_dict(self) -> dict[str, Any]:
        return {
            "physical_page": self.physical_page,
            "logical_page": self.logical_page,
            "chapter": self.chapter.to_dict() if self.chapter else None,
            "index_entries": [entry.to_dict() for entry in self.index_entries],
            "words": list(self.words),
        }


@dataclass(slots=True)
class DocumentInfo:
    """Summary of the structure recovered from a document."""

    path: str
    page_count: int
    has_outline: bool
    has_page_labels: bool
    page_offset: int
    chapter_count: int
    index_pages: list[int] = field(default_factory=list)
    index_entry_count: int = 0


@dataclass(slots=True, frozen=True)
class ReaderOptions:
    """Options controlling how document structure is recovered."""

    index_keywords: tuple[str, ...] = DEFAULT_INDEX_KEYWORDS
    reading_order_tolerance: float = 10.0
    within_line_gap: float = 1.0
    between_line_gap: float = 1.0
    index_tail_pages: int = 15
    index_min_digit_words: int = 20
    index_min_a_words: int = 10
    offset_sample_pages: int = 60
    workers: int = 1
