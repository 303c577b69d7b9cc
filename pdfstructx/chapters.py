"""Chapter attribution from the document outline."""

from __future__ import annotations

import logging
from bisect import bisect_right
from typing import Iterable

from .types import Chapter, OutlineNode

LOGGER = logging.getLogger(__name__)


def build_chapters(outline: Iterable[OutlineNode]) -> list[Chapter]:
    """Return chapters for every page-bearing bookmark, ordered by start page."""

    chapters = [
        Chapter(title=node.title, start_page=node.page_number)
        for node in outline
        if node.is_page_bearing
    ]
    chapters.sort(key=lambda chapter: chapter.start_page)
    return chapters


class BookmarkChapterMapper:
    """Map physical pages to the most recent chapter-start bookmark."""

    def __init__(self, outline: Iterable[OutlineNode]) -> None:
        self.chapters: tuple[Chapter, ...] = tuple(build_chapters(outline))
        self._start_pages = [chapter.start_page for chapter in self.chapters]
        LOGGER.debug("Built %d chapters from outline", len(self.chapters))

    def __len__(self) -> int:
        return len(self.chapters)

    def chapter_for(self, page_number: int) -> Chapter | None:
        position = bisect_right(self._start_pages, page_number)
        if position == 0:
            return None
        return self.chapters[position - 1]
