"""Page assembly: the structured, page-indexed view of one open document."""

from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from itertools import islice
from typing import Iterator, Optional

from .backends import BackendDocument, DocumentBackend, PypdfBackend
from .chapters import BookmarkChapterMapper
from .exceptions import DocumentClosedError
from .index import IndexEntryParser, IndexLocator
from .layout import ReadingOrderReconstructor
from .offsets import PageOffsetEstimator
from .types import (
    Chapter,
    DocumentInfo,
    Index,
    IndexEntry,
    OutlineNode,
    PageRecord,
    ReaderOptions,
    Word,
)
from .utils import PathLike, time_block, to_path

__all__ = ["PdfContentAssembler", "open_document"]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class _DocumentStructure:
    """Per-document state computed once and read-only afterwards."""

    chapters: BookmarkChapterMapper
    index: Index | None
    entries_by_page: dict[int, tuple[IndexEntry, ...]]
    page_offset: int
    has_outline: bool


class PdfContentAssembler:
    """
    Reader session producing one :class:`PageRecord` per physical page.

    The session exclusively owns the backend document. Chapters, the index
    and the page offset are recovered once, on first use, and shared by all
    page records.

    Example:
        >>> with PdfContentAssembler.open("book.pdf") as session:
        ...     for page in session.pages():
        ...         print(page.physical_page, page.chapter)
    """

    def __init__(
        self,
        document: BackendDocument,
        *,
        path: str = "",
        options: Optional[ReaderOptions] = None,
    ) -> None:
        self.path = path
        self.options = options or ReaderOptions()
        self._document: BackendDocument | None = document
        self._lock = threading.Lock()
        self._structure: _DocumentStructure | None = None
        self._reconstructor = ReadingOrderReconstructor(
            self.options.reading_order_tolerance,
            within_line_gap=self.options.within_line_gap,
            between_line_gap=self.options.between_line_gap,
        )

    @classmethod
    def open(
        cls,
        path: PathLike,
        *,
        options: Optional[ReaderOptions] = None,
        backend: Optional[DocumentBackend] = None,
    ) -> "PdfContentAssembler":
        """Open ``path``; raises DocumentNotFoundError or DocumentCorruptError."""
        source = str(to_path(path))
        document = (backend or PypdfBackend()).load(source)
        LOGGER.info("Opened %s (%d pages)", source, document.page_count)
        return cls(document, path=source, options=options)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def __enter__(self) -> "PdfContentAssembler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._document is None

    def close(self) -> None:
        """Release the document. Calling it again is a no-op.

        Waits for a backend call in progress; page builds still queued in
        parallel mode then fail with DocumentClosedError instead of reading.
        """
        with self._lock:
            document, self._document = self._document, None
            self._structure = None
            if document is None:
                return
            document.close()
        LOGGER.info("Closed %s", self.path)

    def _require_document(self) -> BackendDocument:
        if self._document is None:
            raise DocumentClosedError()
        return self._document

    # ------------------------------------------------------------------
    # Document access
    # ------------------------------------------------------------------
    @property
    def page_count(self) -> int:
        return self._require_document().page_count

    def _words(self, page_number: int) -> list[Word]:
        with self._lock:
            return self._require_document().words(page_number)

    def _outline(self) -> list[OutlineNode]:
        with self._lock:
            return self._require_document().outline()

    # ------------------------------------------------------------------
    # Structure recovery
    # ------------------------------------------------------------------
    def _prepare(self) -> _DocumentStructure:
        if self._structure is None:
            self._require_document()
            with time_block(LOGGER, f"Structure recovery for {self.path or 'document'}"):
                self._structure = self._recover_structure()
        return self._structure

    def _recover_structure(self) -> _DocumentStructure:
        outline = self._outline()
        chapters = BookmarkChapterMapper(outline)
        index = self._parse_index(outline)
        return _DocumentStructure(
            chapters=chapters,
            index=index,
            entries_by_page=index.entries_by_page() if index is not None else {},
            page_offset=self._estimate_offset(),
            has_outline=bool(outline),
        )

    def _parse_index(self, outline: list[OutlineNode]) -> Index | None:
        options = self.options
        locator = IndexLocator(
            options.index_keywords,
            tail_pages=options.index_tail_pages,
            min_digit_words=options.index_min_digit_words,
            min_a_words=options.index_min_a_words,
        )
        location = locator.locate(outline, self.page_count, self._words)
        if location is None:
            return None

        words = (
            text
            for page_number in location.pages
            for text in self._reconstructor.texts(self._words(page_number))
        )
        entries = IndexEntryParser(options.index_keywords).parse(words)
        LOGGER.info("Parsed %d index entries from %d pages", len(entries), len(location.pages))
        return Index(index_pages=location.pages, entries=tuple(entries))

    def _estimate_offset(self) -> int:
        document = self._require_document()
        if not document.has_page_labels:
            return 0
        estimator = PageOffsetEstimator(self.options.offset_sample_pages)
        offset = estimator.estimate(document.page_count, self._words)
        if offset is None:
            LOGGER.info("Page offset estimation failed; assuming no offset")
            return 0
        LOGGER.info("Estimated page offset: %d", offset)
        return offset

    @property
    def chapters(self) -> tuple[Chapter, ...]:
        return self._prepare().chapters.chapters

    @property
    def index(self) -> Index | None:
        return self._prepare().index

    @property
    def page_offset(self) -> int:
        return self._prepare().page_offset

    def describe(self) -> DocumentInfo:
        structure = self._prepare()
        document = self._require_document()
        index = structure.index
        return DocumentInfo(
            path=self.path,
            page_count=document.page_count,
            has_outline=structure.has_outline,
            has_page_labels=document.has_page_labels,
            page_offset=structure.page_offset,
            chapter_count=len(structure.chapters),
            index_pages=list(index.index_pages) if index is not None else [],
            index_entry_count=len(index.entries) if index is not None else 0,
        )

    # ------------------------------------------------------------------
    # Page records
    # ------------------------------------------------------------------
    def _build_page(self, physical_page: int, structure: _DocumentStructure) -> PageRecord:
        logical_page = physical_page - structure.page_offset
        words = self._reconstructor.texts(self._words(physical_page))
        return PageRecord(
            physical_page=physical_page,
            chapter=structure.chapters.chapter_for(physical_page),
            index_entries=structure.entries_by_page.get(logical_page, ()),
            words=tuple(words),
            logical_page=logical_page,
        )

    def pages(self) -> Iterator[PageRecord]:
        """Yield page records in ascending physical order, lazily."""
        structure = self._prepare()
        if self.options.workers > 1:
            yield from self._iter_parallel(structure)
            return
        for physical_page in range(1, self.page_count + 1):
            yield self._build_page(physical_page, structure)

    def _iter_parallel(self, structure: _DocumentStructure) -> Iterator[PageRecord]:
        workers = self.options.workers
        page_numbers = iter(range(1, self.page_count + 1))
        pending: deque[Future[PageRecord]] = deque()

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pdfstructx") as executor:
            try:
                for physical_page in islice(page_numbers, workers * 2):
                    self._require_document()
                    pending.append(executor.submit(self._build_page, physical_page, structure))
                while pending:
                    record = pending.popleft().result()
                    self._require_document()
                    next_page = next(page_numbers, None)
                    if next_page is not None:
                        pending.append(executor.submit(self._build_page, next_page, structure))
                    yield record
            finally:
                for future in pending:
                    future.cancel()


def open_document(
    path: PathLike,
    *,
    options: Optional[ReaderOptions] = None,
    backend: Optional[DocumentBackend] = None,
) -> PdfContentAssembler:
    """Open a document session; see :meth:`PdfContentAssembler.open`."""
    return PdfContentAssembler.open(path, options=options, backend=backend)
