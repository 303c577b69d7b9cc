"""
pdfstructx - Recover the structure of paginated PDF documents.

Each physical page of a document is turned into a :class:`PageRecord`
carrying its enclosing chapter (from the outline), the back-of-book index
entries that reference it, and its words in reading order.

Quick Start:
    >>> import pdfstructx
    >>> with pdfstructx.open('book.pdf') as session:
    ...     for page in session.pages():
    ...         print(page.physical_page, page.chapter, len(page.words))

Main Classes:
    - PdfContentAssembler: Reader session producing page records
    - ReadingOrderReconstructor: Spatial word ordering
    - BookmarkChapterMapper: Page to chapter attribution
    - IndexLocator / IndexEntryParser: Back-of-book index recovery
    - PageOffsetEstimator: Physical to printed page offset

Data Classes:
    - PageRecord, Chapter, IndexEntry, DocumentInfo, ReaderOptions

Exceptions:
    - PdfStructXError: Base exception
    - DocumentNotFoundError: Path does not resolve to a file
    - DocumentCorruptError: Document cannot be decoded
    - EncryptedDocumentError: Encrypted document
    - DocumentClosedError: Session used after close

For CLI usage, use the 'pdfstructx' command after installation.
"""

# Core classes
from pdfstructx.reader import PdfContentAssembler, open_document
from pdfstructx.layout import ReadingOrderReconstructor
from pdfstructx.chapters import BookmarkChapterMapper
from pdfstructx.index import IndexEntryParser, IndexLocator
from pdfstructx.offsets import PageOffsetEstimator

# Data types
from pdfstructx.types import (
    BoundingBox,
    Chapter,
    DocumentInfo,
    IndexEntry,
    OutlineNode,
    PageRecord,
    ReaderOptions,
    Word,
)

# Exceptions
from pdfstructx.exceptions import (
    PdfStructXError,
    DocumentNotFoundError,
    DocumentCorruptError,
    EncryptedDocumentError,
    DocumentClosedError,
)

open = open_document

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    # Entry points
    "open",
    "open_document",
    # Main classes
    "PdfContentAssembler",
    "ReadingOrderReconstructor",
    "BookmarkChapterMapper",
    "IndexLocator",
    "IndexEntryParser",
    "PageOffsetEstimator",
    # Data types
    "BoundingBox",
    "Chapter",
    "DocumentInfo",
    "IndexEntry",
    "OutlineNode",
    "PageRecord",
    "ReaderOptions",
    "Word",
    # Exceptions
    "PdfStructXError",
    "DocumentNotFoundError",
    "DocumentCorruptError",
    "EncryptedDocumentError",
    "DocumentClosedError",
    # Version info
    "__version__",
]
