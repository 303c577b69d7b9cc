from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence
import sys

import pytest
from pypdf import PdfWriter
from pypdf.generic import DecodedStreamObject, DictionaryObject, IndirectObject, NameObject

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdfstructx.backends import BackendDocument  # noqa: E402
from pdfstructx.types import BoundingBox, OutlineNode, Word  # noqa: E402

FONT_SIZE = 10.0

# (x, y, text) for every text line of a page
PageLines = Sequence[tuple[float, float, str]]
# (title, level, 0-based page index or None)
OutlineItems = Sequence[tuple[str, int, int | None]]


def make_word(text: str, left: float, top: float, size: float = FONT_SIZE) -> Word:
    return Word(
        text=text,
        bbox=BoundingBox(left=left, bottom=top - size, right=left + len(text) * size * 0.5, top=top),
    )


def make_line(text: str, left: float, top: float, size: float = FONT_SIZE) -> list[Word]:
    """Lay out the words of ``text`` left to right on one line."""
    words: list[Word] = []
    cursor = left
    for token in text.split():
        word = make_word(token, cursor, top, size)
        words.append(word)
        cursor = word.bbox.right + size * 0.5
    return words


def stack_lines(lines: Sequence[str], left: float = 72.0, top: float = 700.0, leading: float = 14.0) -> list[Word]:
    words: list[Word] = []
    for position, text in enumerate(lines):
        words.extend(make_line(text, left, top - position * leading))
    return words


@dataclass
class FakeDocument(BackendDocument):
    """In-memory document used to drive the assembler without pypdf."""

    page_words: dict[int, list[Word]] = field(default_factory=dict)
    nodes: list[OutlineNode] = field(default_factory=list)
    closed: bool = False
    word_calls: list[int] = field(default_factory=list)

    def words(self, page_number: int) -> list[Word]:
        self.word_calls.append(page_number)
        return list(self.page_words.get(page_number, []))

    def outline(self) -> list[OutlineNode]:
        return list(self.nodes)

    def close(self) -> None:
        self.closed = True


class FakeBackend:
    def __init__(self, document: FakeDocument) -> None:
        self.document = document
        self.loaded: list[str] = []

    def load(self, path: str) -> FakeDocument:
        self.loaded.append(path)
        return self.document


@pytest.fixture()
def fake_document_factory() -> Callable[..., FakeDocument]:
    def _create(
        page_count: int,
        page_words: dict[int, list[Word]] | None = None,
        outline: Sequence[OutlineNode] = (),
        has_page_labels: bool = False,
    ) -> FakeDocument:
        return FakeDocument(
            page_count=page_count,
            has_page_labels=has_page_labels,
            page_words=dict(page_words or {}),
            nodes=list(outline),
        )

    return _create


@pytest.fixture()
def sample_pdf(tmp_path: Path) -> Path:
    pdf_path = tmp_path / "sample.pdf"
    writer = PdfWriter()
    for _ in range(3):
        writer.add_blank_page(width=200, height=200)
    writer.add_metadata({"/Producer": "pdfstructx-tests", "/Title": "Sample"})
    with pdf_path.open("wb") as stream:
        writer.write(stream)
    return pdf_path


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _add_font(writer: PdfWriter, to_unicode: bytes | None = None) -> IndirectObject:
    font_dict = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject("/Helvetica"),
        }
    )
    if to_unicode is not None:
        cmap = DecodedStreamObject()
        cmap.set_data(to_unicode)
        font_dict[NameObject("/ToUnicode")] = writer._add_object(cmap)
    return writer._add_object(font_dict)


def _add_content_page(writer: PdfWriter, font_ref: IndirectObject, content_text: str) -> None:
    page = writer.add_blank_page(width=612, height=792)
    page[NameObject("/Resources")] = DictionaryObject(
        {NameObject("/Font"): DictionaryObject({NameObject("/F1"): font_ref})}
    )
    content = DecodedStreamObject()
    content.set_data(content_text.encode("latin-1"))
    page[NameObject("/Contents")] = writer._add_object(content)


def _write_text_pdf(
    path: Path,
    pages: Sequence[PageLines],
    outline: OutlineItems = (),
    page_labels: bool = False,
) -> Path:
    writer = PdfWriter()
    font_ref = _add_font(writer)

    for lines in pages:
        operations = [
            f"BT /F1 {FONT_SIZE:g} Tf 1 0 0 1 {x:g} {y:g} Tm ({_escape(text)}) Tj ET"
            for x, y, text in lines
        ]
        _add_content_page(writer, font_ref, "\n".join(operations))

    parents: dict[int, object] = {}
    for title, level, page_index in outline:
        item = writer.add_outline_item(title, page_index, parent=parents.get(level - 1))
        parents[level] = item

    if page_labels:
        writer.set_page_label(0, len(pages) - 1, style="/D", start=1)

    with path.open("wb") as stream:
        writer.write(stream)
    return path


@pytest.fixture()
def text_pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(
        filename: str,
        pages: Sequence[PageLines],
        outline: OutlineItems = (),
        page_labels: bool = False,
    ) -> Path:
        return _write_text_pdf(tmp_path / filename, pages, outline, page_labels)

    return _create


@pytest.fixture()
def content_pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    """Build a PDF whose pages carry the given raw content streams, all using font /F1."""

    def _create(filename: str, contents: Sequence[str], to_unicode: bytes | None = None) -> Path:
        writer = PdfWriter()
        font_ref = _add_font(writer, to_unicode)
        for content_text in contents:
            _add_content_page(writer, font_ref, content_text)
        path = tmp_path / filename
        with path.open("wb") as stream:
            writer.write(stream)
        return path

    return _create


@pytest.fixture()
def book_pdf(text_pdf_factory: Callable[..., Path]) -> Path:
    """Twelve-page book with chapters and an outline-linked index on pages 9-10."""

    pages: list[list[tuple[float, float, str]]] = []
    for number in range(1, 13):
        pages.append([(72, 720, f"Body text of page {number}")])
    pages[8] = [(72, 720, "Index"), (72, 690, "At 5, 6, 7")]
    pages[9] = [(72, 720, "Lorem II, III, 2")]

    outline = [
        ("Authors", 0, 2),
        ("Finally", 0, 4),
        ("Business", 0, 6),
        ("Index", 0, 8),
        ("Colophon", 0, 10),
    ]
    return text_pdf_factory("book.pdf", pages, outline)
