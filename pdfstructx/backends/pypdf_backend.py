"""pypdf backend implementation for pdfstructx."""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PdfReadError
from pypdf.generic import ArrayObject, Destination, NameObject

from ..exceptions import (
    DocumentClosedError,
    DocumentCorruptError,
    DocumentNotFoundError,
    EncryptedDocumentError,
)
from ..types import BoundingBox, OutlineNode, Word
from .base import BackendDocument, DocumentBackend
from .text_capture import CHAR_WIDTH_FACTOR, CapturedText, capture_text_fragments

LOGGER = logging.getLogger(__name__)

# Glyph boxes are approximated relative to the effective font size.
DESCENT_FACTOR = 0.2
ASCENT_FACTOR = 0.8
JOIN_GAP_FACTOR = 0.15

_WORD_PATTERN = re.compile(r"\S+")


def _joinable(previous: Word, current: Word, font_size: float) -> bool:
    if abs(previous.bbox.bottom - current.bbox.bottom) > DESCENT_FACTOR * font_size:
        return False
    gap = current.bbox.left - previous.bbox.right
    return -CHAR_WIDTH_FACTOR * font_size <= gap <= JOIN_GAP_FACTOR * font_size


def fragments_to_words(fragments: list[CapturedText]) -> list[Word]:
    """Split text runs into words with estimated bounding boxes."""

    words: list[Word] = []
    open_ended = False
    for fragment in fragments:
        size = fragment.font_size
        char_width = fragment.char_width or size * CHAR_WIDTH_FACTOR
        for match in _WORD_PATTERN.finditer(fragment.text):
            left = fragment.x + match.start() * char_width
            word = Word(
                text=match.group(),
                bbox=BoundingBox(
                    left=left,
                    bottom=fragment.y - DESCENT_FACTOR * size,
                    right=left + len(match.group()) * char_width,
                    top=fragment.y + ASCENT_FACTOR * size,
                ),
            )
            if open_ended and match.start() == 0 and words and _joinable(words[-1], word, size):
                previous = words[-1]
                words[-1] = Word(text=previous.text + word.text, bbox=previous.bbox.union(word.bbox))
            else:
                words.append(word)
            open_ended = False
        if fragment.text.strip():
            open_ended = not fragment.text[-1].isspace()
        elif fragment.text:
            open_ended = False
    return words


def _destination_page(reader: PdfReader, destination: Destination) -> int | None:
    try:
        index = reader.get_destination_page_number(destination)
    except Exception:
        return None
    if index is None or index < 0 or index >= len(reader.pages):
        return None
    return index + 1


def flatten_outline(reader: PdfReader) -> list[OutlineNode]:
    """Return the bookmark tree of ``reader`` flattened in document order."""

    try:
        raw_outline = reader.outline
    except Exception as exc:
        LOGGER.warning("Unable to read document outline: %s", exc)
        return []
    if not raw_outline:
        return []

    nodes: list[OutlineNode] = []

    def walk(entries: object, level: int) -> None:
        iterable = list(entries) if isinstance(entries, (list, ArrayObject)) else [entries]
        for entry in iterable:
            if isinstance(entry, (list, ArrayObject)):
                walk(entry, level + 1)
                continue
            if not isinstance(entry, Destination):
                continue
            nodes.append(
                OutlineNode(
                    title=str(entry.title or ""),
                    level=level,
                    page_number=_destination_page(reader, entry),
                )
            )

    walk(raw_outline, 0)
    return nodes


def _declares_page_labels(reader: PdfReader) -> bool:
    try:
        catalog = reader.trailer["/Root"].get_object()
        return NameObject("/PageLabels") in catalog
    except Exception:
        return False


@dataclass
class PypdfDocument(BackendDocument):
    reader: PdfReader | None
    stream: io.BytesIO

    def _require_reader(self) -> PdfReader:
        if self.reader is None:
            raise DocumentClosedError()
        return self.reader

    def words(self, page_number: int) -> list[Word]:
        reader = self._require_reader()
        try:
            fragments = capture_text_fragments(reader.pages[page_number - 1], reader)
        except Exception as exc:
            LOGGER.warning("Unable to extract words from page %d: %s", page_number, exc)
            return []
        return fragments_to_words(fragments)

    def outline(self) -> list[OutlineNode]:
        return flatten_outline(self._require_reader())

    def close(self) -> None:
        self.reader = None
        self.stream.close()


class PypdfBackend(DocumentBackend):
    """Backend implementation that uses `pypdf` under the hood."""

    def load(self, path: str) -> PypdfDocument:
        source = Path(path)
        if not source.exists() or not source.is_file():
            raise DocumentNotFoundError(f"Document not found: {path}")

        try:
            raw_bytes = source.read_bytes()
        except OSError as exc:
            raise DocumentCorruptError(f"Unable to read document: {path}. Error: {exc}") from exc

        stream = io.BytesIO(raw_bytes)
        try:
            reader = PdfReader(stream)
            if reader.is_encrypted and not reader.decrypt(""):
                raise EncryptedDocumentError(f"Document is encrypted: {path}")
            page_count = len(reader.pages)
        except EncryptedDocumentError:
            stream.close()
            raise
        except PdfReadError as exc:
            stream.close()
            raise DocumentCorruptError(f"Corrupted or invalid PDF file: {path}. Error: {exc}") from exc
        except Exception as exc:
            stream.close()
            raise DocumentCorruptError(f"Unexpected error reading PDF: {path}. Error: {exc}") from exc

        LOGGER.debug("Loaded %s (%d pages)", path, page_count)
        return PypdfDocument(
            page_count=page_count,
            has_page_labels=_declares_page_labels(reader),
            reader=reader,
            stream=stream,
        )
