from __future__ import annotations

import logging

from pdfstructx.exceptions import DocumentCorruptError, EncryptedDocumentError, PdfStructXError
from pdfstructx.types import BoundingBox, Chapter, Index, IndexEntry, OutlineNode, PageRecord
from pdfstructx.utils import parse_integer, time_block


def test_bounding_box_touching_edges_intersect() -> None:
    box = BoundingBox(left=0, bottom=0, right=10, top=10)

    assert box.intersects(BoundingBox(left=10, bottom=0, right=20, top=10))
    assert not box.intersects(BoundingBox(left=10.5, bottom=0, right=20, top=10))
    assert box.union(BoundingBox(left=5, bottom=-5, right=30, top=8)) == BoundingBox(0, -5, 30, 10)
    assert box.width() == 10
    assert box.height() == 10


def test_index_entry_emptiness() -> None:
    assert IndexEntry(name="  ").is_empty
    assert not IndexEntry(name="Apple").is_empty
    assert not IndexEntry(name="", pages=(3,)).is_empty
    assert not IndexEntry(name="", front_matter_pages=("IV",)).is_empty


def test_entries_by_page() -> None:
    apple = IndexEntry(name="Apple", pages=(2, 3))
    axe = IndexEntry(name="Axe", pages=(3,), front_matter_pages=("II",))
    index = Index(index_pages=(9,), entries=(apple, axe))

    assert index.entries_by_page() == {2: (apple,), 3: (apple, axe)}


def test_page_record_to_dict() -> None:
    record = PageRecord(
        physical_page=4,
        chapter=Chapter("Authors", 3),
        index_entries=(IndexEntry(name="At", pages=(4,)),),
        words=("Hello", "world"),
        logical_page=2,
    )

    assert record.to_dict() == {
        "physical_page": 4,
        "logical_page": 2,
        "chapter": {"title": "Authors", "start_page": 3},
        "index_entries": [{"name": "At", "pages": [4], "front_matter_pages": []}],
        "words": ["Hello", "world"],
    }
    assert record.text == "Hello world"


def test_exception_default_messages() -> None:
    error = EncryptedDocumentError()

    assert isinstance(error, DocumentCorruptError)
    assert isinstance(error, PdfStructXError)
    assert "encrypted" in str(error)
    assert str(DocumentCorruptError("bad xref")) == "bad xref"


def test_time_block_logs_duration(caplog) -> None:
    logger = logging.getLogger("pdfstructx.tests")

    with caplog.at_level(logging.INFO, logger="pdfstructx.tests"):
        with time_block(logger, "Structure recovery"):
            pass

    assert any("Structure recovery completed in" in message for message in caplog.messages)


def test_parse_integer_and_page_bearing_nodes() -> None:
    assert parse_integer(" 12 ") == 12
    assert parse_integer("-3") == -3
    assert parse_integer("12,") is None
    assert parse_integer("xii") is None

    assert OutlineNode("Index", 0, 9).is_page_bearing
    assert not OutlineNode("External link", 0, None).is_page_bearing
