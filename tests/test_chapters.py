from __future__ import annotations

from pdfstructx.chapters import BookmarkChapterMapper, build_chapters
from pdfstructx.types import Chapter, OutlineNode


def _outline() -> list[OutlineNode]:
    return [
        OutlineNode("Authors", 0, 3),
        OutlineNode("Finally", 0, 5),
        OutlineNode("Business", 0, 7),
    ]


def test_chapter_for_page_uses_latest_start() -> None:
    mapper = BookmarkChapterMapper(_outline())

    assert mapper.chapter_for(4) == Chapter("Authors", 3)
    assert mapper.chapter_for(6) == Chapter("Finally", 5)
    assert mapper.chapter_for(7) == Chapter("Business", 7)
    assert mapper.chapter_for(120) == Chapter("Business", 7)


def test_pages_before_first_chapter_have_none() -> None:
    mapper = BookmarkChapterMapper(_outline())

    assert mapper.chapter_for(1) is None
    assert mapper.chapter_for(2) is None


def test_nodes_without_page_are_ignored() -> None:
    outline = [
        OutlineNode("Part I", 0, None),
        OutlineNode("Intro", 1, 2),
        OutlineNode("External link", 1, None),
    ]

    assert build_chapters(outline) == [Chapter("Intro", 2)]


def test_chapters_sorted_by_page_stably() -> None:
    outline = [
        OutlineNode("Late", 0, 9),
        OutlineNode("Early", 0, 2),
        OutlineNode("Early sub", 1, 2),
    ]

    chapters = build_chapters(outline)

    assert [chapter.title for chapter in chapters] == ["Early", "Early sub", "Late"]
    # Shared start page resolves to the last chapter starting there.
    assert BookmarkChapterMapper(outline).chapter_for(3).title == "Early sub"


def test_empty_outline() -> None:
    mapper = BookmarkChapterMapper([])

    assert len(mapper) == 0
    assert mapper.chapters == ()
    assert mapper.chapter_for(1) is None
