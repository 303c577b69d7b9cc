"""Reading-order reconstruction for page words.

Words are clustered into text blocks by bounding-box proximity, the blocks are
ordered with an unsupervised reading-order detector built on Allen's interval
relations, and the words are then re-emitted block by block.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Sequence

from .types import BoundingBox, Word

__all__ = [
    "DEFAULT_TOLERANCE",
    "IntervalRelation",
    "ReadingOrderReconstructor",
    "interval_relation",
    "is_before_in_reading",
    "order_blocks",
    "segment_blocks",
]

LOGGER = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 10.0
_MIN_WORD_HEIGHT = 1.0


class IntervalRelation(Enum):
    """Allen's thirteen relations between two intervals."""

    PRECEDES = "precedes"
    MEETS = "meets"
    OVERLAPS = "overlaps"
    STARTS = "starts"
    DURING = "during"
    FINISHES = "finishes"
    PRECEDES_I = "preceded-by"
    MEETS_I = "met-by"
    OVERLAPS_I = "overlapped-by"
    STARTS_I = "started-by"
    DURING_I = "contains"
    FINISHES_I = "finished-by"
    EQUALS = "equals"


_LEADING = {IntervalRelation.PRECEDES, IntervalRelation.MEETS, IntervalRelation.OVERLAPS}
_SHARED_COLUMN = _LEADING | {
    IntervalRelation.STARTS,
    IntervalRelation.FINISHES_I,
    IntervalRelation.EQUALS,
    IntervalRelation.DURING,
    IntervalRelation.DURING_I,
    IntervalRelation.FINISHES,
    IntervalRelation.STARTS_I,
    IntervalRelation.OVERLAPS_I,
}


def interval_relation(
    first: tuple[float, float], second: tuple[float, float], tolerance: float
) -> IntervalRelation:
    """Classify how ``first`` relates to ``second`` with a fuzzy ``tolerance``."""

    a_start, a_end = first
    b_start, b_end = second
    t = tolerance

    if a_end < b_start - t:
        return IntervalRelation.PRECEDES
    if b_start - t <= a_end < b_start + t:
        return IntervalRelation.MEETS
    if a_start < b_start - t and b_start + t < a_end < b_end - t:
        return IntervalRelation.OVERLAPS
    if abs(a_start - b_start) <= t and a_end < b_end - t:
        return IntervalRelation.STARTS
    if a_start > b_start + t and a_end < b_end - t:
        return IntervalRelation.DURING
    if a_start > b_start + t and abs(a_end - b_end) <= t:
        return IntervalRelation.FINISHES
    if b_end < a_start - t:
        return IntervalRelation.PRECEDES_I
    if a_start - t <= b_end < a_start + t:
        return IntervalRelation.MEETS_I
    if b_start < a_start - t and a_start + t < b_end < a_end - t:
        return IntervalRelation.OVERLAPS_I
    if abs(b_start - a_start) <= t and b_end < a_end - t:
        return IntervalRelation.STARTS_I
    if b_start > a_start + t and b_end < a_end - t:
        return IntervalRelation.DURING_I
    if b_start > a_start + t and abs(b_end - a_end) <= t:
        return IntervalRelation.FINISHES_I
    return IntervalRelation.EQUALS


def _x_interval(box: BoundingBox) -> tuple[float, float]:
    return box.left, box.right


def _y_interval(box: BoundingBox) -> tuple[float, float]:
    # Reading runs top-down while PDF y grows upward.
    return -box.top, -box.bottom


def is_before_in_reading(first: BoundingBox, second: BoundingBox, tolerance: float) -> bool:
    """Return True when ``first`` is read before ``second`` (column-wise rule)."""

    x_relation = interval_relation(_x_interval(first), _x_interval(second), tolerance)
    y_relation = interval_relation(_y_interval(first), _y_interval(second), tolerance)

    if x_relation in (IntervalRelation.PRECEDES, IntervalRelation.MEETS):
        return True
    if x_relation is IntervalRelation.OVERLAPS and y_relation in _LEADING:
        return True
    return y_relation in _LEADING and x_relation in _SHARED_COLUMN


def order_blocks(blocks: Sequence[BoundingBox], tolerance: float = DEFAULT_TOLERANCE) -> list[int]:
    """Return block indices in reading order.

    The "before" relation defines a directed graph; blocks are emitted in
    topological order, ties going to the highest then leftmost block. When
    only cycles remain, the block with the fewest unresolved predecessors is
    emitted next.
    """

    count = len(blocks)
    successors: list[set[int]] = [set() for _ in range(count)]
    predecessors = [0] * count
    for i in range(count):
        for j in range(count):
            if i != j and is_before_in_reading(blocks[i], blocks[j], tolerance):
                successors[i].add(j)
                predecessors[j] += 1

    def _position(index: int) -> tuple[float, float]:
        return -blocks[index].top, blocks[index].left

    remaining = set(range(count))
    ordered: list[int] = []
    while remaining:
        ready = [index for index in remaining if predecessors[index] == 0]
        if ready:
            chosen = min(ready, key=_position)
        else:
            chosen = min(remaining, key=lambda index: (predecessors[index], _position(index)))
            LOGGER.debug("Breaking reading-order cycle at block %d", chosen)
        remaining.discard(chosen)
        ordered.append(chosen)
        for successor in successors[chosen]:
            if successor in remaining:
                predecessors[successor] -= 1
    return ordered


def _word_height(word: Word) -> float:
    return max(word.bbox.height(), _MIN_WORD_HEIGHT)


def _words_adjacent(first: Word, second: Word, within_line_gap: float, between_line_gap: float) -> bool:
    a, b = first.bbox, second.bbox
    height = min(_word_height(first), _word_height(second))
    horizontal_gap = max(a.left, b.left) - min(a.right, b.right)
    vertical_gap = max(a.bottom, b.bottom) - min(a.top, b.top)

    a_middle = (a.bottom + a.top) / 2
    b_middle = (b.bottom + b.top) / 2
    same_line = abs(a_middle - b_middle) <= height / 2
    if same_line and horizontal_gap <= within_line_gap * height:
        return True
    return horizontal_gap < 0 and vertical_gap <= between_line_gap * height


def segment_blocks(
    words: Sequence[Word],
    *,
    within_line_gap: float = 1.0,
    between_line_gap: float = 1.0,
) -> list[BoundingBox]:
    """Cluster ``words`` into text blocks and return the block boxes.

    Blocks are listed in order of their first word.
    """

    parents = list(range(len(words)))

    def _find(index: int) -> int:
        while parents[index] != index:
            parents[index] = parents[parents[index]]
            index = parents[index]
        return index

    for i in range(len(words)):
        for j in range(i + 1, len(words)):
            if _words_adjacent(words[i], words[j], within_line_gap, between_line_gap):
                root_i, root_j = _find(i), _find(j)
                if root_i != root_j:
                    parents[max(root_i, root_j)] = min(root_i, root_j)

    boxes: dict[int, BoundingBox] = {}
    for index, word in enumerate(words):
        root = _find(index)
        current = boxes.get(root)
        boxes[root] = word.bbox if current is None else current.union(word.bbox)
    return [boxes[root] for root in sorted(boxes)]


class ReadingOrderReconstructor:
    """Order a page's words the way a human would read them."""

    def __init__(
        self,
        tolerance: float = DEFAULT_TOLERANCE,
        *,
        within_line_gap: float = 1.0,
        between_line_gap: float = 1.0,
    ) -> None:
        self.tolerance = tolerance
        self.within_line_gap = within_line_gap
        self.between_line_gap = between_line_gap

    def reconstruct(self, words: Sequence[Word]) -> list[Word]:
        candidates = [word for word in words if word.text.strip()]
        if not candidates:
            return []

        blocks = segment_blocks(
            candidates,
            within_line_gap=self.within_line_gap,
            between_line_gap=self.between_line_gap,
        )
        emitted: set[int] = set()
        ordered: list[Word] = []
        for block_index in order_blocks(blocks, self.tolerance):
            block = blocks[block_index]
            for word_index, word in enumerate(candidates):
                if word_index in emitted or not word.bbox.intersects(block):
                    continue
                emitted.add(word_index)
                ordered.append(word)
        return ordered

    def texts(self, words: Sequence[Word]) -> list[str]:
        return [word.text for word in self.reconstruct(words)]
