"""Physical-to-logical page offset estimation."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Callable, Sequence

from .types import Word
from .utils import parse_integer

LOGGER = logging.getLogger(__name__)


class PageOffsetEstimator:
    """
    Estimate the constant offset between physical and printed page numbers.

    Front matter (cover, roman-numbered preface) shifts the printed numbers
    away from the physical page positions. The estimate is the most frequent
    ``physical - printed`` difference over the sampled pages, where the
    printed number is the page's last extracted word.
    """

    def __init__(self, sample_pages: int = 60) -> None:
        self.sample_pages = sample_pages

    def candidates(self, page_count: int, words_for: Callable[[int], Sequence[Word]]) -> list[int]:
        offsets: list[int] = []
        for page_number in range(1, min(page_count, self.sample_pages) + 1):
            words = words_for(page_number)
            if not words:
                continue
            printed = parse_integer(words[-1].text)
            if printed is None:
                continue
            offsets.append(page_number - printed)
        return offsets

    def estimate(self, page_count: int, words_for: Callable[[int], Sequence[Word]]) -> int | None:
        """Return the offset, or None when no page carries a printed number."""
        if page_count == 1:
            return 0

        offsets = self.candidates(page_count, words_for)
        if not offsets:
            LOGGER.debug("No printed page numbers found in the first %d pages", self.sample_pages)
            return None

        # most_common keeps first-seen order among equal counts
        offset, votes = Counter(offsets).most_common(1)[0]
        LOGGER.debug("Offset %d supported by %d of %d sampled pages", offset, votes, len(offsets))
        return offset
