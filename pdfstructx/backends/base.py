"""Backend protocol for document access."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..types import OutlineNode, Word


@dataclass
class BackendDocument:
    """Represents a loaded document with backend-specific helpers."""

    page_count: int
    has_page_labels: bool

    def words(self, page_number: int) -> list[Word]:
        """Return the words of a 1-based page in extraction order."""
        raise NotImplementedError

    def outline(self) -> list[OutlineNode]:
        """Return the bookmark tree flattened in document order."""
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class DocumentBackend(Protocol):
    """Protocol defining how documents are opened."""

    def load(self, path: str) -> BackendDocument:
        """Load a document and return a backend document wrapper."""
