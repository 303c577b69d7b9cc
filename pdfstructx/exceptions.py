"""
Custom exceptions for pdfstructx.

Only opening a document can fail. The structure heuristics never raise for
"nothing found"; they fall back to empty results instead.
"""


class PdfStructXError(Exception):
    """Base exception for all pdfstructx errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown pdfstructx error occurred."


class DocumentNotFoundError(PdfStructXError):
    """Raised when the document path does not resolve to a file."""

    @property
    def default_message(self) -> str:
        return "Document file not found."


class DocumentCorruptError(PdfStructXError):
    """Raised when the document bytes cannot be decoded."""

    @property
    def default_message(self) -> str:
        return "Invalid or corrupted PDF document."


class EncryptedDocumentError(DocumentCorruptError):
    """Raised when the document is encrypted and cannot be opened."""

    @property
    def default_message(self) -> str:
        return "PDF is encrypted and cannot be read without a password."


class DocumentClosedError(PdfStructXError):
    """Raised when a closed reader session is used."""

    @property
    def default_message(self) -> str:
        return "The document session has already been closed."
