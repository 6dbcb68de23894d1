"""Abstract base class for turning uploaded files into plain text."""

from __future__ import annotations

from abc import ABC, abstractmethod

from bizknowledge.models.extraction import ExtractedText


# Concrete implementation: BasicFileExtractor
# Located in: bizknowledge/providers/extraction/
class IFileExtractor(ABC):
    """Contract for file-to-text extraction.

    Implementations never raise for an unreadable file; they return an
    :class:`ExtractedText` whose ``error`` explains what went wrong and
    which formats are accepted.
    """

    @abstractmethod
    async def extract(self, file_name: str, content_type: str | None, data: bytes) -> ExtractedText:
        """Extract text from the raw bytes of an uploaded file.

        Parameters
        ----------
        file_name:
            The client-supplied file name; its extension selects the reader.
        content_type:
            The declared MIME type, used when the extension is missing.
        data:
            The file's raw bytes.
        """

    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """Return the file extensions this extractor accepts, e.g. ``[".txt", ".csv"]``."""
