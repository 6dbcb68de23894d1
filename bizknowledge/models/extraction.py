"""Result of turning an uploaded file into text."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ExtractionErrorKind(str, Enum):
    """Why an extraction produced no content.

    ``UNSUPPORTED`` means the format cannot be read at all (or the
    best-effort reader found nothing); ``EMPTY`` means the file was read
    but held no usable text.
    """

    UNSUPPORTED = "unsupported"
    EMPTY = "empty"


class ExtractedText(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str = ""
    error: str | None = None
    error_kind: ExtractionErrorKind | None = None
    supported_types: list[str] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.error)


class UploadedFile(BaseModel):
    """Raw upload handed to the ingestion coordinator by a transport."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    content_type: str | None = None
    data: bytes = b""

    @property
    def size(self) -> int:
        return len(self.data)
