"""Custom exception hierarchy for the business knowledge base.

All application exceptions inherit from :class:`KnowledgeBaseError`, which
carries an optional ``provider_name`` so error handlers can identify which
collaborator (e.g. "openai", "sqlite", "file_extractor") caused the failure.

The hierarchy is organized by the stage that raises it:

    KnowledgeBaseError  (base -- catch-all for any knowledge-base error)
    +-- ValidationError          (missing / empty required input)
    +-- UnsupportedFormatError   (file type the extractor cannot read)
    +-- EmptyContentError        (extraction worked but produced no text)
    +-- GenerationServiceError   (any LLM call failure -- always absorbed)
    +-- NotFoundError            (unknown document or chat session)
    +-- StorageError             (SQLite / constraint / connectivity failure)
    +-- ConfigurationError       (startup / invalid config)

Each class declares the ``http_status`` the API middleware should answer
with.  ``GenerationServiceError`` never reaches the transport: the
generation service converts it into a failed ``GenerationResult``.
"""

from __future__ import annotations


class KnowledgeBaseError(Exception):
    """Base exception for all knowledge-base errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which collaborator triggered the error.
    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[openai] Rate limit exceeded``.
    """

    http_status: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def details(self) -> dict[str, object]:
        """Return extra structured fields for the error response body."""
        return {}

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Caller input errors
# ---------------------------------------------------------------------------

class ValidationError(KnowledgeBaseError):
    """Raised when a required input (title, message, session id, ...) is missing."""

    http_status = 400

    def __init__(
        self,
        message: str = "Invalid or missing input",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UnsupportedFormatError(KnowledgeBaseError):
    """Raised when an uploaded file cannot be turned into text.

    Carries the offending declared type and file name plus the list of
    extensions the extractor does understand, so the caller can resubmit
    (paste the text, or convert the file).
    """

    http_status = 415

    def __init__(
        self,
        message: str = "Unsupported file format",
        file_type: str | None = None,
        file_name: str | None = None,
        supported_types: list[str] | None = None,
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._file_type = file_type
        self._file_name = file_name
        self._supported_types = list(supported_types or [])

    @property
    def file_type(self) -> str | None:
        return self._file_type

    @property
    def file_name(self) -> str | None:
        return self._file_name

    @property
    def supported_types(self) -> list[str]:
        return list(self._supported_types)

    def details(self) -> dict[str, object]:
        return {
            "file_type": self._file_type,
            "file_name": self._file_name,
            "supported_types": self.supported_types,
        }


class EmptyContentError(KnowledgeBaseError):
    """Raised when extraction succeeded structurally but yielded no usable text."""

    http_status = 422

    def __init__(
        self,
        message: str = (
            "No content found in the document. Please ensure the file contains "
            "readable text or paste content directly."
        ),
        file_name: str | None = None,
        supported_types: list[str] | None = None,
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._file_name = file_name
        self._supported_types = list(supported_types or [])

    @property
    def file_name(self) -> str | None:
        return self._file_name

    @property
    def supported_types(self) -> list[str]:
        return list(self._supported_types)

    def details(self) -> dict[str, object]:
        return {"file_name": self._file_name, "supported_types": self.supported_types}


class NotFoundError(KnowledgeBaseError):
    """Raised when a document or chat session does not exist."""

    http_status = 404

    def __init__(
        self,
        message: str = "Resource not found",
        resource: str | None = None,
        identifier: object = None,
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._resource = resource
        self._identifier = identifier

    @property
    def resource(self) -> str | None:
        return self._resource

    @property
    def identifier(self) -> object:
        return self._identifier


# ---------------------------------------------------------------------------
# Collaborator errors
# ---------------------------------------------------------------------------

class GenerationServiceError(KnowledgeBaseError):
    """Raised when an LLM call fails, times out, or returns nothing usable.

    Providers raise this; :class:`~bizknowledge.services.generation_service.GenerationService`
    catches it and returns a failed ``GenerationResult`` instead.
    """

    http_status = 502

    def __init__(
        self,
        message: str = "Text generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StorageError(KnowledgeBaseError):
    """Raised when the persistent store fails (constraint, I/O, locking)."""

    http_status = 500

    def __init__(
        self,
        message: str = "Storage operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(KnowledgeBaseError):
    """Raised when configuration is invalid or missing at startup."""

    http_status = 500

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
