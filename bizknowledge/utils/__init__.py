"""Utility modules for the business knowledge base.

- **errors** -- Domain exception hierarchy rooted at KnowledgeBaseError;
  each stage raises its own subclass and the API maps them to status codes.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

from bizknowledge.utils.errors import (
    ConfigurationError,
    EmptyContentError,
    GenerationServiceError,
    KnowledgeBaseError,
    NotFoundError,
    StorageError,
    UnsupportedFormatError,
    ValidationError,
)
from bizknowledge.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "EmptyContentError",
    "GenerationServiceError",
    "KnowledgeBaseError",
    "NotFoundError",
    "StorageError",
    "UnsupportedFormatError",
    "ValidationError",
    "configure_logging",
    "get_logger",
]
