"""Sentence-greedy text chunking.

Splits document text into :class:`~bizknowledge.models.knowledge.KnowledgeChunk`
texts of at most ``max_length`` characters.  Sentences are found by
splitting on runs of ``.``, ``!`` and ``?``; they are packed greedily into
a buffer and rejoined with ``". "``, so the terminators of the input are
normalised to full stops in the stored chunks.

A sentence longer than ``max_length`` on its own is emitted whole rather
than cut mid-sentence.  Text with no terminator at all is treated as a
single run-on block and truncated to ``max_length``.
"""

from __future__ import annotations

import re

import structlog

logger = structlog.get_logger(logger_name=__name__)

SENTENCE_DELIMITER = ". "

_TERMINATOR_RE = re.compile(r"[.!?]+")

DEFAULT_MAX_LENGTH = 1000


class TextChunker:
    """Packs sentences into bounded chunks.

    Parameters
    ----------
    max_length:
        Target maximum characters per chunk (default 1000).
    """

    def __init__(self, max_length: int = DEFAULT_MAX_LENGTH) -> None:
        if max_length <= 0:
            msg = f"max_length must be positive, got {max_length}"
            raise ValueError(msg)
        self._max_length = max_length

    @property
    def max_length(self) -> int:
        return self._max_length

    def chunk(self, text: str) -> list[str]:
        """Split *text* into ordered, non-empty chunks.

        Empty or whitespace-only input returns an empty list.
        """
        if not text or not text.strip():
            return []

        stripped = text.strip()
        if not _TERMINATOR_RE.search(stripped):
            return [stripped[: self._max_length]]

        sentences = [s.strip() for s in _TERMINATOR_RE.split(stripped)]
        sentences = [s for s in sentences if s]

        chunks: list[str] = []
        buffer = ""
        for sentence in sentences:
            if not buffer:
                buffer = sentence
            elif len(buffer) + len(SENTENCE_DELIMITER) + len(sentence) > self._max_length:
                chunks.append(buffer)
                buffer = sentence
            else:
                buffer = f"{buffer}{SENTENCE_DELIMITER}{sentence}"
        if buffer:
            chunks.append(buffer)

        logger.debug(
            "chunking_complete",
            num_chunks=len(chunks),
            num_sentences=len(sentences),
            max_length=self._max_length,
        )
        return chunks


def chunk_text(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> list[str]:
    """Convenience wrapper around :meth:`TextChunker.chunk`."""
    return TextChunker(max_length).chunk(text)
