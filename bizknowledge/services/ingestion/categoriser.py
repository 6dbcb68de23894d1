"""Segment classification and summarisation for newly ingested documents.

Two independent generation calls run concurrently:

1. **Classify** -- the model sees every ``name: description`` pair, the
   title and the start of the content, and must reply with one segment
   name.  An exact (case-insensitive) name match wins the configured AI
   confidence; anything else lands in the default segment at confidence 0.
2. **Summarise** -- a 2-3 sentence summary of the start of the content.
   On failure the summary is the first characters of the content plus
   ``"..."``.

Neither call can fail the ingestion.  Failures are logged and replaced by
the deterministic fallback.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog

from bizknowledge.config.segments import DEFAULT_SEGMENT_NAME
from bizknowledge.models.knowledge import Categorisation, Segment
from bizknowledge.services.generation_service import GenerationService
from bizknowledge.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

_CLASSIFY_SYSTEM_PROMPT = (
    "You are a document librarian for a business knowledge base. "
    "You file each document under exactly one business segment."
)

_CLASSIFY_USER_PROMPT = (
    "Analyse the following document content and categorise it into one of "
    "these business segments:\n\n"
    "{segment_list}\n\n"
    "Document Title: {title}\n"
    "Document Content: {excerpt}...\n\n"
    "Respond with only the exact segment name that best matches this document."
)

_SUMMARY_SYSTEM_PROMPT = (
    "You write short, factual summaries of business documents for a "
    "company knowledge base."
)

_SUMMARY_USER_PROMPT = "Summarise this business document in 2-3 sentences:\n\n{excerpt}"

# Quotes and trailing punctuation models like to wrap a one-word answer in.
_REPLY_STRIP_CHARS = " \t\r\n\"'`*"


def normalise_segment_reply(reply: str) -> str:
    """Strip whitespace, surrounding quotes and a trailing full stop."""
    cleaned = reply.strip().strip(_REPLY_STRIP_CHARS)
    cleaned = cleaned.rstrip(".").strip(_REPLY_STRIP_CHARS)
    return cleaned


def fallback_summary(content: str, max_chars: int = 200) -> str:
    return content[:max_chars] + "..."


class Categoriser:
    """Assigns a segment and writes a summary for one document.

    Parameters
    ----------
    generation:
        The failure-absorbing generation boundary.
    category_excerpt_chars:
        Characters of content shown to the classifier.
    summary_excerpt_chars:
        Characters of content shown to the summariser.
    summary_fallback_chars:
        Characters of content kept when the summary falls back.
    ai_confidence:
        Confidence recorded when the classifier's reply matches a segment.
    default_segment:
        Name of the segment used when classification fails.
    """

    def __init__(
        self,
        generation: GenerationService,
        category_excerpt_chars: int = 2000,
        summary_excerpt_chars: int = 1500,
        summary_fallback_chars: int = 200,
        ai_confidence: float = 0.8,
        default_segment: str = DEFAULT_SEGMENT_NAME,
    ) -> None:
        self._generation = generation
        self._category_excerpt_chars = category_excerpt_chars
        self._summary_excerpt_chars = summary_excerpt_chars
        self._summary_fallback_chars = summary_fallback_chars
        self._ai_confidence = ai_confidence
        self._default_segment = default_segment

    async def categorise(
        self,
        title: str,
        content: str,
        segments: Sequence[Segment],
    ) -> Categorisation:
        """Classify and summarise concurrently and merge the two outcomes."""
        (segment, confidence, by_ai), (summary, summarised_by_ai) = await asyncio.gather(
            self._classify(title, content, segments),
            self._summarise(title, content),
        )
        result = Categorisation(
            segment_id=segment.id if segment else None,
            segment_name=segment.name if segment else None,
            confidence=confidence,
            summary=summary,
            categorised_by_ai=by_ai,
            summarised_by_ai=summarised_by_ai,
        )
        logger.info(
            "document_categorised",
            title=title[:80],
            segment=result.segment_name,
            confidence=result.confidence,
            categorised_by_ai=by_ai,
            summarised_by_ai=summarised_by_ai,
        )
        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _classify(
        self,
        title: str,
        content: str,
        segments: Sequence[Segment],
    ) -> tuple[Segment | None, float, bool]:
        segment_list = "\n".join(f"{s.name}: {s.description or ''}" for s in segments)
        result = await self._generation.generate(
            system_prompt=_CLASSIFY_SYSTEM_PROMPT,
            user_prompt=_CLASSIFY_USER_PROMPT.format(
                segment_list=segment_list,
                title=title,
                excerpt=content[: self._category_excerpt_chars],
            ),
            temperature=0.0,
            max_tokens=20,
            purpose="categorise",
        )

        if result.ok:
            suggested = normalise_segment_reply(result.text or "").casefold()
            for segment in segments:
                if segment.name.casefold() == suggested:
                    return segment, self._ai_confidence, True
            logger.warning(
                "categorisation_fallback",
                reason="no_matching_segment",
                reply=(result.text or "")[:80],
            )
        else:
            logger.warning("categorisation_fallback", reason="generation_failed", error=result.error)

        default = self._find_default(segments)
        if default is None:
            logger.warning("default_segment_missing", name=self._default_segment)
        return default, 0.0, False

    async def _summarise(self, title: str, content: str) -> tuple[str, bool]:
        result = await self._generation.generate(
            system_prompt=_SUMMARY_SYSTEM_PROMPT,
            user_prompt=_SUMMARY_USER_PROMPT.format(
                excerpt=content[: self._summary_excerpt_chars],
            ),
            temperature=0.3,
            max_tokens=300,
            purpose="summarise",
        )
        if result.ok:
            return (result.text or "").strip(), True

        logger.warning("summary_fallback", title=title[:80], error=result.error)
        return fallback_summary(content, self._summary_fallback_chars), False

    def _find_default(self, segments: Sequence[Segment]) -> Segment | None:
        for segment in segments:
            if segment.name == self._default_segment:
                return segment
        return None
