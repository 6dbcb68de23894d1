"""Bounded keyword retrieval over the knowledge corpus.

A chunk qualifies when the raw query appears, ignoring case, in the chunk
text or in its document's title, summary or keyword list.  Hits are ordered
newest document first, then by chunk position, and capped at ``limit``.
This is a recall-biased filter: the chat prompt tells the model to answer
only from what it is shown, which is where precision comes from.
"""

from __future__ import annotations

import structlog

from bizknowledge.interfaces.knowledge_store import IKnowledgeStore
from bizknowledge.interfaces.retrieval_engine import IRetrievalEngine
from bizknowledge.models.knowledge import SearchHit

logger = structlog.get_logger(logger_name=__name__)


class KeywordRetrievalEngine(IRetrievalEngine):
    def __init__(self, store: IKnowledgeStore, default_limit: int = 10) -> None:
        self._store = store
        self._default_limit = default_limit

    async def search(self, query: str, limit: int | None = None) -> list[SearchHit]:
        if not query or not query.strip():
            return []
        limit = self._default_limit if limit is None else limit
        if limit <= 0:
            return []

        hits = await self._store.find_matching_chunks(query, limit)
        logger.debug("retrieval_complete", query=query[:80], limit=limit, hits=len(hits))
        return hits

    def get_engine_name(self) -> str:
        return "keyword"
