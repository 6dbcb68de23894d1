"""Abstract base class for retrieval over the knowledge corpus.

The chat orchestrator only needs "give me the best snippets for this
message"; how they are found is the engine's business.  Today that is a
bounded substring matcher (``KeywordRetrievalEngine``), and a semantic
engine could replace it without touching the chat code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from bizknowledge.models.knowledge import SearchHit


# Concrete implementation: KeywordRetrievalEngine
# Located in: bizknowledge/services/retrieval/
class IRetrievalEngine(ABC):
    @abstractmethod
    async def search(self, query: str, limit: int | None = None) -> list[SearchHit]:
        """Return at most ``limit`` hits (engine default when ``None``) for ``query``.

        An empty or whitespace-only query returns ``[]``.
        """

    @abstractmethod
    def get_engine_name(self) -> str:
        """Return a short identifier used in logs and the health endpoint."""
