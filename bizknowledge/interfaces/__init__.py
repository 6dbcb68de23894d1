"""Public interface definitions for the knowledge base's collaborators.

Every external service (LLM backends, the relational store, file
extraction) and the swappable retrieval strategy is accessed through the
abstract base classes defined here.  Concrete adapters implement these
interfaces and are wired together in ``bizknowledge/main.py``, so unit
tests can inject a mock in place of any of them.

CONCRETE PROVIDER MAP:
    Interface           ->  Concrete implementations
    ---------------------------------------------------------------
    ILLMProvider        ->  OpenAILLMProvider, AnthropicLLMProvider,
                            OllamaLLMProvider        (providers/llm/)
    IKnowledgeStore     ->  SQLiteKnowledgeStore     (providers/store/)
    IFileExtractor      ->  BasicFileExtractor       (providers/extraction/)
    IRetrievalEngine    ->  KeywordRetrievalEngine   (services/retrieval/)
"""

from bizknowledge.interfaces.file_extractor import IFileExtractor
from bizknowledge.interfaces.knowledge_store import IKnowledgeStore
from bizknowledge.interfaces.llm_provider import ILLMProvider
from bizknowledge.interfaces.retrieval_engine import IRetrievalEngine

__all__ = [
    "IFileExtractor",
    "IKnowledgeStore",
    "ILLMProvider",
    "IRetrievalEngine",
]
