from bizknowledge.services.retrieval.keyword_engine import KeywordRetrievalEngine

__all__ = ["KeywordRetrievalEngine"]
