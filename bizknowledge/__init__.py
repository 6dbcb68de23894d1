"""Business knowledge base: categorised document ingestion, keyword retrieval and grounded chat."""

__version__ = "0.1.0"
