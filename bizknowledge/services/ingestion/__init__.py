"""Document ingestion pipeline for the business knowledge base.

Orchestrates: **extract -> categorise & summarise -> keywords -> chunk -> store**.

- **chunker.py** (TextChunker) -- sentence-greedy chunks of bounded length.
- **keyword_extractor.py** -- first 20 long-ish tokens for substring search.
- **categoriser.py** (Categoriser) -- concurrent segment classification and
  summarisation through the generation service, with fallbacks.
- **ingestion_service.py** (IngestionService) -- the coordinator, plus
  deletion, listings and the segment-count repair.
"""

from bizknowledge.services.ingestion.categoriser import Categoriser
from bizknowledge.services.ingestion.chunker import TextChunker, chunk_text
from bizknowledge.services.ingestion.ingestion_service import IngestionService
from bizknowledge.services.ingestion.keyword_extractor import extract_keywords

__all__ = [
    "Categoriser",
    "IngestionService",
    "TextChunker",
    "chunk_text",
    "extract_keywords",
]
