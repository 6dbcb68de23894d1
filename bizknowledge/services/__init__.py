"""Knowledge-base services.

- **generation_service** -- failure-absorbing boundary around the LLM provider
- **ingestion/** -- chunking, keywords, categorisation and the ingestion coordinator
- **retrieval/** -- keyword retrieval engine
- **chat_service** -- grounded chat with degraded-mode fallback
"""
