"""Command-line tools for the business knowledge base.

- ``python -m bizknowledge.cli`` (or the ``bizknowledge`` console script):
  ingest, delete, list and search documents, and repair segment counts.
"""
