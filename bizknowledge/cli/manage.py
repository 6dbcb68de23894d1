"""Operator CLI for the business knowledge base.

Usage::

    python -m bizknowledge.cli ingest --title "Q3 Budget" --file budget.txt
    python -m bizknowledge.cli ingest --title "Note" --text "Pasted content."
    python -m bizknowledge.cli delete --id 12
    python -m bizknowledge.cli segments
    python -m bizknowledge.cli recount
    python -m bizknowledge.cli search --query budget --limit 5
    python -m bizknowledge.cli documents --segment 4

Talks to the same SQLite database as the API (``DATABASE_PATH``) and uses
the same provider selection, so ``GENERATION_ENABLED=false`` ingests in
fallback mode without any LLM.  Exit code is 0 on success and 1 when a
command fails with a reported error.
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path
from typing import Any

from bizknowledge.config.loader import load_config
from bizknowledge.config.settings import Settings
from bizknowledge.models.extraction import UploadedFile
from bizknowledge.utils.errors import KnowledgeBaseError


def _build_components(app_settings: Settings) -> dict[str, Any]:
    # Deferred: importing main wires the web app as a side effect.
    from bizknowledge.main import _build_all

    app_config = load_config(app_settings.config_path, app_settings)
    return _build_all(app_settings, app_config)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _handle_ingest(args: argparse.Namespace, components: dict[str, Any]) -> int:
    uploaded = None
    if args.file:
        path = Path(args.file)
        if not path.is_file():
            print(f"Error: file not found: {path}", file=sys.stderr)
            return 1
        content_type, _ = mimetypes.guess_type(path.name)
        uploaded = UploadedFile(
            file_name=path.name,
            content_type=content_type,
            data=path.read_bytes(),
        )

    result = await components["ingestion_service"].ingest(
        title=args.title, content=args.text, file=uploaded
    )
    print("Ingestion complete:")
    print(f"  Document ID: {result.document_id}")
    print(f"  Segment:     {result.segment_name or '-'} (confidence {result.confidence:.1f})")
    print(f"  Chunks:      {result.chunk_count}")
    print(f"  Summary:     {result.summary}")
    return 0


async def _handle_delete(args: argparse.Namespace, components: dict[str, Any]) -> int:
    document = await components["ingestion_service"].delete(args.id)
    print(f"Deleted document {document.id}: {document.title}")
    return 0


async def _handle_segments(components: dict[str, Any]) -> int:
    segments = await components["ingestion_service"].list_segments()
    print(f"{'ID':>4}  {'Segment':<20} {'Docs':>5}")
    print("-" * 32)
    for segment in segments:
        print(f"{segment.id:>4}  {segment.name:<20} {segment.document_count:>5}")
    return 0


async def _handle_recount(components: dict[str, Any]) -> int:
    counts = await components["ingestion_service"].recount_all_segments()
    print("Segment counts repaired:")
    for name, count in counts.items():
        print(f"  {name:<20} {count}")
    return 0


async def _handle_search(args: argparse.Namespace, components: dict[str, Any]) -> int:
    hits = await components["retrieval_engine"].search(args.query, args.limit)
    if not hits:
        print("No matching chunks.")
        return 0
    for hit in hits:
        snippet = hit.chunk_text[:120].replace("\n", " ")
        print(f"[{hit.segment_name or '-'}] {hit.document_title} #{hit.chunk_index}: {snippet}")
    return 0


async def _handle_documents(args: argparse.Namespace, components: dict[str, Any]) -> int:
    documents = await components["ingestion_service"].list_documents(args.segment)
    if not documents:
        print("No documents.")
        return 0
    for doc in documents:
        print(
            f"{doc.id:>5}  {doc.upload_date:%Y-%m-%d %H:%M}  "
            f"{(doc.segment_name or '-'):<18} {doc.title}"
        )
    return 0


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    components = _build_components(app_settings)
    await components["store"].initialize(components["seed_segments"])

    try:
        if args.command == "ingest":
            return await _handle_ingest(args, components)
        if args.command == "delete":
            return await _handle_delete(args, components)
        if args.command == "segments":
            return await _handle_segments(components)
        if args.command == "recount":
            return await _handle_recount(components)
        if args.command == "search":
            return await _handle_search(args, components)
        if args.command == "documents":
            return await _handle_documents(args, components)
    except KnowledgeBaseError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        supported = exc.details().get("supported_types")
        if supported:
            print(f"Supported formats: {', '.join(supported)}", file=sys.stderr)  # type: ignore[arg-type]
        return 1
    return 1


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bizknowledge",
        description="Manage the business knowledge base.",
    )
    subparsers = parser.add_subparsers(dest="command")

    ingest_parser = subparsers.add_parser("ingest", help="Ingest a file or pasted text")
    ingest_parser.add_argument("--title", required=True, help="Document title")
    source = ingest_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", help="Path to the document file")
    source.add_argument("--text", help="Document content")

    delete_parser = subparsers.add_parser("delete", help="Delete a document")
    delete_parser.add_argument("--id", required=True, type=int, help="Document id")

    subparsers.add_parser("segments", help="List segments and document counts")
    subparsers.add_parser("recount", help="Recompute every segment's document count")

    search_parser = subparsers.add_parser("search", help="Keyword search over the corpus")
    search_parser.add_argument("--query", required=True, help="Search text")
    search_parser.add_argument("--limit", type=int, default=10, help="Maximum hits")

    documents_parser = subparsers.add_parser("documents", help="List documents")
    documents_parser.add_argument("--segment", type=int, default=None, help="Segment id filter")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point; exits with the command's status code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    exit_code = asyncio.run(_run(args, app_settings))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
