"""Command-line access to the content tools.

Usage::

    python -m cms_context.cli context "how do I reset my password" \\
        --types article,faq --max-results 5 --max-chars 8000

    python -m cms_context.cli search "pricing" --limit 10
    python -m cms_context.cli catalog --type post
    python -m cms_context.cli types
    python -m cms_context.cli get drafts.abc123

Connection settings come from ``SANITY_*`` environment variables, a local
``.env`` file, or ``--config`` (YAML).  Each command prints the tool's JSON
envelope to stdout and exits non-zero when ``success`` is false.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from cms_context.api.tools import ContentTools
from cms_context.config.loader import load_settings
from cms_context.utils.logging import configure_logging


def _split_list(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [v.strip() for v in value.split(",") if v.strip()]


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the content CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m cms_context.cli",
        description="Query a Sanity dataset and assemble RAG context.",
    )
    parser.add_argument("--config", default="config/config.yaml", help="YAML config file")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -- context --
    context_parser = subparsers.add_parser("context", help="Assemble ranked context for a query")
    context_parser.add_argument("query", help="Natural-language query")
    context_parser.add_argument("--types", default=None, help="Comma-separated document types")
    context_parser.add_argument("--max-results", type=int, default=None, dest="max_results")
    context_parser.add_argument("--max-chars", type=int, default=0, dest="max_chars")
    context_parser.add_argument("--chunk-size", type=int, default=None, dest="chunk_size")
    context_parser.add_argument(
        "--no-metadata", action="store_false", dest="include_metadata", help="Omit chunk headers"
    )

    # -- search --
    search_parser = subparsers.add_parser("search", help="Full-text search")
    search_parser.add_argument("query", help="Search text")
    search_parser.add_argument("--types", default=None, help="Comma-separated document types")
    search_parser.add_argument("--limit", type=int, default=None)

    # -- catalog --
    catalog_parser = subparsers.add_parser("catalog", help="Describe document kinds and fields")
    catalog_parser.add_argument("--type", default=None, dest="document_type", help="Single kind")

    # -- types --
    subparsers.add_parser("types", help="List document types with counts")

    # -- get --
    get_parser = subparsers.add_parser("get", help="Fetch one document by id")
    get_parser.add_argument("document_id")

    return parser


async def _dispatch(args: argparse.Namespace, tools: ContentTools) -> dict[str, Any]:
    if args.command == "context":
        return await tools.get_rag_context(
            args.query,
            document_types=_split_list(args.types),
            max_results=args.max_results,
            max_chars=args.max_chars,
            include_metadata=args.include_metadata,
        )
    if args.command == "search":
        return await tools.search_content(
            args.query, document_types=_split_list(args.types), limit=args.limit
        )
    if args.command == "catalog":
        return await tools.get_content_catalog(args.document_type)
    if args.command == "types":
        return await tools.get_document_types()
    return await tools.get_document(args.document_id)


async def _run(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    if getattr(args, "chunk_size", None):
        # Flags outrank environment and .env, which outrank init values.
        settings = settings.model_copy(update={"content_chunk_size": args.chunk_size})
    configure_logging(
        args.log_level or settings.log_level,
        json_output=settings.app_env == "production",
    )

    async with ContentTools(settings) as tools:
        envelope = await _dispatch(args, tools)

    print(json.dumps(envelope, indent=2, default=str))
    return 0 if envelope.get("success") else 1


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    return asyncio.run(_run(args))
