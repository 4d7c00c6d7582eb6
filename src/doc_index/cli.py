"""Command line for building and querying a markdown corpus index."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys

import orjson
from pydantic import ValidationError

from doc_index.config import Settings
from doc_index.engine import NotInitializedError, SearchEngine
from doc_index.loader import collect_documents
from doc_index.observability import configure_logging


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_INITIALIZED = 1
EXIT_USAGE = 2


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doc-index",
        description="Build and search a full-text index over <docs-dir>/<category>/*.md",
    )
    parser.add_argument(
        "--docs-dir",
        type=Path,
        help="Directory holding category folders (defaults to DOCS_DIR or ./docs)",
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    subcommands.add_parser("build", help="Rebuild the index from the docs directory")

    search = subcommands.add_parser("search", help="Query the persisted index")
    search.add_argument("query", help="Free-text query")
    search.add_argument("--max-results", type=int, help="Maximum results to return")
    search.add_argument("--category", help="Only return documents titled '<category>/...'")
    search.add_argument("--min-score", type=float, help="Drop results scoring below this")
    search.add_argument("--offset", type=int, default=0, help="Skip this many ranked results")
    search.add_argument("--json", action="store_true", help="Emit one JSON object per result")
    return parser


def _run_build(engine: SearchEngine, docs_dir: Path) -> int:
    result = engine.build_index(collect_documents(docs_dir))
    for error in result.errors:
        logger.warning("Skipped: %s", error)
    sys.stdout.write(
        f"indexed={result.documents_indexed} skipped={result.documents_skipped}"
        f" persisted={result.persisted} generation={result.generation_id}\n"
    )
    return EXIT_OK


def _run_search(engine: SearchEngine, args: argparse.Namespace) -> int:
    engine.initialize()
    try:
        results = engine.search(
            args.query,
            max_results=args.max_results,
            category=args.category,
            min_score=args.min_score,
            offset=args.offset,
        )
    except NotInitializedError as exc:
        logger.error("%s", exc)
        return EXIT_NOT_INITIALIZED

    for result in results:
        if args.json:
            sys.stdout.write(orjson.dumps(result.model_dump()).decode("utf-8") + "\n")
        else:
            sys.stdout.write(f"{result.score:.4f}  {result.title}  ({result.doc_id})\n{result.excerpt}\n\n")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    overrides = {"docs_dir": args.docs_dir} if args.docs_dir is not None else {}
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        sys.stderr.write(f"Invalid configuration: {exc}\n")
        return EXIT_USAGE

    configure_logging(settings.log_level, json_output=settings.log_json)
    engine = SearchEngine.from_settings(settings)

    try:
        if args.command == "build":
            return _run_build(engine, settings.docs_dir)
        return _run_search(engine, args)
    except ValueError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
