#!/usr/bin/env python3
"""Command line entry points for the catalog service."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from app.core.config import get_settings
from app.core.database import Storage
from app.core.errors import CatalogError
from app.services.books import BookRepository

logger = logging.getLogger(__name__)


async def seed_books(path: Path, database_url: str, strict: bool) -> int:
    """Bulk-insert the books listed in a JSON file and return the count."""
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    storage = Storage(database_url)
    try:
        await storage.create_all()
        books = BookRepository(storage, strict=strict)
        if isinstance(data, dict):
            await books.create_book(data)
            return 1
        return await books.create_book(data)
    finally:
        await storage.dispose()


def main() -> int:
    """Run the catalog CLI."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Book catalog service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start the API on port 3000
  python -m app.cli serve

  # Load books from a JSON file (one object or a list)
  python -m app.cli seed ./books.json
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    serve.add_argument("--port", type=int, default=3000, help="Port to listen on")

    seed = subparsers.add_parser("seed", help="Bulk-insert books from a JSON file")
    seed.add_argument("path", type=Path, help="JSON file with a book or a list of books")
    seed.add_argument(
        "--database-url",
        default=settings.database_url,
        help="Database URL (defaults to the configured one)",
    )
    seed.add_argument(
        "--strict",
        action="store_true",
        default=settings.strict_validation,
        help="Validate every book before inserting",
    )

    args = parser.parse_args()
    logging.basicConfig(level=settings.log_level.upper())

    if args.command == "serve":
        import uvicorn

        uvicorn.run("app.main:app", host=args.host, port=args.port, reload=settings.is_development)
        return 0

    if not args.path.exists():
        print(f"Error: file not found: {args.path}", file=sys.stderr)
        return 1

    try:
        count = asyncio.run(seed_books(args.path, args.database_url, args.strict))
    except (json.JSONDecodeError, CatalogError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Inserted {count} books")
    return 0


if __name__ == "__main__":
    sys.exit(main())
