"""Command-line entry point for LightBnB database tasks."""

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from lightbnb.config import Settings
from lightbnb.db import LightBnbRepository, QueryError, SqlitePool, create_pool
from lightbnb.db.schema import initialize_schema
from lightbnb.logging import configure_logging, get_logger
from lightbnb.models import SearchCriteria

logger = get_logger(__name__)


async def run_init_db(settings: Settings) -> None:
    """Create the schema in a local SQLite database."""
    pool = await create_pool(settings)
    try:
        if not isinstance(pool, SqlitePool):
            logger.error("init_db_requires_sqlite", database_url=settings.database_url)
            raise SystemExit(1)
        await initialize_schema(pool)
    finally:
        await pool.close()


async def run_search(settings: Settings, criteria: SearchCriteria, limit: int) -> None:
    """Run a property search and print one JSON object per line."""
    pool = await create_pool(settings)
    try:
        repo = LightBnbRepository(pool)
        listings = await repo.get_all_properties(criteria, limit)
    finally:
        await pool.close()

    for listing in listings:
        print(listing.model_dump_json())
    logger.info("search_complete", results=len(listings))


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="LightBnB - rental listings database tools")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-level logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create tables in a sqlite:/// database")

    search = subparsers.add_parser("search", help="Search properties, cheapest first")
    search.add_argument("--city", help="Substring of the city name")
    search.add_argument("--owner-id", type=int, help="Only properties owned by this user")
    search.add_argument("--min-price", type=int, help="Minimum nightly price (whole units)")
    search.add_argument("--max-price", type=int, help="Maximum nightly price (whole units)")
    search.add_argument("--min-rating", type=float, help="Minimum average review rating")
    search.add_argument("--limit", type=int, default=None, help="Maximum results")

    args = parser.parse_args()

    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Error: Failed to load settings. {e}")
        print("Set LIGHTBNB_DATABASE_URL (postgresql://... or sqlite:///path).")
        sys.exit(1)

    configure_logging(
        json_output=settings.log_json,
        level=logging.DEBUG if args.debug else logging.INFO,
    )

    try:
        if args.command == "init-db":
            asyncio.run(run_init_db(settings))
        else:
            criteria = SearchCriteria(
                city=args.city,
                owner_id=args.owner_id,
                minimum_price_per_night=args.min_price,
                maximum_price_per_night=args.max_price,
                minimum_rating=args.min_rating,
            )
            limit = args.limit if args.limit is not None else settings.search_limit
            asyncio.run(run_search(settings, criteria, limit))
    except (QueryError, ValueError) as e:
        logger.error("command_failed", command=args.command, error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
