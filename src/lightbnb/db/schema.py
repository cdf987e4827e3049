"""Table definitions for the local SQLite backend.

PostgreSQL deployments manage their schema outside this package; these
statements mirror its tables so development databases and tests behave the
same way.
"""

from __future__ import annotations

from typing import Final

from lightbnb.db.pool import SqlitePool
from lightbnb.logging import get_logger

logger = get_logger(__name__)

SQLITE_SCHEMA: Final = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT NOT NULL,
        password TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS properties (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        owner_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        title TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        thumbnail_photo_url TEXT NOT NULL,
        cover_photo_url TEXT NOT NULL,
        cost_per_night INTEGER NOT NULL DEFAULT 0,
        parking_spaces INTEGER NOT NULL DEFAULT 0,
        number_of_bathrooms INTEGER NOT NULL DEFAULT 0,
        number_of_bedrooms INTEGER NOT NULL DEFAULT 0,
        country TEXT NOT NULL,
        street TEXT NOT NULL,
        city TEXT NOT NULL,
        province TEXT NOT NULL,
        post_code TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS reservations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        guest_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        property_id INTEGER NOT NULL REFERENCES properties(id) ON DELETE CASCADE,
        start_date TEXT NOT NULL,
        end_date TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS property_reviews (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        property_id INTEGER NOT NULL REFERENCES properties(id) ON DELETE CASCADE,
        rating INTEGER NOT NULL DEFAULT 0
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_users_email ON users(email)",
    "CREATE INDEX IF NOT EXISTS idx_properties_city ON properties(city)",
    "CREATE INDEX IF NOT EXISTS idx_reservations_guest ON reservations(guest_id)",
    "CREATE INDEX IF NOT EXISTS idx_reviews_property ON property_reviews(property_id)",
)


async def initialize_schema(pool: SqlitePool) -> None:
    """Create any missing tables and indexes."""
    for statement in SQLITE_SCHEMA:
        await pool.execute(statement)
    logger.info("database_initialized", db_path=pool.db_path)
