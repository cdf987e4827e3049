"""Database access for the rental application."""

from lightbnb.db.errors import QueryError
from lightbnb.db.pool import Pool, SqlitePool, create_pool
from lightbnb.db.query_builder import QueryPlan, build_property_search
from lightbnb.db.repository import LightBnbRepository

__all__ = [
    "LightBnbRepository",
    "Pool",
    "QueryError",
    "QueryPlan",
    "SqlitePool",
    "build_property_search",
    "create_pool",
]
