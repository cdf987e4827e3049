"""Query functions for users, reservations and properties."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Final

from lightbnb.db.errors import QueryError
from lightbnb.db.pool import DRIVER_ERRORS, Pool
from lightbnb.db.query_builder import DEFAULT_LIMIT, build_property_search, validate_limit
from lightbnb.db.row_mappers import (
    build_property_insert,
    row_to_listing,
    row_to_past_reservation,
    row_to_property,
    row_to_user,
)
from lightbnb.logging import get_logger
from lightbnb.models import (
    NewProperty,
    NewUser,
    PastReservation,
    Property,
    PropertyListing,
    SearchCriteria,
    User,
)

logger = get_logger(__name__)

_PAST_RESERVATIONS_SQL: Final = """
SELECT properties.*,
       reservations.id AS reservation_id,
       reservations.start_date,
       reservations.end_date,
       avg(property_reviews.rating) AS average_rating
FROM reservations
JOIN properties ON reservations.property_id = properties.id
JOIN property_reviews ON properties.id = property_reviews.property_id
WHERE reservations.guest_id = $1
AND reservations.end_date < CURRENT_DATE
GROUP BY properties.id, reservations.id
ORDER BY reservations.start_date
LIMIT $2;
"""


class LightBnbRepository:
    """Parameterized queries against the rental schema.

    Each method runs one statement with a single attempt. A statement the
    database rejects raises QueryError; a statement that matches nothing
    returns None or an empty list.
    """

    def __init__(self, pool: Pool) -> None:
        self._pool = pool

    async def _fetch(
        self, operation: str, query: str, *args: Any
    ) -> Sequence[Mapping[str, Any]]:
        try:
            return await self._pool.fetch(query, *args)
        except DRIVER_ERRORS as e:
            logger.error("query_failed", operation=operation, error=str(e))
            raise QueryError(operation, str(e)) from e

    async def _fetchrow(
        self, operation: str, query: str, *args: Any
    ) -> Mapping[str, Any] | None:
        try:
            return await self._pool.fetchrow(query, *args)
        except DRIVER_ERRORS as e:
            logger.error("query_failed", operation=operation, error=str(e))
            raise QueryError(operation, str(e)) from e

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user_with_email(self, email: str) -> User | None:
        """Get a single user by email.

        Args:
            email: The email of the user.

        Returns:
            User if found, None otherwise.
        """
        row = await self._fetchrow(
            "get_user_with_email",
            "SELECT * FROM users WHERE email = $1;",
            email,
        )
        return row_to_user(row) if row is not None else None

    async def get_user_with_id(self, user_id: int) -> User | None:
        """Get a single user by id.

        Args:
            user_id: The id of the user.

        Returns:
            User if found, None otherwise.
        """
        row = await self._fetchrow(
            "get_user_with_id",
            "SELECT * FROM users WHERE id = $1;",
            user_id,
        )
        return row_to_user(row) if row is not None else None

    async def add_user(self, user: NewUser) -> User:
        """Insert a user and return the stored row."""
        row = await self._fetchrow(
            "add_user",
            """
            INSERT INTO users (name, email, password)
            VALUES ($1, $2, $3)
            RETURNING *;
            """,
            user.name,
            user.email,
            user.password,
        )
        if row is None:
            raise QueryError("add_user", "INSERT returned no row")
        logger.debug("user_added", user_id=row["id"])
        return row_to_user(row)

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    async def get_all_reservations(
        self, guest_id: int, limit: int = DEFAULT_LIMIT
    ) -> list[PastReservation]:
        """Get a guest's completed reservations, oldest first.

        Args:
            guest_id: The id of the guest.
            limit: Maximum number of reservations to return.

        Returns:
            Reservations whose end date is before today, each with the
            property's average rating.
        """
        validate_limit(limit)
        rows = await self._fetch("get_all_reservations", _PAST_RESERVATIONS_SQL, guest_id, limit)
        return [row_to_past_reservation(row) for row in rows]

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    async def get_all_properties(
        self,
        criteria: SearchCriteria | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> list[PropertyListing]:
        """Search properties, cheapest first.

        Args:
            criteria: Optional filters; None returns every reviewed property.
            limit: Maximum number of properties to return.

        Returns:
            Matching properties with their average rating.
        """
        plan = build_property_search(criteria, limit)
        rows = await self._fetch("get_all_properties", plan.sql, *plan.args)
        logger.debug("property_search", matched=len(rows), args=len(plan.args))
        return [row_to_listing(row) for row in rows]

    async def add_property(self, prop: NewProperty) -> Property:
        """Insert a property and return the stored row."""
        sql, values = build_property_insert(prop)
        row = await self._fetchrow("add_property", sql, *values)
        if row is None:
            raise QueryError("add_property", "INSERT returned no row")
        logger.debug("property_added", property_id=row["id"], owner_id=prop.owner_id)
        return row_to_property(row)
