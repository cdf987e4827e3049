"""Parameterized SELECT construction for property search."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final

from lightbnb.models import SearchCriteria

DEFAULT_LIMIT: Final = 10

# Criteria prices are whole currency units; cost_per_night is stored in cents.
MINOR_UNITS_PER_UNIT: Final = 100

_SELECT_SQL: Final = """
SELECT properties.*, avg(property_reviews.rating) AS average_rating
FROM properties
JOIN property_reviews ON properties.id = property_reviews.property_id
"""

_GROUP_ORDER_SQL: Final = """
GROUP BY properties.id
ORDER BY properties.cost_per_night
"""


@dataclass(frozen=True)
class QueryPlan:
    """A statement and the positional arguments bound to its $n placeholders."""

    sql: str
    args: tuple[Any, ...]


def validate_limit(limit: int) -> None:
    """Raise ValueError unless limit is a positive integer."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")


def to_minor_units(amount: int) -> int:
    """Convert whole currency units to cents."""
    return amount * MINOR_UNITS_PER_UNIT


def build_search_conditions(criteria: SearchCriteria) -> list[tuple[str, Any]]:
    """Collect (predicate template, argument) pairs for every criterion present.

    Templates carry a ``{}`` slot for the placeholder number, which is only
    known once the final ordering is fixed. Order: city, owner, minimum price,
    maximum price, minimum rating.
    """
    conditions: list[tuple[str, Any]] = []

    if criteria.city is not None:
        conditions.append(("properties.city LIKE ${}", f"%{criteria.city}%"))
    if criteria.owner_id is not None:
        conditions.append(("properties.owner_id = ${}", criteria.owner_id))
    if criteria.minimum_price_per_night is not None:
        conditions.append(
            ("properties.cost_per_night >= ${}", to_minor_units(criteria.minimum_price_per_night))
        )
    if criteria.maximum_price_per_night is not None:
        conditions.append(
            ("properties.cost_per_night <= ${}", to_minor_units(criteria.maximum_price_per_night))
        )
    if criteria.minimum_rating is not None:
        conditions.append(
            (
                "properties.id IN (SELECT property_id FROM property_reviews"
                " GROUP BY property_id HAVING avg(rating) >= ${})",
                criteria.minimum_rating,
            )
        )

    return conditions


def build_property_search(
    criteria: SearchCriteria | None = None,
    limit: int = DEFAULT_LIMIT,
) -> QueryPlan:
    """Build the property search statement.

    Args:
        criteria: Optional filters. None means no filtering.
        limit: Maximum number of rows to return.

    Returns:
        QueryPlan whose ``$n`` placeholders match ``args`` by position.

    Raises:
        ValueError: If limit is not a positive integer.
    """
    validate_limit(limit)

    if criteria is None or criteria.is_empty():
        conditions: list[tuple[str, Any]] = []
    else:
        conditions = build_search_conditions(criteria)

    fragments = [_SELECT_SQL]
    args: list[Any] = []
    predicates: list[str] = []
    for template, value in conditions:
        args.append(value)
        predicates.append(template.format(len(args)))

    if predicates:
        fragments.append("WHERE " + "\nAND ".join(predicates) + "\n")

    args.append(limit)
    fragments.append(_GROUP_ORDER_SQL)
    fragments.append(f"LIMIT ${len(args)};\n")

    return QueryPlan(sql="".join(fragments), args=tuple(args))
