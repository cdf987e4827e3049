"""Row-to-model conversion and insert helpers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

from lightbnb.models import NewProperty, PastReservation, Property, PropertyListing, User

# Insert column order for the properties table.
PROPERTY_COLUMNS: Final = (
    "owner_id",
    "title",
    "description",
    "thumbnail_photo_url",
    "cover_photo_url",
    "cost_per_night",
    "parking_spaces",
    "number_of_bathrooms",
    "number_of_bedrooms",
    "country",
    "street",
    "city",
    "province",
    "post_code",
)


def row_to_user(row: Mapping[str, Any]) -> User:
    return User.model_validate(dict(row))


def row_to_property(row: Mapping[str, Any]) -> Property:
    return Property.model_validate(dict(row))


def row_to_listing(row: Mapping[str, Any]) -> PropertyListing:
    """Convert a search row; average_rating arrives as Decimal from PostgreSQL."""
    data = dict(row)
    if data.get("average_rating") is not None:
        data["average_rating"] = float(data["average_rating"])
    return PropertyListing.model_validate(data)


def row_to_past_reservation(row: Mapping[str, Any]) -> PastReservation:
    data = dict(row)
    if data.get("average_rating") is not None:
        data["average_rating"] = float(data["average_rating"])
    return PastReservation.model_validate(data)


def placeholders(count: int, start: int = 1) -> str:
    """Return ``$start, $start+1, ...`` for ``count`` arguments."""
    return ", ".join(f"${i}" for i in range(start, start + count))


def build_property_insert(prop: NewProperty) -> tuple[str, tuple[Any, ...]]:
    """Build the INSERT ... RETURNING statement for a new property.

    Returns:
        Tuple of (sql, args) with args in PROPERTY_COLUMNS order.
    """
    values = tuple(getattr(prop, column) for column in PROPERTY_COLUMNS)
    sql = (
        f"INSERT INTO properties ({', '.join(PROPERTY_COLUMNS)})\n"
        f"VALUES ({placeholders(len(PROPERTY_COLUMNS))})\n"
        "RETURNING *;"
    )
    return sql, values
