"""Pydantic models for users, properties, reservations and search criteria."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Largest whole-unit price whose cents value fits a 32-bit INTEGER column
MAX_PRICE_PER_NIGHT = 21_474_836


class User(BaseModel):
    """A registered user."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    password: str


class NewUser(BaseModel):
    """Fields required to register a user."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    password: str


class NewProperty(BaseModel):
    """Fields required to list a property."""

    model_config = ConfigDict(frozen=True)

    owner_id: int
    title: str
    description: str = ""
    thumbnail_photo_url: str
    cover_photo_url: str
    cost_per_night: int = Field(ge=0, description="Nightly price in cents")
    parking_spaces: int = Field(default=0, ge=0)
    number_of_bathrooms: int = Field(default=0, ge=0)
    number_of_bedrooms: int = Field(default=0, ge=0)
    country: str
    street: str
    city: str
    province: str
    post_code: str


class Property(NewProperty):
    """A stored property."""

    id: int


class PropertyListing(Property):
    """A property row joined with its average review rating."""

    average_rating: float | None = None


class PastReservation(Property):
    """A completed stay: the reserved property plus reservation dates."""

    reservation_id: int
    start_date: date
    end_date: date
    average_rating: float | None = None


class SearchCriteria(BaseModel):
    """Optional filters for a property search.

    Every field defaults to None (no filter). Blank strings from HTML forms
    are treated as absent. Prices are whole currency units, not cents.
    """

    model_config = ConfigDict(frozen=True)

    city: str | None = None
    owner_id: int | None = None
    minimum_price_per_night: int | None = Field(default=None, ge=0, le=MAX_PRICE_PER_NIGHT)
    maximum_price_per_night: int | None = Field(default=None, ge=0, le=MAX_PRICE_PER_NIGHT)
    minimum_rating: float | None = Field(default=None, ge=0)

    @field_validator("city", mode="before")
    @classmethod
    def clean_city(cls, v: object) -> str | None:
        if v is None:
            return None
        s = str(v).strip()
        return s if s else None

    @field_validator(
        "owner_id",
        "minimum_price_per_night",
        "maximum_price_per_night",
        "minimum_rating",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def is_empty(self) -> bool:
        """True when no filter is set."""
        return all(value is None for value in self.model_dump().values())
