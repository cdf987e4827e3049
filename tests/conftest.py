"""Shared pytest fixtures."""

import gc
import os
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from hypothesis import HealthCheck, settings

from lightbnb.config import Settings
from lightbnb.db import LightBnbRepository, SqlitePool
from lightbnb.db.schema import initialize_schema
from lightbnb.models import NewProperty, NewUser

# Hypothesis settings profiles for different environments
settings.register_profile("fast", max_examples=25)
settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))


@pytest.fixture(autouse=True)
def _isolate_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a local .env file and LIGHTBNB_* variables out of test Settings."""
    monkeypatch.setattr(
        Settings,
        "model_config",
        {**Settings.model_config, "env_file": None},
    )
    for key in list(os.environ):
        if key.startswith("LIGHTBNB_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def _cleanup_aiosqlite_threads():
    """Safety net: stop aiosqlite worker threads leaked by a test.

    aiosqlite creates a non-daemon worker thread per connection; a connection
    that is never closed keeps the process alive after the run.
    """
    yield

    from aiosqlite.core import Connection

    leaked = False
    gc.collect()
    for obj in gc.get_objects():
        if isinstance(obj, Connection) and obj._connection is not None:
            leaked = True
            obj.stop()

    if leaked:
        import warnings

        warnings.warn(
            "Test leaked aiosqlite connection(s); close the pool in fixture teardown",
            ResourceWarning,
            stacklevel=1,
        )


@pytest_asyncio.fixture
async def pool() -> AsyncGenerator[SqlitePool, None]:
    """An in-memory SQLite pool with the schema created."""
    pool = SqlitePool(":memory:")
    await initialize_schema(pool)
    yield pool
    await pool.close()


@pytest_asyncio.fixture
async def repo(pool: SqlitePool) -> LightBnbRepository:
    return LightBnbRepository(pool)


@pytest.fixture
def new_user() -> NewUser:
    return NewUser(name="Devin Sanders", email="tristanjacobs@gmail.com", password="hashed")


@pytest.fixture
def make_property() -> Callable[..., NewProperty]:
    """Factory for NewProperty instances with sensible defaults."""

    def _make(owner_id: int, **overrides: object) -> NewProperty:
        fields: dict[str, object] = {
            "owner_id": owner_id,
            "title": "Speed lamp",
            "description": "description",
            "thumbnail_photo_url": "https://images.example.com/small.jpg",
            "cover_photo_url": "https://images.example.com/large.jpg",
            "cost_per_night": 93061,
            "parking_spaces": 6,
            "number_of_bathrooms": 4,
            "number_of_bedrooms": 8,
            "country": "Canada",
            "street": "536 Namsub Highway",
            "city": "Sotboske",
            "province": "Quebec",
            "post_code": "28142",
        }
        fields.update(overrides)
        return NewProperty.model_validate(fields)

    return _make
