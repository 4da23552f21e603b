from datetime import datetime, timedelta, timezone

import pytest

from geopin.config.settings import DatabaseSettings
from geopin.store.database import build_engine, build_session_factory, init_db
from geopin.store.repository import PoiStore


class TickingClock:
    """Deterministic clock: every call advances one second."""

    def __init__(self, start: datetime = datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now


def _build_store(*, url: str = "sqlite://", clock=None, enforce_coordinate_range: bool = True) -> PoiStore:
    # "sqlite://" gives a fresh in-memory database per store (single shared connection).
    engine = build_engine(DatabaseSettings(url=url))
    init_db(engine)
    return PoiStore(
        build_session_factory(engine),
        clock=clock or TickingClock(),
        enforce_coordinate_range=enforce_coordinate_range,
    )


@pytest.fixture
def make_store():
    """Factory for extra stores (custom clock, relaxed validation, file database)."""
    return _build_store


@pytest.fixture
def store() -> PoiStore:
    return _build_store()
