"""Shared fixtures: every test runs against a fresh in-memory store."""

import pytest

from pipe_pricing.config import Settings
from pipe_pricing.container import build_engine
from pipe_pricing.models.schemas import Dimensions, MaterialPrices
from pipe_pricing.persistence import InMemoryKeyValueStore


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def settings():
    return Settings(storage_backend="memory", history_limit=50, currency_symbol="₽")


@pytest.fixture
def engine(kv, settings):
    return build_engine(kv, settings)


@pytest.fixture
def dims():
    return Dimensions(X=380, Y=380, H=500)


@pytest.fixture
def prices():
    return MaterialPrices(metal_price=510, mesh_price=300, stainless_price=1200, zinc_price_065=450)
