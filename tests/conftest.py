from __future__ import annotations

import random
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.core.config import Settings
from src.core.token_store import TokenStore
from src.replit.bridge import ToolBridge
from src.replit.simulation import SimulationEngine


FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings() -> Settings:
    return Settings(db_path=":memory:", simulation_seed=7, rate_limit_max=1000)


@pytest.fixture
def engine() -> SimulationEngine:
    return SimulationEngine(rng=random.Random(42), clock=lambda: FIXED_NOW)


@pytest.fixture
def token_store():
    store = TokenStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def client(settings, engine, token_store) -> TestClient:
    bridge = ToolBridge.from_settings(settings, simulation=engine)
    app = create_app(settings, bridge=bridge, token_store=token_store)
    return TestClient(app)

