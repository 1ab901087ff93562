"""Pytest configuration and fixtures for backend tests"""
import os
import random
import tempfile

import pytest
from fastapi.testclient import TestClient

from backend.database import Database
from backend.dependencies import get_rng, get_store, reset_rate_limits
from backend.documents import DocumentStore
from backend.main import app
from backend.seed import seed_enemies

ADMIN_SECRET = "test-admin-secret"


class ScriptedRandom(random.Random):
    """Random whose random() replays a fixed list of values (cycling)"""

    def __init__(self, values=None):
        super().__init__(0)
        self.values = list(values or [0.5])
        self._index = 0

    def script(self, *values):
        self.values = list(values)
        self._index = 0

    def random(self):
        value = self.values[self._index % len(self.values)]
        self._index += 1
        return value


@pytest.fixture
def temp_db():
    """Create a temporary database for testing"""
    fd, temp_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    db = Database(temp_path)

    yield db

    db.close()
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def db_connection(temp_db):
    """Get database connection from temp database"""
    conn = temp_db.connect()
    yield conn


@pytest.fixture
def store(temp_db):
    """Empty document store on the temporary database"""
    return DocumentStore(temp_db)


@pytest.fixture
def seeded_store(store):
    """Document store holding the default enemy catalog"""
    seed_enemies(store)
    return store


@pytest.fixture
def scripted_rng():
    return ScriptedRandom()


@pytest.fixture
def client(seeded_store, scripted_rng, monkeypatch):
    """FastAPI test client with temporary store, scripted rolls and an admin secret"""
    monkeypatch.setenv("ADMIN_SECRET", ADMIN_SECRET)
    reset_rate_limits()

    app.dependency_overrides[get_store] = lambda: seeded_store
    app.dependency_overrides[get_rng] = lambda: scripted_rng

    test_client = TestClient(app)
    yield test_client
    test_client.close()

    app.dependency_overrides.clear()
    reset_rate_limits()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Secret": ADMIN_SECRET}


@pytest.fixture
def sample_player():
    """Sample player payload"""
    return {
        "xp": 250,
        "equipment": ["wooden_sword"],
    }


@pytest.fixture
def sample_enemy():
    """Sample enemy payload"""
    return {
        "name": "Cave Troll",
        "power": 40,
        "hp": 200,
        "xp_reward": 90,
        "loot": [
            {"item": "troll_hide", "chance": 0.5, "quantity": 1},
            {"item": "silver_coin", "chance": 0.75, "quantity": 5},
        ],
    }


@pytest.fixture
def rng_factory():
    """Build ScriptedRandom instances from a list of roll values"""
    return ScriptedRandom
