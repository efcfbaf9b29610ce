"""
Pytest configuration and shared fixtures
"""

from datetime import datetime

import pytest

import auth
import seed
from config import Settings

# Inside the seeded data's month: 2024-01-21 is a Sunday
NOW = datetime(2024, 1, 22, 10, 30)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Tests touching SQLite")


@pytest.fixture
def repo():
    return seed.build_repository()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def settings(tmp_path):
    # Lowest bcrypt cost keeps the auth tests fast
    return Settings(db_file=tmp_path / "gym.db", bcrypt_rounds=4)


@pytest.fixture
def gateway(repo, settings):
    return auth.init_auth(repo, settings, seed.DEFAULT_PASSWORD)
