import os
import random
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# In-memory database; must be set before the app module is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

from delve import create_app, db  # noqa: E402
from delve.routes import world_api  # noqa: E402
from delve.world.config import WorldConfig  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    app = create_app()
    app.config.update({"TESTING": True})
    return app


@pytest.fixture()
def app_ctx(test_app):
    ctx = test_app.app_context()
    ctx.push()
    try:
        yield test_app
    finally:
        ctx.pop()


@pytest.fixture()
def client(test_app):
    with test_app.app_context():
        db.drop_all()
        db.create_all()
    with world_api._world_cache_lock:
        world_api._world_cache.clear()
    return test_app.test_client()


@pytest.fixture()
def rng():
    return random.Random(1337)


@pytest.fixture()
def config():
    return WorldConfig()


def pytest_configure(config):  # register custom markers
    config.addinivalue_line("markers", "structure: structural invariants over generated areas")
    config.addinivalue_line("markers", "statistical: seeded sampling tests with tolerances")
