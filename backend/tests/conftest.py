import os
import sys
import asyncio

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Stats are computed with concurrent sessions, so tests use a file-backed
# SQLite database rather than a single shared in-memory connection.
DEFAULT_DB_URL = os.environ.setdefault(
    "DATABASE_URL", "sqlite+aiosqlite:///./test_league.db"
)
os.environ.setdefault("ALLOWED_ORIGINS", "http://testserver")
os.environ.setdefault("DISABLE_RATE_LIMITS", "true")

from league_tracker import db, models  # noqa: E402,F401
from league_tracker.cache import player_stats_cache  # noqa: E402


@pytest.fixture(scope="session")
def session_loop():
    """Single event loop for all sync fixtures that need to run async DB code."""

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True, scope="session")
def ensure_database(session_loop):
    """Ensure the test database starts clean and honours DATABASE_URL."""

    mp = pytest.MonkeyPatch()
    desired_url = os.getenv("DATABASE_URL") or DEFAULT_DB_URL
    mp.setenv("DATABASE_URL", desired_url)

    path = None
    if desired_url.startswith("sqlite") and ":memory:" not in desired_url:
        path = desired_url.split("///")[-1]
        if os.path.exists(path):
            os.remove(path)

    session_loop.run_until_complete(db.dispose_engine())
    yield
    session_loop.run_until_complete(db.dispose_engine())
    if path and os.path.exists(path):
        os.remove(path)
    mp.undo()


async def _reset_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(db.Base.metadata.drop_all)
        await conn.run_sync(db.Base.metadata.create_all)


@pytest.fixture(autouse=True)
def reset_schema(request, session_loop):
    """Reset the schema before each test unless preserved via marker."""

    if request.node.get_closest_marker("preserve_schema"):
        yield
        return

    session_loop.run_until_complete(_reset_schema(db.get_engine()))
    yield


@pytest.fixture(autouse=True)
def clear_stats_cache(session_loop):
    session_loop.run_until_complete(player_stats_cache.clear())
    yield
    session_loop.run_until_complete(player_stats_cache.clear())


@pytest.fixture
def client():
    """A ``TestClient`` for the full application with a fresh game store."""

    from fastapi.testclient import TestClient

    from league_tracker.main import app
    from league_tracker.storage import SqlGameStore

    app.state.game_store = SqlGameStore(db.get_sessionmaker())
    with TestClient(app) as test_client:
        yield test_client
    app.state.game_store = None
