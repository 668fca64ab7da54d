import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from prochat.config import Settings
from prochat.database import Database
from prochat.main import create_app


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway sqlite file per test."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}",
        session_cookie_secure=False,
    )


@pytest_asyncio.fixture
async def db(settings):
    database = Database(settings.database_url, timeout=settings.db_timeout)
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture
def app(settings, db):
    return create_app(settings, db=db)


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register(client):
    """Sign a user up and return headers carrying its session token."""
    async def _register(username: str, password: str = 'secret1'):
        r = await client.post('/signup', json={'username': username, 'password': password})
        assert r.status_code == 201, r.text
        return {'Authorization': f"Bearer {r.cookies['sid']}"}
    return _register
