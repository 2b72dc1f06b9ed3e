from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from sqlbridge.main import app
from sqlbridge.core.database import get_db
from sqlbridge.core.schemas import TranslationResult
from sqlbridge.ai_feature.translator import get_translator


def make_result(rows=None, scalars=None, returns_rows=True, rowcount=-1):
    """A stand-in for a SQLAlchemy Result with the accessors our code uses."""
    rows = rows or []
    scalars = scalars or []

    result = MagicMock()
    result.all.return_value = rows
    result.mappings.return_value.all.return_value = rows
    result.scalars.return_value.all.return_value = scalars
    result.scalars.return_value.first.return_value = scalars[0] if scalars else None
    result.returns_rows = returns_rows
    result.rowcount = rowcount
    return result


class FakeTranslator:
    """Returns a canned TranslationResult and remembers what it was asked."""

    def __init__(self, result: TranslationResult):
        self.result = result
        self.calls = []

    async def translate(self, command: str, schema: str) -> TranslationResult:
        self.calls.append((command, schema))
        return self.result


# Session double: execute() for ORM/catalog queries, connection() for raw SQL
@pytest.fixture(scope="function")
def db_session():
    session = MagicMock()
    session.execute = AsyncMock(return_value=make_result())
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()

    connection = MagicMock()
    connection.exec_driver_sql = AsyncMock(return_value=make_result())
    session.connection = AsyncMock(return_value=connection)
    return session


# The connection raw statements are executed on
@pytest.fixture(scope="function")
def sql_connection(db_session):
    return db_session.connection.return_value


@pytest.fixture(scope="function")
def translator():
    return FakeTranslator(TranslationResult(ok=True, sql="SELECT * FROM users;"))


# Client
@pytest_asyncio.fixture(scope="function")
async def client(db_session, translator):
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_translator] = lambda: translator

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
