import sys
from datetime import timedelta
from pathlib import Path
from uuid import uuid4

# Add repo root to Python path for libs access
repo_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(repo_root))

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.api.utils.jwt import create_access_token
from src.depends import get_unit_of_work
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork

# Register every table on SQLModel.metadata
import src.domain.entities  # noqa: F401


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def client(session_factory):
    from httpx import ASGITransport
    from src.api.app import create_app

    app = create_app(ApplicationConfig)

    # One session per request, as in production
    async def override_get_unit_of_work():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def session_headers(tenant_id, superuser=False, user_id=None):
    token = create_access_token(
        user_id=str(user_id or uuid4()),
        tenant_id=str(tenant_id),
        caller_class="tenant",
        superuser=superuser,
        expires_delta=timedelta(minutes=15),
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def tenant_id():
    return uuid4()


@pytest.fixture
def user_headers(tenant_id):
    return session_headers(tenant_id)


@pytest.fixture
def superuser_headers(tenant_id):
    return session_headers(tenant_id, superuser=True)


@pytest.fixture
def operator_headers():
    return {"X-Admin-API-Key": ApplicationConfig.ADMIN_API_KEY}


@pytest.fixture
def headers_for():
    """Session headers for an arbitrary tenant"""
    return session_headers
