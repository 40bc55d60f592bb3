from types import SimpleNamespace
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from src.depends import (
    get_administrator_roster,
    get_identity_service,
    get_orchestrator_settings,
    get_unit_of_work,
)
from src.adapter.services.administrator_roster import SqlAdministratorRoster
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from tests.utils.auth import generate_jwt
from src.app.services.orchestrator_settings import OrchestratorSettings
from src.domain.entities import Employee
from tests.fakes.identity_service import InMemoryIdentityService


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
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def identity_service():
    return InMemoryIdentityService()


@pytest.fixture
def roster(session_factory):
    # No caching: tests change the roster between calls
    return SqlAdministratorRoster(session_factory, cache_seconds=0)


@pytest.fixture
def settings():
    return OrchestratorSettings()


@pytest_asyncio.fixture
async def admin(db_session):
    """Platform staff member on the administrator roster"""
    user_id = uuid4()
    db_session.add(
        Employee(user_id=user_id, tenant_id=None, email="ops@platform.io", role="SUPER_ADMIN")
    )
    await db_session.commit()
    token = generate_jwt(user_id)
    return SimpleNamespace(id=user_id, headers={"Authorization": f"Bearer {token}"})


@pytest_asyncio.fixture
async def client(db_session, identity_service, roster, settings):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_identity_service] = lambda: identity_service
    app.dependency_overrides[get_administrator_roster] = lambda: roster
    app.dependency_overrides[get_orchestrator_settings] = lambda: settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
