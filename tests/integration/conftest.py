from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from identity_service.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from identity_service.api.app import create_app
from identity_service.api.utils.jwt import hash_refresh_token
from identity_service.depends import get_token_codec, get_unit_of_work
from identity_service.domain.base import utcnow
from identity_service.domain.entities import Session, User
from tests.fixtures.json_loader import TestDataLoader


@pytest_asyncio.fixture
def test_data():
    return TestDataLoader()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session):
    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def concurrent_client(engine):
    """Client opening a separate database session per request, like production"""
    app = create_app(ApplicationConfig)
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_unit_of_work():
        async with Session() as session:
            yield SqlAlchemyUnitOfWork(session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def codec():
    return get_token_codec()


@pytest.fixture
def register_user(client, test_data):
    """Register a user through the API and return the response body"""

    async def _register(**overrides):
        payload = test_data.get_copy("register_user")
        payload.update(overrides)
        response = await client.post("/users", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def seed_session(db_session, codec):
    """
    Insert a user and an active session directly.

    Used for roles the registration endpoint never assigns. Returns
    (access token, refresh token).
    """

    async def _seed(
        user_id: int,
        admin_role=None,
        user_type="voter",
        device_id="device-admin",
        issued_seconds_ago: int = 0,
    ):
        if await db_session.get(User, user_id) is None:
            db_session.add(User(id=user_id, user_type=user_type, admin_role=admin_role))

        issued_at = datetime.now(UTC) - timedelta(seconds=issued_seconds_ago)
        access_token = codec.issue_access_token(
            user_id, user_type, admin_role, issued_at=issued_at
        )
        refresh_token = codec.issue_refresh_token()

        created = utcnow() - timedelta(seconds=issued_seconds_ago)
        db_session.add(
            Session(
                user_id=user_id,
                access_token=access_token,
                refresh_token_hash=hash_refresh_token(refresh_token),
                jwt_token_id=codec.read_token_id(access_token),
                device_id=device_id,
                user_type=user_type,
                admin_role=admin_role,
                is_active=True,
                created_at=created,
                last_activity=created,
                expires_at=created + timedelta(seconds=codec.access_token_seconds),
                refresh_expires_at=created + timedelta(seconds=codec.refresh_token_seconds),
            )
        )
        await db_session.commit()
        return access_token, refresh_token

    return _seed
