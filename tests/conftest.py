import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import docversion.db.models  # noqa: F401
from docversion.core.db import Base, get_db
from docversion.core.security import create_access_token
from docversion.db.repositories.user_repository import UserRepository
from docversion.domains.identity.entities import User
from docversion.main import create_app


@pytest.fixture
async def engine():
    """Движок на SQLite в памяти, одна база на тест"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def file_engine(tmp_path):
    """Движок на файловой SQLite: у каждой сессии свое соединение"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'docversion.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


async def make_user(session: AsyncSession, email: str, name: str = "Test User") -> User:
    """Пользователь без настоящего bcrypt-хеша (вход по паролю не нужен)"""
    user = User(
        uuid=uuid.uuid4(),
        email=email,
        name=name,
        password_hash="not-a-bcrypt-hash",
    )
    return await UserRepository(session).create(user)


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.uuid), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def owner(db_session) -> User:
    return await make_user(db_session, "owner@example.com", "Owner")


@pytest.fixture
async def stranger(db_session) -> User:
    return await make_user(db_session, "stranger@example.com", "Stranger")


def build_app(session_factory):
    """Приложение, работающее с тестовой базой"""
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
async def client(session_factory):
    """HTTP-клиент к приложению с тестовой базой"""
    async with AsyncClient(transport=ASGITransport(app=build_app(session_factory)), base_url="http://test") as client:
        yield client
