import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import AsyncGenerator, Awaitable, Callable, Dict  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import playgroup.auth.models  # noqa: E402,F401
import playgroup.core.models  # noqa: E402,F401
from playgroup.auth.models import User  # noqa: E402
from playgroup.auth.security import create_access_token, hash_password  # noqa: E402
from playgroup.auth.services import seed_default_permissions  # noqa: E402
from playgroup.db.session import Base, get_db  # noqa: E402
from playgroup.main import app  # noqa: E402
from playgroup.storage import MemStorage  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test; FastAPI's get_db yields this session."""
    # StaticPool keeps one connection, so every session sees the same in-memory database
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        await seed_default_permissions(session)
        yield session

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make_user(role: str, username: str = None, password: str = "Secret123", **extra) -> User:
        username = username or f"{role}-user"
        user = User(
            username=username,
            email=extra.pop("email", f"{username}@example.com"),
            full_name=extra.pop("full_name", username.title()),
            password_hash=hash_password(password),
            role=role,
            active=extra.pop("active", True),
            **extra,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for() -> Callable[[User], Dict[str, str]]:
    return auth_headers


@pytest.fixture()
async def admin_headers(make_user) -> Dict[str, str]:
    return auth_headers(await make_user("superadmin", username="admin"))


@pytest.fixture()
def storage() -> MemStorage:
    return MemStorage()
