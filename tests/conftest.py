from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from cart_api.main import app
from cart_api.config import Settings, get_settings
from cart_api.database import Base, get_db
from cart_api.models import Product
from cart_api.services.cart_session import CartSessionService


ACCESS_TOKEN = "6f1c2a4e-3b5d-4c7e-8f90-1a2b3c4d5e6f"


@pytest.fixture
def test_settings() -> Settings:
    """Settings used by the app during a test."""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        DEBUG=False,
        REQUIRE_ACCESS_TOKEN=False,
        ACCESS_TOKEN="",
        HOME_URL="http://test",
    )


@pytest.fixture
def access_token() -> str:
    return ACCESS_TOKEN


@pytest.fixture
def secured_settings(test_settings: Settings) -> Settings:
    """Settings requiring an access token."""
    return test_settings.model_copy(update={"REQUIRE_ACCESS_TOKEN": True, "ACCESS_TOKEN": ACCESS_TOKEN})


@pytest_asyncio.fixture(scope="function")
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on a fresh SQLite file."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        future=True,
    )
    TestSessionLocal = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, test_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with the test database session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def use_settings():
    """Swap the settings the app sees for the rest of the test."""

    def _use(settings: Settings) -> None:
        app.dependency_overrides[get_settings] = lambda: settings

    return _use


@pytest_asyncio.fixture
async def products(db_session: AsyncSession, test_settings: Settings) -> List[Product]:
    """Create products to add to carts."""
    service = CartSessionService(db_session, test_settings)
    hoodie = await service.register_product("Hoodie", price=4500, product_id=1)
    beanie = await service.register_product("Beanie", price=1800, stock_quantity=2, product_id=2)
    return [hoodie, beanie]
