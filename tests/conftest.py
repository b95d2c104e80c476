"""Shared fixtures: in-memory database, seeded reference data, HTTP client."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import StaticPool, event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from storefront.api.deps import require_login
from storefront.config import Settings, UploadWidgetConfig
from storefront.database import Base, get_db, set_sqlite_pragma
from storefront.main import create_app
from storefront.models import Category, Product, ProductTag, Tag


@dataclass
class Catalogue:
    """Reference rows created for each test."""

    categories: list[Category]
    tags: list[Tag]

    @property
    def category_ids(self) -> list[int]:
        return [c.id for c in self.categories]

    @property
    def tag_ids(self) -> list[int]:
        return [t.id for t in self.tags]


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        secret_key="test-secret-key",
        data_dir=tmp_path / "data",
        login_url="/users/login",
        CLOUDINARY_NAME="demo-cloud",
        CLOUDINARY_API_KEY="123456",
        CLOUDINARY_UPLOAD_PRESET="signed-preset",
    )


@pytest.fixture
def upload_widget() -> UploadWidgetConfig:
    return UploadWidgetConfig(cloud_name="demo-cloud", api_key="123456", upload_preset="signed-preset")


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine.sync_engine, "connect", set_sqlite_pragma)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def catalogue(db: AsyncSession) -> Catalogue:
    """Two categories and five tags with ids 1..5."""
    categories = [Category(name="Produce"), Category(name="Bakery")]
    tags = [Tag(name=name) for name in ("organic", "local", "vegan", "seasonal", "sale")]
    db.add_all(categories + tags)
    await db.commit()
    return Catalogue(categories=categories, tags=tags)


@pytest_asyncio.fixture
async def make_product(db: AsyncSession, catalogue: Catalogue):
    """Factory inserting a product with the given tag ids."""

    async def _make(name: str = "Apple", tag_ids: tuple[int, ...] = (), **fields) -> Product:
        product = Product(
            name=name,
            cost=fields.pop("cost", 150),
            description=fields.pop("description", f"Fresh {name.lower()}"),
            category_id=fields.pop("category_id", catalogue.category_ids[0]),
            **fields,
        )
        db.add(product)
        await db.flush()
        db.add_all(ProductTag(product_id=product.id, tag_id=tid) for tid in tag_ids)
        await db.commit()
        return product

    return _make


@pytest.fixture
def app(settings: Settings, session_maker):
    app = create_app(settings)

    async def _get_test_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    return app


@pytest_asyncio.fixture
async def anonymous_client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Client for a signed-in user."""
    app.dependency_overrides[require_login] = lambda: None
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
