import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["OTEL_TRACING_ENABLED"] = "false"

from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from main import app
from shared.config.database import Base, get_db
from shared.security import create_user_token
from services.auth_service.models import User
from services.auth_service.service import AuthService


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user.id, user.role)}"}


def product_payload(**overrides) -> dict:
    sku = uuid4().hex[:8]
    payload = {
        "name": "Switch OLED",
        "description": "Handheld console",
        "category": "console",
        "brand": "Nintendo",
        "images": ["https://img.example.com/switch.png"],
        "variants": [
            {"color": "white", "size": "standard", "stock": 5, "price": 349.99, "sku": f"SW-W-{sku}"},
            {"color": "neon", "size": "standard", "stock": 2, "price": 329.5, "sku": f"SW-N-{sku}"},
        ],
    }
    payload.update(overrides)
    return payload


def order_payload(product_id: int, color: str = "white", size: str = "standard", quantity: int = 1, **overrides) -> dict:
    payload = {
        "items": [{"product_id": product_id, "variant": {"color": color, "size": size}, "quantity": quantity}],
        "shipping_address": {
            "street": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "zip_code": "62701",
            "country": "US",
        },
        "payment_method": "paypal",
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    async def _make(role: str = "customer", approved: bool = True, password: str | None = None, **fields) -> User:
        async with session_factory() as session:
            user = User(
                email=fields.pop("email", f"{role}-{uuid4().hex[:8]}@example.com"),
                name=fields.pop("name", f"Test {role}"),
                role=role,
                is_approved=approved,
                hashed_password=AuthService._hash_password(password) if password else None,
                **fields,
            )
            session.add(user)
            await session.commit()
            return user

    return _make


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user("admin")


@pytest_asyncio.fixture
async def customer(make_user):
    return await make_user("customer")


@pytest_asyncio.fixture
async def rider(make_user):
    return await make_user("rider", phone="555-123-4567")


@pytest_asyncio.fixture
async def product(client, admin):
    resp = await client.post("/products", json=product_payload(), headers=auth_headers(admin))
    assert resp.status_code == 201, resp.text
    return resp.json()
