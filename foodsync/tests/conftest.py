"""
Test fixtures - in-memory SQLite database, one account per role, HTTP client
"""
import os

# Cheap hashes for tests; must be set before settings are first read
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from foodsync.database import Base, get_db
from foodsync.main import app
from foodsync.models.account import Account, Role
from foodsync.services.authenticator import hash_password
from foodsync.services.session_service import issue_session


@pytest_asyncio.fixture()
async def db_session():
    """Create a fresh in-memory SQLite database for each test"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


def make_account(role: Role, name: str, email: str, password: str = "secret123", **fields) -> Account:
    return Account(
        role=role,
        display_name=name,
        email=email,
        password_hash=hash_password(password),
        **fields,
    )


@pytest_asyncio.fixture()
async def seed_data(db_session):
    """Insert baseline accounts: admin, two restaurants, NGO, user, packing company"""
    accounts = {
        "admin": make_account(Role.ADMIN, "Admin", "admin@foodsync.test", verified=True),
        "restaurant": make_account(
            Role.RESTAURANT, "Green Bistro", "bistro@foodsync.test",
            address="12 Market St", description="Seasonal plates",
        ),
        "restaurant2": make_account(Role.RESTAURANT, "Curry House", "curry@foodsync.test"),
        "ngo": make_account(
            Role.NGO, "Feed the City", "ngo@foodsync.test",
            contact_person="Asha", specialty="Homeless shelters",
        ),
        "user": make_account(Role.USER, "Sam Diner", "sam@foodsync.test"),
        "packing": make_account(Role.PACKING, "BoxIt", "boxit@foodsync.test"),
    }
    db_session.add_all(accounts.values())
    await db_session.commit()
    for account in accounts.values():
        await db_session.refresh(account)
    return accounts


@pytest.fixture()
def auth_headers():
    """Build a bearer header for an account"""

    def _headers(account: Account) -> dict:
        token, _ = issue_session(account)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture()
async def client(db_session):
    """httpx AsyncClient bound to the FastAPI app, without credentials"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()
