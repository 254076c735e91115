"""
Shared Pytest fixtures.
Sets up the test database, signing keys, HTTP client and seed data.
"""

import os
import tempfile
from collections.abc import AsyncGenerator
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from uuid import uuid4

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

# ── Test signing keys (before vaxsync reads its settings) ─
_keys_dir = Path(tempfile.mkdtemp(prefix="vaxsync-keys-"))
_private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
(_keys_dir / "private.pem").write_bytes(
    _private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
)
(_keys_dir / "public.pem").write_bytes(
    _private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
)
os.environ["JWT_PRIVATE_KEY_PATH"] = str(_keys_dir / "private.pem")
os.environ["JWT_PUBLIC_KEY_PATH"] = str(_keys_dir / "public.pem")
os.environ["DEBUG"] = "false"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from vaxsync.auth.jwt import create_access_token  # noqa: E402
from vaxsync.auth.rbac import UserRole  # noqa: E402
from vaxsync.database import Base, get_db  # noqa: E402
from vaxsync.main import app  # noqa: E402
from vaxsync.models.barangay import Barangay  # noqa: E402
from vaxsync.models.inventory import BarangayVaccineInventory  # noqa: E402
from vaxsync.models.vaccine import Vaccine  # noqa: E402

# ── Test engine (async SQLite) ───────────────────────
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
test_session_factory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


# SQLite has no SELECT ... FOR UPDATE; take the database write lock when
# the transaction begins so concurrent writers queue instead of failing.
@event.listens_for(test_engine.sync_engine, "connect")
def _sqlite_connect(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(test_engine.sync_engine, "begin")
def _sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN IMMEDIATE")


@pytest_asyncio.fixture(autouse=True)
async def setup_database():
    """Create and drop the tables around every test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a test DB session."""
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client bound to the test DB."""

    async def _get_test_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_test_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Auth ──────────────────────────────────────────────


def auth_headers(role: UserRole = UserRole.HEAD_NURSE, barangay_id=None) -> dict:
    token = create_access_token(uuid4(), role.value, barangay_id=barangay_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def nurse_headers() -> dict:
    """Head Nurse: full access to every barangay."""
    return auth_headers(UserRole.HEAD_NURSE)


@pytest.fixture
def headers_for():
    return auth_headers


# ── Seed data ─────────────────────────────────────────


@pytest_asyncio.fixture
async def barangay(db_session: AsyncSession) -> Barangay:
    obj = Barangay(id=uuid4(), name="Barangay San Isidro", municipality="Lucena")
    db_session.add(obj)
    await db_session.commit()
    db_session.expunge(obj)
    return obj


@pytest_asyncio.fixture
async def other_barangay(db_session: AsyncSession) -> Barangay:
    obj = Barangay(id=uuid4(), name="Barangay Ibabang Dupay", municipality="Lucena")
    db_session.add(obj)
    await db_session.commit()
    db_session.expunge(obj)
    return obj


@pytest_asyncio.fixture
async def vaccine(db_session: AsyncSession) -> Vaccine:
    obj = Vaccine(id=uuid4(), name="Pentavalent", doses_per_vial=10)
    db_session.add(obj)
    await db_session.commit()
    db_session.expunge(obj)
    return obj


@pytest.fixture
def make_lot(db_session: AsyncSession):
    """Factory for inventory lots of the seeded pair or any other."""

    async def _make(
        barangay_id,
        vaccine_id,
        on_hand: int,
        *,
        expiry_date: date | None = None,
        received_days_ago: int = 0,
        reserved: int = 0,
        batch_number: str | None = None,
    ) -> BarangayVaccineInventory:
        lot = BarangayVaccineInventory(
            id=uuid4(),
            barangay_id=barangay_id,
            vaccine_id=vaccine_id,
            quantity_on_hand=on_hand,
            quantity_reserved=reserved,
            expiry_date=expiry_date,
            received_date=datetime.now(timezone.utc) - timedelta(days=received_days_ago),
            batch_number=batch_number,
        )
        db_session.add(lot)
        await db_session.commit()
        db_session.expunge(lot)
        return lot

    return _make


@pytest.fixture
def fetch_lot(db_session: AsyncSession):
    """Re-read a lot's committed state."""

    async def _fetch(lot_id) -> BarangayVaccineInventory:
        return await db_session.get(
            BarangayVaccineInventory, lot_id, populate_existing=True
        )

    return _fetch


@pytest.fixture
def session_factory():
    """Independent sessions, for tests that need more than one connection."""
    return test_session_factory
