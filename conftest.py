import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Optional overrides for local test runs (log level, pricing constants, ...)
env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

# Tests run on SQLite; the app-level engine is never used for queries
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from libs.common.config import get_settings  # noqa: E402

# Clear cached settings to reload with new env vars
get_settings.cache_clear()

from libs.auth.dependencies import get_current_user  # noqa: E402
from libs.db.base import Base  # noqa: E402
from libs.db.session import get_async_db  # noqa: E402
from services.store_service import models as _store_models  # noqa: E402,F401
from services.store_service.app.main import app  # noqa: E402
from tests.factories import make_user  # noqa: E402


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """
    Fresh file-backed SQLite database per test.

    A file (not :memory:) so that several connections can see the same data,
    which the concurrent reservation tests rely on.
    """
    db_path = tmp_path / "store.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        future=True,
        connect_args={"timeout": 15},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch) -> list[dict]:
    """
    Capture order confirmation emails instead of talking to SMTP.
    """
    sent: list[dict] = []

    async def _capture(**kwargs):
        sent.append(kwargs)
        return True

    monkeypatch.setattr(
        "services.store_service.services.checkout.send_store_order_confirmation_email",
        _capture,
    )
    return sent


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to the store app with DB and auth overridden.

    Requests run as the default customer; use ``override_auth`` to switch.
    """
    customer = make_user()

    app.dependency_overrides[get_async_db] = lambda: db_session
    app.dependency_overrides[get_current_user] = lambda: customer

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
