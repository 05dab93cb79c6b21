from __future__ import annotations

import os
import tempfile
from pathlib import Path

_TEST_DIR = Path(tempfile.mkdtemp(prefix="sims-tests-"))

os.environ["SIMS_DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR / 'sims-test.db'}"
os.environ["SIMS_ENVIRONMENT"] = "development"
os.environ["SIMS_SECRET_KEY"] = "test-secret-key"
os.environ["SIMS_SCHEDULER_ENABLED"] = "false"
os.environ["SIMS_EXTERNAL_API_KEY"] = "partner-key"
os.environ["SIMS_ORG_PREFIX"] = "BCC"
os.environ.pop("SIMS_REPAIRS_SYSTEM_URL", None)
os.environ.pop("SIMS_BOOTSTRAP_ADMIN_PASSWORD", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import text  # noqa: E402

from sims.core.permissions import ADMIN, ASSET_ADDER, HEAD_ADMIN, STOCK_TAKER  # noqa: E402
from sims.core.security import PasswordHasher  # noqa: E402
from sims.db.base import Base  # noqa: E402
from sims.db.session import engine, get_session  # noqa: E402
from sims.main import app  # noqa: E402
from sims.models.user import User  # noqa: E402

PASSWORD = "Sup3rSecret!"

# username, stored name, stored role
ACCOUNTS = {
    HEAD_ADMIN: ("head", "Harriet Head", HEAD_ADMIN),
    ADMIN: ("office", "Olivia Office", ADMIN),
    STOCK_TAKER: ("stock", "Sam Stock", STOCK_TAKER),
    ASSET_ADDER: ("adder", "Ada Adder", ASSET_ADDER),
}


async def drop_table(name: str) -> None:
    async with engine.begin() as conn:
        await conn.execute(text(f"DROP TABLE IF EXISTS {name}"))


@pytest.fixture(autouse=True)
async def reset_database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest.fixture
async def accounts(reset_database) -> dict[str, User]:
    hashed = PasswordHasher.hash(PASSWORD)
    created: dict[str, User] = {}
    async with get_session() as session:
        for role, (username, name, stored_role) in ACCOUNTS.items():
            user = User(username=username, password_hash=hashed, name=name, role=stored_role, initials=name[:1])
            session.add(user)
            created[role] = user
        # Stored with a stale name and role on purpose.
        legacy_admin = User(username="admin", password_hash=hashed, name="Old Admin", role="Admin", initials=None)
        session.add(legacy_admin)
        created["admin"] = legacy_admin
        await session.commit()
    return created


@pytest.fixture
def client(accounts) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login(client):
    def _login(role: str = HEAD_ADMIN, password: str = PASSWORD):
        username = "admin" if role == "admin" else ACCOUNTS[role][0]
        response = client.post("/api/auth/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return response

    return _login
