import asyncio
import os
import tempfile
from pathlib import Path

import pytest

# Must be set before loanflow is imported: settings and the engine are module-level.
_DEFAULT_TEST_DB = Path(tempfile.gettempdir()) / f"loanflow-test-{os.getpid()}.db"
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{_DEFAULT_TEST_DB}")
os.environ["CELERY_ENABLED"] = "0"

from loanflow.database import engine  # noqa: E402
from loanflow.models import Base  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _fresh_schema():
    """Recreate all tables so every test starts from an empty database."""

    async def _reset() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_reset())
    yield


def pytest_sessionfinish(session, exitstatus):
    if _DEFAULT_TEST_DB.exists():
        _DEFAULT_TEST_DB.unlink()
