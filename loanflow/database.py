from __future__ import annotations

from collections.abc import AsyncGenerator
import os
import sys

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from loanflow.config import settings


_engine_kwargs: dict = {}

if settings.is_sqlite:
    _engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    _engine_kwargs["pool_pre_ping"] = True

# NOTE: FastAPI's sync TestClient runs requests on an AnyIO portal whose event
# loop differs from the one used by asyncio.run() in tests. Pooled driver
# connections must not be shared across loops, so pooling is off under pytest.
# PYTEST_CURRENT_TEST is only set while a test runs; during collection the
# module may already be imported, hence the sys.modules check.
if os.getenv("PYTEST_CURRENT_TEST") or ("pytest" in sys.modules):
    _engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(settings.database_url, **_engine_kwargs)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session
