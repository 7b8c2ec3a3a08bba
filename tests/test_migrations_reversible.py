import asyncio
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from loanflow.config import settings
from loanflow.database import engine
from loanflow.models import Base


ROOT = Path(__file__).resolve().parents[1]


def _alembic_config() -> Config:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    # env.py swaps the async DSN for the sync driver.
    return cfg


def _drop_metadata_tables() -> None:
    async def _drop() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    asyncio.run(_drop())


def _table_names() -> set[str]:
    sync_engine = create_engine(settings.sync_database_url)
    try:
        return set(inspect(sync_engine).get_table_names())
    finally:
        sync_engine.dispose()


def test_migrations_are_reversible():
    """Smoke-test: upgrade head -> downgrade base -> upgrade head."""

    _drop_metadata_tables()
    cfg = _alembic_config()

    command.upgrade(cfg, "head")
    assert set(Base.metadata.tables) <= _table_names()

    command.downgrade(cfg, "base")
    assert not set(Base.metadata.tables) & _table_names()

    command.upgrade(cfg, "head")
    assert set(Base.metadata.tables) <= _table_names()

    command.downgrade(cfg, "base")
