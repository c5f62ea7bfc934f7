"""Alembic environment.

Runs migrations against a synchronous driver derived from
MOODCHAT_DATABASE_URL (``+aiosqlite`` / ``+asyncpg`` are swapped for
their blocking counterparts).
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from moodchat.db import Base
from moodchat.settings import get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata

_SYNC_DRIVERS = {
    "+aiosqlite": "",
    "+asyncpg": "+psycopg2",
}


def _sync_url(url: str) -> str:
    for async_driver, sync_driver in _SYNC_DRIVERS.items():
        url = url.replace(async_driver, sync_driver)
    return url


config.set_main_option("sqlalchemy.url", _sync_url(get_settings().database_url))


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
