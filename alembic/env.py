from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context
import logging
import sys
from pathlib import Path

ROOT_PATH = Path(__file__).parent.parent
sys.path.append(str(ROOT_PATH))

from availability_calendar.models import Base  # noqa: E402

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata

SYNC_DRIVERS = {
    "sqlite+aiosqlite:": "sqlite:",
    "postgresql+asyncpg:": "postgresql+psycopg2:",
}


def get_url() -> str:
    from availability_calendar.config import settings

    db_url = settings.DATABASE_URL

    for async_prefix, sync_prefix in SYNC_DRIVERS.items():
        if db_url.startswith(async_prefix):
            logger.info(f"Converted URL for Alembic: {async_prefix} -> {sync_prefix}")
            return db_url.replace(async_prefix, sync_prefix, 1)

    return db_url


def run_migrations_offline() -> None:
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = get_url()

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
