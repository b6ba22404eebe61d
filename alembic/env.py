import sys
from logging.config import fileConfig
from pathlib import Path

# `alembic` runs from the repo root without installing the package
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from alembic import context
from sqlalchemy import create_engine, pool

from app.core.config import settings
from app.core.database import Base

import app.models  # noqa: F401: populates Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Migrations use the sync driver; the API itself runs on asyncpg.
DATABASE_URL = settings.DATABASE_URL_SYNC


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL for esg_responses without connecting."""
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(DATABASE_URL, poolclass=pool.NullPool)
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
