"""Alembic environment for the jot_kv table. No ORM metadata: migrations are raw DDL."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine

from jotdb.config import settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def run_migrations_offline(url: str) -> None:
    """Emit SQL for the pending migrations without connecting."""
    context.configure(url=url, target_metadata=None, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online(url: str) -> None:
    engine = create_engine(url)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=None)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


# an explicit -x url=... or sqlalchemy.url in alembic.ini wins over DATABASE_URL
database_url = context.get_x_argument(as_dictionary=True).get("url") or config.get_main_option("sqlalchemy.url")
if not database_url:
    database_url = settings.migration_url()

if context.is_offline_mode():
    run_migrations_offline(database_url)
else:
    run_migrations_online(database_url)
