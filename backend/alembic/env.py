import sys
from pathlib import Path
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from fintrack.core.config import settings
from fintrack.db.base import Base
# Imported for their side effect of registering tables on Base.metadata.
from fintrack.models import user, budget, category, account, transaction, audit_log  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
DB_URL = settings.database_url or config.get_main_option("sqlalchemy.url")


def _configure(**kw):
    # SQLite cannot ALTER most constraints in place; batch mode rebuilds the table.
    batch = DB_URL.startswith("sqlite")
    context.configure(target_metadata=target_metadata, compare_type=True, render_as_batch=batch, **kw)


def run_migrations_offline():
    _configure(url=DB_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = DB_URL
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
