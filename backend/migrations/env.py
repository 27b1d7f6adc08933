"""
Session Issuer Alembic Migration Environment

Configures Alembic to discover the SQLAlchemy metadata defined in
``issuer.db.models`` and run migrations in either offline or online mode.
"""

import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

# ---------------------------------------------------------------------------
# Ensure backend/ is on sys.path so that ``issuer.*`` imports resolve
# regardless of how ``alembic`` is invoked.
# ---------------------------------------------------------------------------
_backend_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

from issuer.db.models import Base  # noqa: E402

config = context.config

# Interpret the config file for Python logging (unless we are running
# programmatically without an .ini file).
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# The target metadata for ``autogenerate`` support.
target_metadata = Base.metadata

# Allow the connection URL to be overridden by an environment variable;
# DATABASE_URL is the same override the issuer itself reads.
_env_url = os.environ.get("SQLALCHEMY_URL") or os.environ.get("DATABASE_URL")
if _env_url:
    config.set_main_option("sqlalchemy.url", _env_url)


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL without a DBAPI."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
