from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from wildpack.core.config import settings
from wildpack.core.database import Base

import wildpack.models  # noqa: F401  populates Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# `alembic -x db_url=sqlite:///local.db upgrade head` migrates a scratch store
db_url = context.get_x_argument(as_dictionary=True).get("db_url", settings.DATABASE_URL_SYNC)
config.set_main_option("sqlalchemy.url", db_url)

target_metadata = Base.metadata


def _configure_options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        # SQLite cannot ALTER constraints in place
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    context.configure(
        url=db_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(db_url),
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
        context.configure(connection=connection, **_configure_options(db_url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
