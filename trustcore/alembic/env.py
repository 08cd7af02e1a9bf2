import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from trustcore.core.config import settings
from trustcore.core.db import Base

# Register every table on Base.metadata.
from trustcore.modules.users import models as _users  # noqa: F401
from trustcore.modules.blocks import models as _blocks  # noqa: F401
from trustcore.modules.privacy import models as _privacy  # noqa: F401
from trustcore.modules.content import models as _content  # noqa: F401
from trustcore.modules.moderation import models as _moderation  # noqa: F401
from trustcore.modules.bans import models as _bans  # noqa: F401
from trustcore.modules.reports import models as _reports  # noqa: F401
from trustcore.modules.admin import models as _admin  # noqa: F401

config = context.config
config.set_main_option("sqlalchemy.url", settings.async_database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
