import contextlib
from collections.abc import AsyncIterator

from alembic import command, config
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from guestlist.config.settings import settings


def create_engine(url: str):
    url = str(url)
    use_echo = settings.LOG_DB
    connect_args = {}
    engine_kwargs = {}
    if "sqlite" in url:
        connect_args = {"timeout": 15}
        if url.endswith("://") or ":memory:" in url:
            # every connection must see the same in-memory database
            connect_args["check_same_thread"] = False
            engine_kwargs["poolclass"] = StaticPool
    return create_async_engine(
        url,
        echo=use_echo,
        connect_args=connect_args,
        **engine_kwargs,
    )


engine = create_engine(settings.database_url)


def run_upgrade(connection, cfg):
    cfg.attributes["connection"] = connection
    command.upgrade(cfg, "head")


async def upgrade_db():
    async with engine.begin() as conn:
        await conn.run_sync(run_upgrade, config.Config("alembic.ini"))


async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


@contextlib.asynccontextmanager
async def async_session_manager(
    auto_commit=True,
    session_overwrite: AsyncSession | None = None,
    session_maker: async_sessionmaker | None = None,
) -> AsyncIterator[AsyncSession]:
    if session_overwrite:
        yield session_overwrite
    else:
        async with (session_maker or async_session_maker)() as session:
            try:
                yield session
            except Exception as e:
                await session.rollback()
                raise e
            else:
                if auto_commit:
                    await session.commit()
