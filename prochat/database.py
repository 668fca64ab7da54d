import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .errors import StoreUnavailable
from .models import Base

logger = logging.getLogger(__name__)


class Database:
    """
    Store handle owning the async engine and its session factory.

    Built once per application and passed to every store call; nothing in the
    package keeps a module-level engine.
    """

    def __init__(self, url: str, timeout: float = 5.0, echo: bool = False):
        self.url = url
        self.timeout = timeout
        connect_args = {'timeout': timeout}
        engine_kwargs = {}
        if url.startswith('postgresql'):
            connect_args['command_timeout'] = timeout
            engine_kwargs['pool_timeout'] = timeout
        self.engine = create_async_engine(
            url,
            future=True,
            echo=echo,
            connect_args=connect_args,
            **engine_kwargs,
        )
        self.session_factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session; backend failures other than constraint violations become StoreUnavailable."""
        try:
            async with self.session_factory() as session:
                yield session
        except IntegrityError:
            raise
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            logger.error({'msg': 'store_error', 'error_type': type(e).__name__, 'error': str(e)})
            raise StoreUnavailable() from e

    async def create_all(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self):
        await self.engine.dispose()
