"""Async database engine and session dependencies for the seed registry and message store"""
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from core.config import get_settings

settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
    pool_recycle=3600,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False
)

Base = declarative_base()


async def get_db():
    """
    Database session dependency for read operations (seed listing, newsletter listing).
    Does not commit.
    """
    async with AsyncSessionLocal() as session:
        yield session


async def get_db_transactional():
    """
    Database session dependency for write operations.

    The sync endpoint uses this session: captured newsletters and the seed's
    last_sync_at are committed together when the request succeeds and rolled
    back when it raises. A changed seed password is committed separately,
    before the IMAP session starts.
    """
    async with AsyncSessionLocal.begin() as session:
        yield session
