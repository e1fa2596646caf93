from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from wcag_audit.platform.config import settings
from wcag_audit.platform.db.base import Base


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create the async engine for ``database_url``.

    SQLite gets a NullPool so a connection is never reused across event loops
    (the test client and background tasks may run on different loops).
    """
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=False, future=True, poolclass=NullPool)

    return create_async_engine(
        database_url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        pool_recycle=1800,
        pool_size=20,
        max_overflow=30,  # (burst capacity)
        pool_timeout=30,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind, expire_on_commit=False, autoflush=False, autocommit=False)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = build_session_factory(engine)


async def get_db():
    async with SessionLocal() as session:
        yield session


async def init_models(bind: AsyncEngine = engine):
    """Create all tables registered on ``Base``."""
    # Register models on the metadata
    from wcag_audit.features.analysis.models.analysis import Analysis  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
