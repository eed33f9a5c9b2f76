from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from dust_gold.config import get_settings

settings = get_settings()


def _engine_options(database_url: str) -> dict:
    """Engine keyword arguments for the configured driver."""
    options = {"echo": settings.debug}  # Log SQL queries in debug mode

    if database_url.startswith("postgresql+asyncpg"):
        # Small pool, the hosted Postgres sits behind pgbouncer
        options.update(
            pool_pre_ping=True,   # Check connection health before using
            pool_size=3,
            max_overflow=5,
            pool_timeout=10,      # Fail fast if can't get connection
            pool_recycle=300,     # Recycle connections every 5 min
            connect_args={
                "statement_cache_size": 0,           # Required for pgbouncer
                "prepared_statement_cache_size": 0,  # Also required for pgbouncer
                "command_timeout": 30,               # Query timeout
            },
        )
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db():
    """
    Dependency that provides a database session.

    Usage in FastAPI:
        @app.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
