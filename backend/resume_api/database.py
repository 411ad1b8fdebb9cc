from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from .config import get_settings

settings = get_settings()

# Configure engine arguments based on database type
# Supabase/PostgreSQL with PgBouncer needs statement_cache_size=0
# SQLite doesn't support these parameters
connect_args = {}
# SQLite opens a connection per session
engine_kwargs = {"poolclass": NullPool}
if "postgresql" in settings.database_url:
    connect_args = {
        "statement_cache_size": 0,
        "prepared_statement_cache_size": 0,
    }
    engine_kwargs = {
        "pool_recycle": 300,  # Recycle connections every 5 minutes
        "pool_size": 10,
        "max_overflow": 20,
    }

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    connect_args=connect_args,
    pool_pre_ping=True,  # Verify connections before use
    **engine_kwargs,
)
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    # Import models so their tables are registered on Base.metadata
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
