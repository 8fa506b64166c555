import asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
import logging

from app.core.config import settings
from app.core.exceptions import ConfigurationException
from .unified_models import Base

logger = logging.getLogger(__name__)

async def _test_connection(engine):
    """Helper function to test database connection with retries"""
    max_retries = 3
    retry_delays = [1, 2, 4]

    for attempt in range(max_retries):
        try:
            async with engine.begin() as conn:
                result = await asyncio.wait_for(conn.execute(text("SELECT 1")), timeout=5)
                logger.info(f"Connection test successful on attempt {attempt + 1}")
                return result.scalar()
        except Exception as e:
            logger.warning(f"Connection test attempt {attempt + 1} failed: {e}")

            if attempt < max_retries - 1:
                await asyncio.sleep(retry_delays[attempt])
            else:
                logger.error("All connection test attempts failed")
                raise

def _async_url(url: str) -> str:
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url

# Database instances
async_engine = None
SessionLocal = None

async def init_database():
    """Initialize the async engine and session factory"""
    global async_engine, SessionLocal

    # Single connection pool per process
    if async_engine is not None and SessionLocal is not None:
        logger.info("Database already initialized - reusing existing connection pool")
        return

    if not settings.DATABASE_URL:
        logger.warning("WARNING: Database URL not configured. Skipping database initialization.")
        return

    logger.info("Initializing database connections...")
    async_url = _async_url(settings.DATABASE_URL)

    engine_kwargs = {"pool_pre_ping": True, "echo": False}
    if async_url.startswith("postgresql+asyncpg://"):
        engine_kwargs.update(
            pool_recycle=1800,           # 30 minutes recycle time
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_timeout=30,
            connect_args={
                "command_timeout": 60,
                "server_settings": {
                    "application_name": "collab_analytics_backend",
                    "statement_timeout": settings.DATABASE_STATEMENT_TIMEOUT
                }
            }
        )

    async_engine = create_async_engine(async_url, **engine_kwargs)
    SessionLocal = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    try:
        await _test_connection(async_engine)
        logger.info("SUCCESS: Database initialization completed")
    except Exception as e:
        logger.error(f"ERROR: Database initialization failed: {e}")
        await close_database()
        raise

async def close_database():
    """Close database connections and reset global state"""
    global async_engine, SessionLocal

    if async_engine:
        await async_engine.dispose()
        logger.info("Database connection pool closed")

    # Reset global variables to allow clean re-initialization
    async_engine = None
    SessionLocal = None

async def create_tables():
    """Create all database tables"""
    if not async_engine:
        logger.warning("WARNING:  Database not initialized. Skipping table creation.")
        return

    try:
        async with async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("SUCCESS: Database tables created successfully")
    except Exception as e:
        logger.error(f"ERROR: Failed to create tables: {str(e)}")
        raise

def get_session() -> AsyncSession:
    """Get database session context manager"""
    if not SessionLocal:
        raise ConfigurationException("Database not initialized")
    return SessionLocal()

# Repository dependency for FastAPI
def get_entity_repository():
    """Entity repository bound to the process-wide session factory"""
    # Import here to avoid circular imports
    from app.repositories.sqlalchemy_repository import SqlAlchemyEntityRepository

    if not SessionLocal:
        logger.error("DATABASE: Database not initialized - set DATABASE_URL")
        raise ConfigurationException("Database not initialized")
    return SqlAlchemyEntityRepository(get_session)
