"""
Database configuration and session management.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from ppewatch.config import settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True
)

# Create async session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def seed_ppe_catalogue(session: AsyncSession):
    """Insert any missing catalogue PPE items."""
    from ppewatch.analytics.ppe_fields import PPE_FIELDS
    from ppewatch.models.ppe_item import PPEItem
    
    result = await session.execute(select(PPEItem.name))
    existing = {row[0] for row in result.all()}
    
    for field in PPE_FIELDS:
        if field.display_name not in existing:
            session.add(PPEItem(name=field.display_name, description=field.description))


async def init_db():
    """Initialize database, create all tables and seed the PPE catalogue."""
    # Import models to register them with Base
    from ppewatch.models import team, ppe_item, location, compliance
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    async with async_session_maker() as session:
        await seed_ppe_catalogue(session)
        await session.commit()


async def get_db() -> AsyncSession:
    """Dependency to get database session."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
