from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from rewear.adapters import donation_orm
from rewear.config import PERSISTENT_DB, STAGE

engine: AsyncEngine | None = None
async_transactional_session_factory: sessionmaker | None = None

if STAGE not in ("testing", "ci-testing"):
    engine = create_async_engine(PERSISTENT_DB.get_uri(), pool_pre_ping=True, pool_size=10, max_overflow=20)
    async_transactional_session_factory = sessionmaker(
        engine, expire_on_commit=False, autoflush=False, class_=AsyncSession
    )
    donation_orm.start_mappers()
