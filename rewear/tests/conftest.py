import os

os.environ.setdefault("STAGE", "testing")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import clear_mappers, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from rewear.adapters.donation_orm import metadata, start_mappers  # noqa: E402
from rewear.config import TEST_DB_URI  # noqa: E402
from rewear.domain.organization import Organization  # noqa: E402
from rewear.service_layer.messagebus import MessageBus  # noqa: E402
from rewear.service_layer.unit_of_work import SqlAlchemyUnitOfWork  # noqa: E402
from rewear.tests.fakes import FakeNotificationSink, make_organization  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def mappers():
    start_mappers()
    yield
    clear_mappers()


@pytest_asyncio.fixture(scope="function")
async def aio_engine():
    if TEST_DB_URI.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DB_URI, poolclass=StaticPool, connect_args={"check_same_thread": False}
        )
    else:
        engine = create_async_engine(TEST_DB_URI)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(aio_engine: AsyncEngine):
    _session_factory: sessionmaker = sessionmaker(
        aio_engine, expire_on_commit=False, autoflush=False, class_=AsyncSession
    )
    yield _session_factory


@pytest.fixture(scope="function")
def uow(session_factory: sessionmaker):
    return SqlAlchemyUnitOfWork(session_factory)


@pytest.fixture(scope="function")
def sink():
    return FakeNotificationSink()


@pytest.fixture(scope="function")
def bus(session_factory: sessionmaker, sink: FakeNotificationSink):
    return MessageBus(uow_factory=lambda: SqlAlchemyUnitOfWork(session_factory), sink=sink)


async def add_organization(session_factory: sessionmaker, **kwargs) -> Organization:
    organization = make_organization(**kwargs)
    async with session_factory() as session:
        session.add(organization)
        await session.commit()
    return organization


@pytest_asyncio.fixture(scope="function")
async def approved_organization(session_factory: sessionmaker):
    return await add_organization(session_factory)


@pytest_asyncio.fixture(scope="function")
async def another_organization(session_factory: sessionmaker):
    return await add_organization(session_factory)


@pytest_asyncio.fixture(scope="function")
async def pending_organization(session_factory: sessionmaker):
    return await add_organization(session_factory, status=Organization.Status.PENDING.value)
