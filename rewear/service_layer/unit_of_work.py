from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from rewear import db
from rewear.adapters.organization_gate import AbstractOrganizationGate, SqlAlchemyOrganizationGate
from rewear.adapters.repository import AsyncSqlAlchemyRepository
from rewear.domain import exceptions
from rewear.domain.delivery import Delivery
from rewear.domain.donation import Donation

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    donations: AsyncSqlAlchemyRepository[Donation]
    deliveries: AsyncSqlAlchemyRepository[Delivery]
    organizations: AbstractOrganizationGate

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self._commit()

    def collect_new_events(self):
        # only donations raise events
        yield from self.donations.collect_events()

    @abstractmethod
    async def _commit(self):
        raise NotImplementedError

    @abstractmethod
    async def rollback(self):
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    One session, one transaction per unit of work.
    """

    def __init__(self, session_factory: sessionmaker | None = None):
        self.session_factory = session_factory or db.async_transactional_session_factory
        if self.session_factory is None:
            raise RuntimeError("No session factory is configured for this stage")

    async def __aenter__(self):
        self.session: AsyncSession = self.session_factory()
        self.donations = AsyncSqlAlchemyRepository(model=Donation, session=self.session)
        self.deliveries = AsyncSqlAlchemyRepository(model=Delivery, session=self.session)
        self.organizations = SqlAlchemyOrganizationGate(self.session)
        return await super().__aenter__()

    async def __aexit__(self, *args):
        try:
            await super().__aexit__(*args)
        finally:
            await self.session.close()

    async def _commit(self):
        try:
            await self.session.commit()
        except StaleDataError as e:
            await self.session.rollback()
            logger.warning("concurrent update detected: %s", e)
            raise exceptions.ConcurrentUpdate
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("integrity error on commit: %s", e.orig)
            raise exceptions.AlreadyExists("이미 등록된 정보입니다.")

    async def rollback(self):
        await self.session.rollback()
