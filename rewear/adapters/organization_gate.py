from __future__ import annotations

from abc import ABC, abstractmethod

from sqlalchemy.ext.asyncio import AsyncSession

from rewear.adapters.repository import AsyncSqlAlchemyViewRepository
from rewear.domain import exceptions
from rewear.domain.organization import Organization


class AbstractOrganizationGate(ABC):
    """
    Read-only access to organizations. Approval of organizations
    happens elsewhere.
    """

    @abstractmethod
    async def get(self, organization_id: str) -> Organization:
        raise NotImplementedError

    async def is_approved(self, organization_id: str) -> bool:
        try:
            organization = await self.get(organization_id)
        except exceptions.NotFound:
            return False
        return organization.is_approved

    @abstractmethod
    async def get_approved_organizations(self) -> list[Organization]:
        raise NotImplementedError


class SqlAlchemyOrganizationGate(AbstractOrganizationGate):
    def __init__(self, session: AsyncSession):
        self.repository: AsyncSqlAlchemyViewRepository[Organization] = AsyncSqlAlchemyViewRepository(
            model=Organization, session=session
        )

    async def get(self, organization_id: str) -> Organization:
        organization = await self.repository.filter(id__eq=organization_id).get()
        if organization is None:
            raise exceptions.NotFound("기관을 찾을 수 없습니다.")
        return organization

    async def get_approved_organizations(self) -> list[Organization]:
        return list(
            await self.repository.filter(status__eq=Organization.Status.APPROVED.value)
            .order_by(Organization.name)  # type: ignore
            .list()
        )
