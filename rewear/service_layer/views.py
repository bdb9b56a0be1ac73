"""
Read side. Every status here is projected at read time, nothing is cached.
"""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from rewear.adapters.repository import AsyncSqlAlchemyViewRepository
from rewear.domain import exceptions
from rewear.domain.delivery import Delivery
from rewear.domain.donation import Donation
from rewear.domain.organization import Organization
from rewear.domain.projection import StatusLabel, project
from rewear.service_layer.unit_of_work import SqlAlchemyUnitOfWork
from rewear.utils import time_util


class DonationStatusView(BaseModel):
    donation_id: str
    reference_code: str
    registered_at: str
    main_category: str
    match_type: str
    delivery_method: str
    label: StatusLabel
    explanation: str
    organization_name: str | None = None
    delivery_id: str | None = None
    carrier: str | None = None
    tracking_number: str | None = None

    @classmethod
    def from_donation(cls, donation: Donation) -> DonationStatusView:
        delivery = donation.delivery
        projected = project(donation, delivery)
        return cls(
            donation_id=donation.id,
            reference_code=f"REQ-{donation.id}",
            registered_at=time_util.gen_date_str(donation.create_dt),
            main_category=donation.item.main_category,
            match_type=donation.match_type,
            delivery_method=donation.delivery_method,
            label=projected.label,
            explanation=projected.explanation,
            organization_name=donation.organization_name,
            delivery_id=delivery.id if delivery is not None else None,
            carrier=delivery.carrier if delivery is not None else None,
            tracking_number=delivery.tracking_number if delivery is not None else None,
        )


class StatusBoard(BaseModel):
    approval_items: list[DonationStatusView]
    completed_donations: list[DonationStatusView]
    status_counts: dict[str, int]


class DeliveryView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    donation_id: str
    status: str
    carrier: str | None = None
    tracking_number: str | None = None
    sender_name: str | None = None
    sender_phone: str | None = None
    sender_address: str | None = None
    receiver_name: str | None = None
    receiver_phone: str | None = None
    receiver_address: str | None = None
    receiver_detail_address: str | None = None
    receiver_postal_code: str | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None


class DeliveryDetailView(DeliveryView):
    donation: DonationStatusView | None = None


class OrganizationView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    phone: str | None = None
    address: str | None = None


def _donations(uow: SqlAlchemyUnitOfWork) -> AsyncSqlAlchemyViewRepository[Donation]:
    return AsyncSqlAlchemyViewRepository(model=Donation, session=uow.session)


def _deliveries(uow: SqlAlchemyUnitOfWork) -> AsyncSqlAlchemyViewRepository[Delivery]:
    return AsyncSqlAlchemyViewRepository(model=Delivery, session=uow.session)


def _newest_first(repository: AsyncSqlAlchemyViewRepository):
    return repository.order_by(repository.model.create_dt.desc())  # type: ignore


def _delivery_view(delivery: Delivery, with_donation: bool = False) -> DeliveryView:
    view = DeliveryView.model_validate(delivery)
    if with_donation:
        return DeliveryDetailView(
            **view.model_dump(),
            donation=DonationStatusView.from_donation(delivery.donation) if delivery.donation else None,
        )
    return view


# Donations
async def donation_status(donation_id: str, uow: SqlAlchemyUnitOfWork) -> DonationStatusView:
    async with uow:
        donation = await _donations(uow).filter(id__eq=donation_id).get()
        if donation is None:
            raise exceptions.NotFound("기부 정보를 찾을 수 없습니다.")
        return DonationStatusView.from_donation(donation)


async def donations_by_donor(donor_id: str, uow: SqlAlchemyUnitOfWork) -> list[DonationStatusView]:
    async with uow:
        donations = await _newest_first(_donations(uow).filter(donor_id__eq=donor_id)).list()
        return [DonationStatusView.from_donation(d) for d in donations]


async def donations_by_status(status: str, uow: SqlAlchemyUnitOfWork) -> list[DonationStatusView]:
    async with uow:
        donations = await _newest_first(_donations(uow).filter(status__eq=status)).list()
        return [DonationStatusView.from_donation(d) for d in donations]


async def donations_matched_by_organization(
    organization_id: str, uow: SqlAlchemyUnitOfWork
) -> list[DonationStatusView]:
    async with uow:
        donations = await _newest_first(
            _donations(uow).filter(
                organization_id__eq=organization_id, status__eq=Donation.Status.IN_PROGRESS.value
            )
        ).list()
        return [DonationStatusView.from_donation(d) for d in donations]


async def all_donations(uow: SqlAlchemyUnitOfWork) -> list[DonationStatusView]:
    async with uow:
        donations = await _newest_first(_donations(uow)).list()
        return [DonationStatusView.from_donation(d) for d in donations]


async def donation_status_board(donor_id: str, uow: SqlAlchemyUnitOfWork) -> StatusBoard:
    """
    Donor dashboard: donations still in the workflow, finished ones,
    and how many donations sit under each status label.
    """
    views = await donations_by_donor(donor_id, uow)
    status_counts = {label.value: 0 for label in StatusLabel}
    for view in views:
        status_counts[view.label.value] += 1
    return StatusBoard(
        approval_items=[v for v in views if v.label != StatusLabel.COMPLETED],
        completed_donations=[v for v in views if v.label == StatusLabel.COMPLETED],
        status_counts=status_counts,
    )


# Organizations
async def approved_organizations(uow: SqlAlchemyUnitOfWork) -> list[OrganizationView]:
    async with uow:
        organizations: list[Organization] = await uow.organizations.get_approved_organizations()
        return [OrganizationView.model_validate(o) for o in organizations]


# Deliveries
async def delivery_by_donation(donation_id: str, uow: SqlAlchemyUnitOfWork) -> DeliveryView | None:
    async with uow:
        delivery = await _deliveries(uow).filter(donation_id__eq=donation_id).get()
        return _delivery_view(delivery) if delivery is not None else None


async def delivery_detail(delivery_id: str, uow: SqlAlchemyUnitOfWork, with_donation: bool = False) -> DeliveryView:
    async with uow:
        delivery = await _deliveries(uow).filter(id__eq=delivery_id).get()
        if delivery is None:
            raise exceptions.NotFound("배송 정보를 찾을 수 없습니다.")
        return _delivery_view(delivery, with_donation=with_donation)


async def deliveries_by_status(status: str, uow: SqlAlchemyUnitOfWork) -> list[DeliveryView]:
    async with uow:
        deliveries = await _newest_first(_deliveries(uow).filter(status__eq=status)).list()
        return [_delivery_view(d) for d in deliveries]


async def deliveries_by_donor(donor_id: str, uow: SqlAlchemyUnitOfWork) -> list[DeliveryView]:
    # deliveries of cancelled donations are left out
    async with uow:
        deliveries = await _newest_first(
            _deliveries(uow).filter(
                donation__has_donor_id__eq=donor_id,
                donation__has_status__not_eq=Donation.Status.CANCELLED.value,
            )
        ).list()
        return [_delivery_view(d) for d in deliveries]


async def all_deliveries(uow: SqlAlchemyUnitOfWork) -> list[DeliveryView]:
    async with uow:
        deliveries = await _newest_first(_deliveries(uow)).list()
        return [_delivery_view(d) for d in deliveries]
