from __future__ import annotations

import logging

from rewear.adapters.notifications import AbstractNotificationSink
from rewear.domain import commands, events, exceptions
from rewear.domain.base import BaseEnums
from rewear.domain.delivery import Delivery
from rewear.domain.donation import Donation
from rewear.domain.projection import StatusLabel, resolve_label
from rewear.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)

RELATED_TYPE = "donation"
DEFAULT_CANCEL_REASON = "사용자 요청으로 취소됨"
DONOR_CANCELLABLE_LABELS = (StatusLabel.PENDING_APPROVAL, StatusLabel.PENDING_MATCH)


async def _get_donation(uow: AbstractUnitOfWork, donation_id: str) -> Donation:
    donation = await uow.donations.filter(id__eq=donation_id).get(is_update=True)
    if donation is None:
        raise exceptions.NotFound("기부 정보를 찾을 수 없습니다.")
    return donation


async def _get_delivery(uow: AbstractUnitOfWork, delivery_id: str) -> Delivery:
    delivery = await uow.deliveries.filter(id__eq=delivery_id).get(is_update=True)
    if delivery is None:
        raise exceptions.NotFound("배송 정보를 찾을 수 없습니다.")
    return delivery


# Command Handlers
async def create_donation(cmd: commands.CreateDonation, uow: AbstractUnitOfWork) -> str:
    async with uow:
        organization = None
        if cmd.match_type == Donation.MatchType.DIRECT and cmd.organization_id:
            organization = await uow.organizations.get(cmd.organization_id)
        donation = Donation.create(cmd, organization=organization)
        uow.donations.add(donation)
        await uow.commit()
        return donation.id


async def approve_donation(cmd: commands.ApproveDonation, uow: AbstractUnitOfWork):
    async with uow:
        donation = await _get_donation(uow, cmd.donation_id)
        donation.approve_by_admin()
        await uow.commit()


async def reject_donation(cmd: commands.RejectDonation, uow: AbstractUnitOfWork):
    async with uow:
        donation = await _get_donation(uow, cmd.donation_id)
        donation.reject_by_admin(cmd.reason)
        await uow.commit()


async def reset_donation_to_pending(cmd: commands.ResetDonationToPending, uow: AbstractUnitOfWork):
    async with uow:
        donation = await _get_donation(uow, cmd.donation_id)
        donation.reset_to_pending()
        await uow.commit()


async def assign_organization(cmd: commands.AssignOrganization, uow: AbstractUnitOfWork):
    async with uow:
        donation = await _get_donation(uow, cmd.donation_id)
        organization = await uow.organizations.get(cmd.organization_id)
        donation.assign_organization(organization, carrier=cmd.carrier, tracking_number=cmd.tracking_number)
        await uow.commit()


async def select_donation(cmd: commands.SelectDonation, uow: AbstractUnitOfWork):
    async with uow:
        donation = await _get_donation(uow, cmd.donation_id)
        organization = await uow.organizations.get(cmd.organization_id)
        donation.select_by_organization(organization)
        await uow.commit()


async def approve_donation_by_organization(cmd: commands.ApproveDonationByOrganization, uow: AbstractUnitOfWork):
    async with uow:
        donation = await _get_donation(uow, cmd.donation_id)
        organization = await uow.organizations.get(cmd.organization_id)
        donation.approve_by_organization(organization, carrier=cmd.carrier, tracking_number=cmd.tracking_number)
        await uow.commit()


async def reject_donation_by_organization(cmd: commands.RejectDonationByOrganization, uow: AbstractUnitOfWork):
    async with uow:
        donation = await _get_donation(uow, cmd.donation_id)
        organization = await uow.organizations.get(cmd.organization_id)
        donation.reject_by_organization(organization)
        await uow.commit()


async def cancel_donation(cmd: commands.CancelDonation, uow: AbstractUnitOfWork):
    """
    Donor side cancellation. Only the donor may cancel, and only while
    the donation still waits for approval or for a match.
    """
    async with uow:
        donation = await _get_donation(uow, cmd.donation_id)
        if donation.donor_id != cmd.donor_id:
            raise exceptions.InvalidState("본인의 기부만 취소할 수 있습니다.")
        if resolve_label(donation, donation.delivery) not in DONOR_CANCELLABLE_LABELS:
            raise exceptions.InvalidState("승인대기 또는 매칭대기 상태의 기부만 취소할 수 있습니다.")
        donation.cancel(cmd.reason or DEFAULT_CANCEL_REASON)
        await uow.commit()


async def create_delivery(cmd: commands.CreateDelivery, uow: AbstractUnitOfWork) -> str:
    async with uow:
        donation = await _get_donation(uow, cmd.donation_id)
        delivery = Delivery.create_from_shipment(donation=donation, shipment=cmd.shipment)
        uow.deliveries.add(delivery)
        await uow.commit()
        return delivery.id


async def update_delivery_status(cmd: commands.UpdateDeliveryStatus, uow: AbstractUnitOfWork):
    async with uow:
        delivery = await _get_delivery(uow, cmd.delivery_id)
        delivery.update_status(cmd.status)
        await uow.commit()


async def update_delivery_info(cmd: commands.UpdateDeliveryInfo, uow: AbstractUnitOfWork):
    async with uow:
        delivery = await _get_delivery(uow, cmd.delivery_id)
        delivery.update_fields(
            carrier=cmd.carrier,
            tracking_number=cmd.tracking_number,
            receiver_name=cmd.receiver_name,
            receiver_phone=cmd.receiver_phone,
            receiver_address=cmd.receiver_address,
            receiver_detail_address=cmd.receiver_detail_address,
            receiver_postal_code=cmd.receiver_postal_code,
        )
        await uow.commit()


# Event Handlers
async def notify_donor_on_approval(event: events.DonationApproved, sink: AbstractNotificationSink):
    await sink.notify(
        event.donor_id,
        BaseEnums.NotificationType.DONATION_APPROVED.value,
        "기부 승인 완료",
        "귀하의 기부 신청이 승인되었습니다.",
        event.donation_id,
        RELATED_TYPE,
    )


async def notify_organization_on_approval(event: events.DonationApproved, sink: AbstractNotificationSink):
    if not event.organization_user_id:
        return
    await sink.notify(
        event.organization_user_id,
        BaseEnums.NotificationType.DONATION_MATCHED.value,
        "기부 매칭 승인",
        f"관리자가 '{event.item_category}' 기부를 승인하여 귀하의 기관에 할당되었습니다.",
        event.donation_id,
        RELATED_TYPE,
    )


async def notify_donor_on_rejection(event: events.DonationRejected, sink: AbstractNotificationSink):
    await sink.notify(
        event.donor_id,
        BaseEnums.NotificationType.DONATION_REJECTED.value,
        "기부 반려",
        f"귀하의 기부 신청이 반려되었습니다. 사유: {event.reason}",
        event.donation_id,
        RELATED_TYPE,
    )


async def notify_donor_on_match(event: events.DonationMatched, sink: AbstractNotificationSink):
    await sink.notify(
        event.donor_id,
        BaseEnums.NotificationType.DONATION_MATCHED.value,
        "기부 매칭 완료",
        f"'{event.organization_name}' 기관이 귀하의 기부 물품을 선택했습니다.",
        event.donation_id,
        RELATED_TYPE,
    )


async def notify_donor_on_completion(event: events.DonationCompleted, sink: AbstractNotificationSink):
    await sink.notify(
        event.donor_id,
        BaseEnums.NotificationType.DONATION_APPROVED.value,
        "기부 완료",
        f"'{event.organization_name}' 기관이 기부를 최종 승인하여 완료되었습니다.",
        event.donation_id,
        RELATED_TYPE,
    )


async def notify_organization_on_completion(event: events.DonationCompleted, sink: AbstractNotificationSink):
    if not event.organization_user_id:
        return
    await sink.notify(
        event.organization_user_id,
        BaseEnums.NotificationType.DONATION_APPROVED.value,
        "기부 승인 완료",
        "귀하의 기관이 기부를 승인하여 완료되었습니다.",
        event.donation_id,
        RELATED_TYPE,
    )


async def notify_donor_on_organization_rejection(
    event: events.DonationRejectedByOrganization, sink: AbstractNotificationSink
):
    await sink.notify(
        event.donor_id,
        BaseEnums.NotificationType.DONATION_REJECTED.value,
        "기부 반려",
        f"'{event.organization_name}' 기관이 기부를 반려했습니다.",
        event.donation_id,
        RELATED_TYPE,
    )


async def notify_donor_on_cancellation(event: events.DonationCancelled, sink: AbstractNotificationSink):
    await sink.notify(
        event.donor_id,
        BaseEnums.NotificationType.DONATION_REJECTED.value,
        "기부 취소",
        f"기부가 취소되었습니다. 사유: {event.reason}",
        event.donation_id,
        RELATED_TYPE,
    )


EVENT_HANDLERS = {
    events.DonationApproved: [notify_donor_on_approval, notify_organization_on_approval],
    events.DonationRejected: [notify_donor_on_rejection],
    events.DonationMatched: [notify_donor_on_match],
    events.DonationCompleted: [notify_donor_on_completion, notify_organization_on_completion],
    events.DonationRejectedByOrganization: [notify_donor_on_organization_rejection],
    events.DonationCancelled: [notify_donor_on_cancellation],
}

COMMAND_HANDLERS = {
    commands.CreateDonation: create_donation,
    commands.ApproveDonation: approve_donation,
    commands.RejectDonation: reject_donation,
    commands.ResetDonationToPending: reset_donation_to_pending,
    commands.AssignOrganization: assign_organization,
    commands.SelectDonation: select_donation,
    commands.ApproveDonationByOrganization: approve_donation_by_organization,
    commands.RejectDonationByOrganization: reject_donation_by_organization,
    commands.CancelDonation: cancel_donation,
    commands.CreateDelivery: create_delivery,
    commands.UpdateDeliveryStatus: update_delivery_status,
    commands.UpdateDeliveryInfo: update_delivery_info,
}
