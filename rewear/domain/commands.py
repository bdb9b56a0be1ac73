from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from .base import Message, register_command


class Protocols:
    class DonationItem(Protocol):
        main_category: str
        detail_category: str | None
        gender_type: str | None
        size: str | None
        description: str | None
        image_url: str | None
        image_urls: list[str] | None
        quantity: int

    class Shipment(Protocol):
        sender_name: str
        sender_phone: str
        sender_address: str
        receiver_name: str
        receiver_phone: str
        receiver_address: str
        carrier: str | None
        tracking_number: str | None


@register_command
@dataclass(eq=False, slots=True)
class CreateDonation(Message):
    donor_id: str
    match_type: str
    delivery_method: str
    item: dict | Protocols.DonationItem
    organization_id: str | None = None
    donor_name: str | None = None
    contact: str | None = None
    donor_address: str | None = None
    is_anonymous: bool = False
    desired_date: date | None = None
    memo: str | None = None

    # Meta
    signature: str = field(init=False)


@register_command
@dataclass(eq=False, slots=True)
class ApproveDonation(Message):
    donation_id: str

    # Meta
    signature: str = field(init=False)


@register_command
@dataclass(eq=False, slots=True)
class RejectDonation(Message):
    donation_id: str
    reason: str

    # Meta
    signature: str = field(init=False)


@register_command
@dataclass(eq=False, slots=True)
class ResetDonationToPending(Message):
    donation_id: str

    # Meta
    signature: str = field(init=False)


@register_command
@dataclass(eq=False, slots=True)
class AssignOrganization(Message):
    donation_id: str
    organization_id: str
    carrier: str | None = None
    tracking_number: str | None = None

    # Meta
    signature: str = field(init=False)


@register_command
@dataclass(eq=False, slots=True)
class SelectDonation(Message):
    donation_id: str
    organization_id: str

    # Meta
    signature: str = field(init=False)


@register_command
@dataclass(eq=False, slots=True)
class ApproveDonationByOrganization(Message):
    donation_id: str
    organization_id: str
    carrier: str | None = None
    tracking_number: str | None = None

    # Meta
    signature: str = field(init=False)


@register_command
@dataclass(eq=False, slots=True)
class RejectDonationByOrganization(Message):
    donation_id: str
    organization_id: str

    # Meta
    signature: str = field(init=False)


@register_command
@dataclass(eq=False, slots=True)
class CancelDonation(Message):
    donation_id: str
    donor_id: str
    reason: str | None = None

    # Meta
    signature: str = field(init=False)


@register_command
@dataclass(eq=False, slots=True)
class CreateDelivery(Message):
    donation_id: str
    shipment: dict | Protocols.Shipment

    # Meta
    signature: str = field(init=False)


@register_command
@dataclass(eq=False, slots=True)
class UpdateDeliveryStatus(Message):
    delivery_id: str
    status: str

    # Meta
    signature: str = field(init=False)


@register_command
@dataclass(eq=False, slots=True)
class UpdateDeliveryInfo(Message):
    delivery_id: str
    carrier: str | None = None
    tracking_number: str | None = None
    receiver_name: str | None = None
    receiver_phone: str | None = None
    receiver_address: str | None = None
    receiver_detail_address: str | None = None
    receiver_postal_code: str | None = None

    # Meta
    signature: str = field(init=False)
