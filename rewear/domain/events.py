from __future__ import annotations

from dataclasses import dataclass, field

from .base import Message, register_event


@register_event
@dataclass(eq=False, slots=True)
class DonationApproved(Message):
    donation_id: str
    donor_id: str
    item_category: str
    organization_user_id: str | None = None
    organization_name: str | None = None

    # Meta
    signature: str = field(init=False)


@register_event
@dataclass(eq=False, slots=True)
class DonationRejected(Message):
    donation_id: str
    donor_id: str
    reason: str

    # Meta
    signature: str = field(init=False)


@register_event
@dataclass(eq=False, slots=True)
class DonationMatched(Message):
    """
    An organization picked the donation by itself
    """

    donation_id: str
    donor_id: str
    organization_name: str

    # Meta
    signature: str = field(init=False)


@register_event
@dataclass(eq=False, slots=True)
class DonationCompleted(Message):
    donation_id: str
    donor_id: str
    organization_name: str
    organization_user_id: str | None = None

    # Meta
    signature: str = field(init=False)


@register_event
@dataclass(eq=False, slots=True)
class DonationRejectedByOrganization(Message):
    donation_id: str
    donor_id: str
    organization_name: str

    # Meta
    signature: str = field(init=False)


@register_event
@dataclass(eq=False, slots=True)
class DonationCancelled(Message):
    donation_id: str
    donor_id: str
    reason: str

    # Meta
    signature: str = field(init=False)
