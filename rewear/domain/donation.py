from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rewear.domain import commands as domain_commands
from rewear.domain import events as domain_events
from rewear.domain import exceptions
from rewear.domain.base import Base, sn_alphanum
from rewear.domain.delivery import Delivery
from rewear.domain.organization import Organization
from rewear.utils import delivery_utils, time_util

logger = logging.getLogger(__name__)


class Schemas:
    class DonationItemIn(BaseModel):
        model_config = ConfigDict(str_strip_whitespace=True)

        main_category: str = Field(min_length=1)
        detail_category: str | None = None
        gender_type: str | None = None
        size: str | None = None
        description: str | None = None
        image_url: str | None = None
        image_urls: list[str] = Field(default_factory=list)
        quantity: int = Field(default=1, ge=1)

        @field_validator("size")
        @classmethod
        def validate_size(cls, v: str | None):
            if v is None or v == "":
                return None
            v = v.upper()
            if v not in DonationItem.Size.__members__:
                raise ValueError(f"지원하지 않는 사이즈입니다: {v}")
            return v


@dataclass(eq=False)
class DonationItem(Base):
    class Size(str, Enum):
        S = "S"
        M = "M"
        L = "L"
        XL = "XL"
        XXL = "XXL"
        F = "F"  # Free

    main_category: str
    detail_category: str | None = None
    gender_type: str | None = None
    size: str | None = None
    description: str | None = None
    image_url: str | None = None
    image_urls: list = field(default_factory=list)
    quantity: int = 1

    @staticmethod
    def sn_item():
        return "DI-" + sn_alphanum(length=12)

    @classmethod
    def create(cls, payload) -> DonationItem:
        if isinstance(payload, BaseModel):
            payload = payload.model_dump()
        try:
            data = Schemas.DonationItemIn.model_validate(payload, from_attributes=True)
        except ValueError as e:
            raise exceptions.ValidationError("기부 물품 정보가 올바르지 않습니다.") from e
        now = time_util.current_time()
        return cls.from_kwargs(id=cls.sn_item(), create_dt=now, update_dt=now, **data.model_dump())


@dataclass(eq=False)
class Donation(Base):
    class Status(str, Enum):
        PENDING = "pending"  # 접수
        IN_PROGRESS = "in_progress"  # 진행 중
        SHIPPED = "shipped"  # legacy, no transition produces it
        COMPLETED = "completed"
        CANCELLED = "cancelled"

    class AdminDecision(str, Enum):
        PENDING = "pending"
        APPROVED = "approved"
        REJECTED = "rejected"

    class MatchType(str, Enum):
        DIRECT = "direct"  # 기부자가 기관 지정
        INDIRECT = "indirect"  # 관리자가 기관 할당

    class DeliveryMethod(str, Enum):
        SELF_DELIVERY = "self_delivery"  # 직접 전달
        PARCEL_DELIVERY = "parcel_delivery"  # 택배

    ORGANIZATION_REJECT_REASON = "기관이 기부를 반려했습니다."

    # Metadata
    donor_id: str
    match_type: str
    delivery_method: str

    # mapping
    item: DonationItem
    organization: Organization | None = None
    delivery: Delivery | None = field(default=None, repr=False)

    # Donor contact snapshot, used as delivery sender
    donor_name: str | None = None
    contact: str | None = None
    donor_address: str | None = None

    is_anonymous: bool = False
    desired_date: date | None = None
    memo: str | None = None

    admin_decision: str = AdminDecision.PENDING.value
    status: str = Status.PENDING.value
    cancel_reason: str | None = None

    # application attribute
    events: deque = field(default_factory=deque, repr=False)

    @staticmethod
    def sn_donation():
        return "DN-" + sn_alphanum(length=12)

    @property
    def organization_name(self) -> str | None:
        return self.organization.name if self.organization is not None else None

    @property
    def is_direct(self) -> bool:
        return self.match_type == Donation.MatchType.DIRECT

    @property
    def is_parcel_delivery(self) -> bool:
        return self.delivery_method == Donation.DeliveryMethod.PARCEL_DELIVERY

    @classmethod
    def create(cls, msg: domain_commands.CreateDonation, organization: Organization | None = None) -> Donation:
        try:
            match_type = Donation.MatchType(msg.match_type)
            delivery_method = Donation.DeliveryMethod(msg.delivery_method)
        except ValueError:
            raise exceptions.ValidationError("매칭 방식 또는 전달 방식이 올바르지 않습니다.")

        if match_type == Donation.MatchType.DIRECT:
            if organization is None:
                raise exceptions.ValidationError("직접 매칭 기부는 기관을 선택해야 합니다.")
            if not organization.is_approved:
                raise exceptions.ValidationError("승인된 기관만 선택할 수 있습니다.")
        else:
            # Indirect donations wait for administrator assignment
            organization = None

        item = DonationItem.create(msg.item)
        now = time_util.current_time()
        donation = cls.from_kwargs(
            id=cls.sn_donation(),
            create_dt=now,
            update_dt=now,
            donor_id=msg.donor_id,
            match_type=match_type.value,
            delivery_method=delivery_method.value,
            item=item,
            organization=organization,
            donor_name=msg.donor_name,
            contact=msg.contact,
            donor_address=msg.donor_address,
            is_anonymous=msg.is_anonymous,
            desired_date=msg.desired_date,
            memo=msg.memo,
        )
        logger.info("donation %s created by donor %s (%s)", donation.id, donation.donor_id, donation.match_type)
        return donation

    # Administrator
    def approve_by_admin(self):
        self.admin_decision = Donation.AdminDecision.APPROVED.value
        self.status = Donation.Status.IN_PROGRESS.value
        self.events.append(
            domain_events.DonationApproved(
                donation_id=self.id,
                donor_id=self.donor_id,
                item_category=self.item.main_category,
                organization_user_id=self.organization.user_id if self.organization is not None else None,
                organization_name=self.organization_name,
            )
        )
        logger.info("donation %s approved by administrator", self.id)

    def reject_by_admin(self, reason: str):
        self.admin_decision = Donation.AdminDecision.REJECTED.value
        self.cancel_reason = reason
        if not self.is_direct:
            self.organization = None
        self.events.append(domain_events.DonationRejected(donation_id=self.id, donor_id=self.donor_id, reason=reason))
        logger.info("donation %s rejected by administrator", self.id)

    def reset_to_pending(self):
        self.status = Donation.Status.PENDING.value
        self.admin_decision = Donation.AdminDecision.PENDING.value
        self.cancel_reason = None
        if not self.is_direct:
            self.organization = None
        logger.info("donation %s reset to pending", self.id)

    def assign_organization(
        self, organization: Organization, carrier: str | None = None, tracking_number: str | None = None
    ):
        if self.status in (Donation.Status.SHIPPED, Donation.Status.COMPLETED):
            raise exceptions.InvalidState("이미 배송 중이거나 완료된 기부입니다.")
        if self.is_direct:
            raise exceptions.InvalidState("간접 매칭 기부만 관리자가 기관을 할당할 수 있습니다.")
        if not organization.is_approved:
            raise exceptions.InvalidState("승인된 기관만 할당할 수 있습니다.")

        self.organization = organization
        if self.is_parcel_delivery:
            if self.delivery is None:
                Delivery.create(
                    donation=self,
                    **self._sender_fields(),
                    receiver_name=organization.name,
                    receiver_phone=delivery_utils.PLACEHOLDER_PHONE,
                    receiver_address=delivery_utils.PLACEHOLDER_ADDRESS,
                    carrier=carrier,
                    tracking_number=tracking_number,
                )
            else:
                self.delivery.update_fields(carrier=carrier, tracking_number=tracking_number)
        logger.info("organization %s assigned to donation %s", organization.id, self.id)

    # Organization
    def select_by_organization(self, organization: Organization):
        if self.status in (Donation.Status.SHIPPED, Donation.Status.COMPLETED):
            raise exceptions.InvalidState("이미 배송 중이거나 완료된 기부입니다.")
        if self.status == Donation.Status.CANCELLED:
            raise exceptions.InvalidState("취소된 기부는 선택할 수 없습니다.")
        if self.organization is not None and self.organization.id == organization.id:
            raise exceptions.InvalidState("이미 선택한 기부입니다.")
        if not organization.is_approved:
            raise exceptions.InvalidState("승인된 기관만 기부를 선택할 수 있습니다.")

        self.organization = organization
        self.status = Donation.Status.IN_PROGRESS.value
        self.events.append(
            domain_events.DonationMatched(
                donation_id=self.id, donor_id=self.donor_id, organization_name=organization.name
            )
        )
        logger.info("donation %s selected by organization %s", self.id, organization.id)

    def approve_by_organization(
        self, organization: Organization, carrier: str | None = None, tracking_number: str | None = None
    ):
        self._check_linked(organization, "해당 기관에 할당된 기부만 승인할 수 있습니다.")

        self.status = Donation.Status.COMPLETED.value
        if self.delivery is None:
            Delivery.create(
                donation=self,
                **self._sender_fields(),
                receiver_name=organization.name,
                receiver_phone=delivery_utils.format_phone(organization.phone) or delivery_utils.PLACEHOLDER_PHONE,
                receiver_address=(
                    delivery_utils.PLACEHOLDER_ADDRESS
                    if delivery_utils.is_empty_address(organization.address)
                    else organization.address
                ),
                receiver_detail_address=organization.detail_address,
                receiver_postal_code=organization.postal_code,
                carrier=carrier,
                tracking_number=tracking_number,
            )
        else:
            self.delivery.refresh_receiver(organization)
            self.delivery.update_fields(carrier=carrier, tracking_number=tracking_number)
            self.delivery.reset_to_pending()

        self.events.append(
            domain_events.DonationCompleted(
                donation_id=self.id,
                donor_id=self.donor_id,
                organization_name=organization.name,
                organization_user_id=organization.user_id,
            )
        )
        logger.info("donation %s approved by organization %s", self.id, organization.id)

    def reject_by_organization(self, organization: Organization):
        self._check_linked(organization, "해당 기관에 할당된 기부만 거부할 수 있습니다.")

        self.status = Donation.Status.CANCELLED.value
        self.cancel_reason = self.ORGANIZATION_REJECT_REASON
        self.organization = None
        self.events.append(
            domain_events.DonationRejectedByOrganization(
                donation_id=self.id, donor_id=self.donor_id, organization_name=organization.name
            )
        )
        logger.info("donation %s rejected by organization %s", self.id, organization.id)

    # Donor
    def cancel(self, reason: str):
        if self.status == Donation.Status.COMPLETED:
            raise exceptions.InvalidState("완료된 기부는 취소할 수 없습니다.")

        self.status = Donation.Status.CANCELLED.value
        self.cancel_reason = reason
        self.events.append(domain_events.DonationCancelled(donation_id=self.id, donor_id=self.donor_id, reason=reason))
        logger.info("donation %s cancelled", self.id)

    # Delivery
    def complete_on_delivery(self):
        if self.status != Donation.Status.COMPLETED:
            self.status = Donation.Status.COMPLETED.value
            logger.info("donation %s completed on delivery", self.id)

    def _check_linked(self, organization: Organization, message: str):
        if self.organization is None or self.organization.id != organization.id:
            raise exceptions.InvalidState(message)

    def _sender_fields(self) -> dict:
        return dict(
            sender_name=self.donor_name or delivery_utils.UNASSIGNED,
            sender_phone=self.contact or delivery_utils.PLACEHOLDER_PHONE,
            sender_address=(
                delivery_utils.PLACEHOLDER_ADDRESS
                if delivery_utils.is_empty_address(self.donor_address)
                else self.donor_address
            ),
        )
