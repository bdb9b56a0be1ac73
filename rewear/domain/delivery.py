from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

from rewear.domain import exceptions
from rewear.domain.base import Base, sn_alphanum
from rewear.utils import delivery_utils, time_util

if TYPE_CHECKING:
    from rewear.domain.donation import Donation
    from rewear.domain.organization import Organization

logger = logging.getLogger(__name__)


class Schemas:
    class ShipmentIn(BaseModel):
        model_config = ConfigDict(str_strip_whitespace=True)

        sender_name: str
        sender_phone: str
        sender_address: str
        sender_detail_address: str | None = None
        sender_postal_code: str | None = None
        receiver_name: str
        receiver_phone: str
        receiver_address: str
        receiver_detail_address: str | None = None
        receiver_postal_code: str | None = None
        carrier: str | None = None
        tracking_number: str | None = None

        @field_validator(
            "sender_name", "sender_phone", "sender_address", "receiver_name", "receiver_phone", "receiver_address"
        )
        @classmethod
        def not_blank(cls, v: str):
            if not v:
                raise ValueError("빈 값은 허용되지 않습니다.")
            return v


@dataclass(eq=False)
class Delivery(Base):
    class Status(str, Enum):
        PENDING = "pending"  # 배송 대기
        PREPARING = "preparing"  # 배송 준비
        IN_TRANSIT = "in_transit"  # 배송 중
        DELIVERED = "delivered"  # 배송 완료
        CANCELLED = "cancelled"

    # Sender Shipping Info
    sender_name: str | None = None
    sender_phone: str | None = None
    sender_address: str | None = None
    sender_detail_address: str | None = None
    sender_postal_code: str | None = None

    # Receiver Shipping Info
    receiver_name: str | None = None
    receiver_phone: str | None = None
    receiver_address: str | None = None
    receiver_detail_address: str | None = None
    receiver_postal_code: str | None = None

    carrier: str | None = None
    tracking_number: str | None = None
    status: str = Status.PENDING.value
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None

    # mapping
    donation: Donation | None = field(default=None, repr=False)

    updatable_fields = (
        "carrier",
        "tracking_number",
        "sender_name",
        "sender_phone",
        "sender_address",
        "sender_detail_address",
        "sender_postal_code",
        "receiver_name",
        "receiver_phone",
        "receiver_address",
        "receiver_detail_address",
        "receiver_postal_code",
    )

    @staticmethod
    def sn_delivery():
        return "DL-" + sn_alphanum(length=12)

    @property
    def has_tracking(self) -> bool:
        return not (
            delivery_utils.is_unassigned(self.carrier) or delivery_utils.is_unassigned(self.tracking_number)
        )

    @classmethod
    def create(cls, *, donation: Donation, **kwargs) -> Delivery:
        if donation.delivery is not None:
            raise exceptions.AlreadyExists("이미 배송 정보가 등록된 기부입니다.")
        now = time_util.current_time()
        kwargs["carrier"] = delivery_utils.resolve_carrier(kwargs.get("carrier"))
        kwargs["tracking_number"] = cls._clean(kwargs.get("tracking_number"))
        kwargs["status"] = Delivery.Status.PENDING.value
        delivery = cls.from_kwargs(id=cls.sn_delivery(), create_dt=now, update_dt=now, **kwargs)
        # assign the owning side so the donation cascade saves the delivery
        donation.delivery = delivery
        if delivery.donation is None:
            delivery.donation = donation
        logger.info("delivery %s created for donation %s", delivery.id, donation.id)
        return delivery

    @classmethod
    def create_from_shipment(cls, *, donation: Donation, shipment) -> Delivery:
        try:
            data = Schemas.ShipmentIn.model_validate(shipment, from_attributes=True)
        except ValueError as e:
            raise exceptions.ValidationError("배송 정보가 올바르지 않습니다.") from e
        return cls.create(donation=donation, **data.model_dump())

    def update_status(self, status: str):
        try:
            new_status = Delivery.Status(status)
        except ValueError:
            raise exceptions.ValidationError(f"알 수 없는 배송 상태입니다: {status}")

        now = time_util.current_time()
        self.status = new_status.value
        if new_status == Delivery.Status.IN_TRANSIT and self.shipped_at is None:
            self.shipped_at = now
        if new_status == Delivery.Status.DELIVERED:
            if self.delivered_at is None:
                self.delivered_at = now
            if self.donation is not None:
                self.donation.complete_on_delivery()
        logger.info("delivery %s status changed to %s", self.id, self.status)

    def update_fields(self, **kwargs):
        """
        Partial update. Blank values leave the stored value untouched
        and `status` is never changed here.
        """
        kwargs.pop("status", None)
        if "carrier" in kwargs:
            kwargs["carrier"] = delivery_utils.resolve_carrier(kwargs["carrier"])
        for key, value in kwargs.items():
            value = self._clean(value)
            if value is None:
                continue
            if key not in self.updatable_fields:
                raise exceptions.ValidationError(f"수정할 수 없는 항목입니다: {key}")
            setattr(self, key, value)

    def refresh_receiver(self, organization: Organization):
        if not delivery_utils.is_blank(organization.phone):
            self.receiver_phone = delivery_utils.format_phone(organization.phone)
        if not delivery_utils.is_empty_address(organization.address):
            self.receiver_address = organization.address
            self.receiver_detail_address = organization.detail_address
        if not delivery_utils.is_blank(organization.postal_code):
            self.receiver_postal_code = organization.postal_code

    def reset_to_pending(self):
        self.status = Delivery.Status.PENDING.value

    @staticmethod
    def _clean(value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value
