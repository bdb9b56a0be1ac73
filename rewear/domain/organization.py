from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rewear.domain.base import Base, sn_alphanum
from rewear.utils import time_util


@dataclass(eq=False)
class Organization(Base):
    """
    Receiving organization. Owned by the organization approval workflow,
    the donation engine only reads it.
    """

    class Status(str, Enum):
        PENDING = "pending"
        APPROVED = "approved"
        REJECTED = "rejected"

    name: str
    user_id: str | None = None
    business_no: str | None = None
    status: str = Status.PENDING.value
    phone: str | None = None
    address: str | None = None
    detail_address: str | None = None
    postal_code: str | None = None

    @property
    def is_approved(self) -> bool:
        return self.status == Organization.Status.APPROVED

    @staticmethod
    def sn_organization():
        return "OG-" + sn_alphanum(length=12)

    @classmethod
    def create(cls, **kwargs) -> Organization:
        now = time_util.current_time()
        kwargs.setdefault("id", cls.sn_organization())
        return cls.from_kwargs(create_dt=now, update_dt=now, **kwargs)
