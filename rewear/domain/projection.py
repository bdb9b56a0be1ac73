"""
Collapses the independently mutable donation fields into the single status
shown to donors, administrators and organizations.

The result is derived on every read and never stored.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rewear.domain.delivery import Delivery
from rewear.domain.donation import Donation


class StatusLabel(str, Enum):
    PENDING_APPROVAL = "승인대기"
    PENDING_MATCH = "매칭대기"
    MATCHED = "매칭됨"
    REJECTED = "거절됨"
    PENDING_SHIPMENT = "배송대기"
    IN_TRANSIT = "배송중"
    CANCELLED = "취소됨"
    COMPLETED = "완료"


@dataclass(frozen=True)
class ProjectedStatus:
    label: StatusLabel
    explanation: str


def project(donation: Donation, delivery: Delivery | None = None) -> ProjectedStatus:
    label = resolve_label(donation, delivery)
    return ProjectedStatus(label=label, explanation=explain(label, donation))


def resolve_label(donation: Donation, delivery: Delivery | None = None) -> StatusLabel:
    # first matching rule wins
    if donation.status == Donation.Status.CANCELLED:
        return StatusLabel.CANCELLED
    if donation.admin_decision == Donation.AdminDecision.REJECTED:
        return StatusLabel.REJECTED
    if donation.status == Donation.Status.SHIPPED:
        return StatusLabel.PENDING_SHIPMENT
    if donation.status == Donation.Status.COMPLETED:
        return _resolve_completed(delivery)
    if donation.status == Donation.Status.IN_PROGRESS:
        return StatusLabel.PENDING_MATCH
    return StatusLabel.PENDING_APPROVAL


def _resolve_completed(delivery: Delivery | None) -> StatusLabel:
    if delivery is None:
        return StatusLabel.MATCHED
    if delivery.status == Delivery.Status.DELIVERED:
        return StatusLabel.COMPLETED
    if delivery.has_tracking:
        return StatusLabel.PENDING_SHIPMENT
    if delivery.status in (None, Delivery.Status.PENDING, Delivery.Status.PREPARING):
        return StatusLabel.MATCHED
    if delivery.status == Delivery.Status.IN_TRANSIT:
        return StatusLabel.IN_TRANSIT
    return StatusLabel.MATCHED


def explain(label: StatusLabel, donation: Donation) -> str:
    org_name = donation.organization_name
    match label:
        case StatusLabel.PENDING_APPROVAL:
            return "관리자 검토 중입니다."
        case StatusLabel.PENDING_MATCH:
            if donation.is_direct and org_name:
                return f"{org_name} 기관 확인 중입니다."
            return "기관 매칭을 기다리는 중입니다."
        case StatusLabel.MATCHED:
            if org_name:
                return f"{org_name}과 연결되었어요."
            return "기관과 연결되었어요."
        case StatusLabel.REJECTED:
            return donation.cancel_reason or "사유 확인 후 다시 신청해주세요."
        case StatusLabel.PENDING_SHIPMENT:
            return "배송 준비 중입니다."
        case StatusLabel.IN_TRANSIT:
            return "배송 중입니다."
        case StatusLabel.CANCELLED:
            return "기부자가 신청을 취소했습니다."
        case _:
            return "기부가 완료되었습니다."
