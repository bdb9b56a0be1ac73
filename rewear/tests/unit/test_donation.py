from dataclasses import dataclass

import pytest

from rewear.domain import events, exceptions
from rewear.domain.delivery import Delivery
from rewear.domain.donation import Donation, DonationItem
from rewear.domain.organization import Organization
from rewear.tests.fakes import create_donation_command, item_payload, make_donation, make_organization


class TestCreate:
    def test_direct_donation_keeps_organization(self):
        organization = make_organization()
        donation = make_donation(organization=organization)
        assert donation.organization is organization
        assert donation.status == Donation.Status.PENDING
        assert donation.admin_decision == Donation.AdminDecision.PENDING
        assert donation.id.startswith("DN-")
        assert donation.item.id.startswith("DI-")
        assert not donation.events

    def test_indirect_donation_has_no_organization(self):
        organization = make_organization()
        cmd = create_donation_command(organization_id=organization.id)
        donation = Donation.create(cmd, organization=organization)
        assert donation.organization is None

    def test_direct_donation_requires_organization(self):
        cmd = create_donation_command(match_type=Donation.MatchType.DIRECT.value)
        with pytest.raises(exceptions.ValidationError):
            Donation.create(cmd)

    def test_direct_donation_requires_approved_organization(self):
        organization = make_organization(status=Organization.Status.PENDING.value)
        cmd = create_donation_command(match_type=Donation.MatchType.DIRECT.value)
        with pytest.raises(exceptions.ValidationError) as e:
            Donation.create(cmd, organization=organization)
        assert e.value.message == "승인된 기관만 선택할 수 있습니다."

    def test_unknown_match_type_is_rejected(self):
        with pytest.raises(exceptions.ValidationError):
            Donation.create(create_donation_command(match_type="random"))

    def test_item_is_validated(self):
        with pytest.raises(exceptions.ValidationError):
            Donation.create(create_donation_command(item=item_payload(quantity=0)))
        with pytest.raises(exceptions.ValidationError):
            Donation.create(create_donation_command(item=item_payload(main_category="")))

    def test_item_read_from_attributes(self):
        @dataclass(slots=True)
        class ItemIn:
            main_category: str
            detail_category: str | None = None
            gender_type: str | None = None
            size: str | None = None
            description: str | None = None
            image_url: str | None = None
            image_urls: list | None = None
            quantity: int = 1

        item = DonationItem.create(ItemIn(main_category="하의", size="l", image_urls=[], quantity=2))
        assert item.main_category == "하의"
        assert item.size == "L"
        assert item.quantity == 2

    def test_item_size_is_normalised(self):
        item = DonationItem.create(item_payload(size="xl"))
        assert item.size == DonationItem.Size.XL
        with pytest.raises(exceptions.ValidationError):
            DonationItem.create(item_payload(size="XXXL"))


class TestAdministrator:
    def test_approve_moves_to_in_progress(self):
        donation = make_donation()
        donation.approve_by_admin()
        assert donation.admin_decision == Donation.AdminDecision.APPROVED
        assert donation.status == Donation.Status.IN_PROGRESS
        assert donation.delivery is None
        event = donation.events.popleft()
        assert isinstance(event, events.DonationApproved)
        assert event.organization_user_id is None

    def test_approve_is_permissive(self):
        donation = make_donation()
        donation.status = Donation.Status.CANCELLED.value
        donation.approve_by_admin()
        assert donation.status == Donation.Status.IN_PROGRESS

    def test_approve_with_organization_carries_organization_user(self):
        organization = make_organization()
        donation = make_donation(organization=organization)
        donation.approve_by_admin()
        event = donation.events.popleft()
        assert event.organization_user_id == organization.user_id
        assert event.item_category == donation.item.main_category

    def test_reject_clears_organization_only_for_indirect(self):
        organization = make_organization()
        indirect = make_donation()
        indirect.assign_organization(organization)
        indirect.reject_by_admin("부적합")
        assert indirect.organization is None

        direct = make_donation(organization=organization)
        direct.reject_by_admin("부적합")
        assert direct.organization is organization

    def test_reject_keeps_status(self):
        donation = make_donation()
        donation.approve_by_admin()
        donation.reject_by_admin("duplicate")
        assert donation.status == Donation.Status.IN_PROGRESS
        assert donation.admin_decision == Donation.AdminDecision.REJECTED
        assert donation.cancel_reason == "duplicate"
        assert isinstance(donation.events[-1], events.DonationRejected)

    def test_reset_to_pending(self):
        organization = make_organization()
        donation = make_donation()
        donation.assign_organization(organization)
        donation.reject_by_admin("duplicate")
        donation.events.clear()

        donation.reset_to_pending()

        assert donation.status == Donation.Status.PENDING
        assert donation.admin_decision == Donation.AdminDecision.PENDING
        assert donation.cancel_reason is None
        assert donation.organization is None
        assert not donation.events

    def test_reset_to_pending_keeps_direct_organization(self):
        organization = make_organization()
        donation = make_donation(organization=organization)
        donation.reset_to_pending()
        assert donation.organization is organization


class TestAssignOrganization:
    def test_parcel_delivery_creates_delivery_with_placeholders(self):
        organization = make_organization(name="사랑의옷장")
        donation = make_donation(donor_name=None, contact=None, donor_address="주소 미입력")

        donation.assign_organization(organization)

        delivery = donation.delivery
        assert delivery is not None
        assert delivery.donation is donation
        assert delivery.status == Delivery.Status.PENDING
        assert delivery.sender_name == "미정"
        assert delivery.sender_phone == "010-0000-0000"
        assert delivery.sender_address == "주소 미정"
        assert delivery.receiver_name == "사랑의옷장"
        assert delivery.receiver_phone == "010-0000-0000"
        assert delivery.receiver_address == "주소 미정"
        assert delivery.carrier is None
        assert donation.status == Donation.Status.PENDING
        assert donation.admin_decision == Donation.AdminDecision.PENDING

    def test_sender_comes_from_donor_contact(self):
        donation = make_donation(donor_name="김기부", contact="010-1111-2222", donor_address="서울시 중구")
        donation.assign_organization(make_organization(), carrier="04", tracking_number=" 12345 ")
        assert donation.delivery.sender_name == "김기부"
        assert donation.delivery.sender_phone == "010-1111-2222"
        assert donation.delivery.sender_address == "서울시 중구"
        assert donation.delivery.carrier == "CJ대한통운"
        assert donation.delivery.tracking_number == "12345"

    def test_existing_delivery_only_takes_given_values(self):
        donation = make_donation()
        donation.assign_organization(make_organization(), carrier="CJ", tracking_number="12345")
        delivery = donation.delivery

        other = make_organization()
        donation.assign_organization(other, carrier="", tracking_number="67890")

        assert donation.delivery is delivery
        assert donation.organization is other
        assert delivery.carrier == "CJ"
        assert delivery.tracking_number == "67890"

    def test_self_delivery_creates_no_delivery(self):
        donation = make_donation(delivery_method=Donation.DeliveryMethod.SELF_DELIVERY.value)
        donation.assign_organization(make_organization())
        assert donation.delivery is None

    def test_direct_donation_cannot_be_assigned(self):
        donation = make_donation(organization=make_organization())
        with pytest.raises(exceptions.InvalidState) as e:
            donation.assign_organization(make_organization())
        assert e.value.message == "간접 매칭 기부만 관리자가 기관을 할당할 수 있습니다."

    @pytest.mark.parametrize("status", [Donation.Status.SHIPPED.value, Donation.Status.COMPLETED.value])
    def test_finished_donation_cannot_be_assigned(self, status):
        donation = make_donation()
        donation.status = status
        with pytest.raises(exceptions.InvalidState):
            donation.assign_organization(make_organization())
        assert donation.organization is None

    def test_unapproved_organization_cannot_be_assigned(self):
        donation = make_donation()
        with pytest.raises(exceptions.InvalidState):
            donation.assign_organization(make_organization(status=Organization.Status.REJECTED.value))
        assert donation.organization is None
        assert donation.delivery is None


class TestOrganization:
    def test_select_links_organization(self):
        organization = make_organization(name="희망재단")
        donation = make_donation()
        donation.select_by_organization(organization)
        assert donation.organization is organization
        assert donation.status == Donation.Status.IN_PROGRESS
        event = donation.events.popleft()
        assert isinstance(event, events.DonationMatched)
        assert event.organization_name == "희망재단"

    def test_select_twice_is_rejected(self):
        organization = make_organization()
        donation = make_donation()
        donation.select_by_organization(organization)
        with pytest.raises(exceptions.InvalidState) as e:
            donation.select_by_organization(organization)
        assert e.value.message == "이미 선택한 기부입니다."

    def test_approve_creates_delivery_from_organization_contact(self):
        organization = make_organization(
            name="희망재단", phone="0212345678", address="서울시 종로구", postal_code="03000"
        )
        donation = make_donation(organization=organization)

        donation.approve_by_organization(organization, carrier="05", tracking_number="777")

        assert donation.status == Donation.Status.COMPLETED
        delivery = donation.delivery
        assert delivery.receiver_name == "희망재단"
        assert delivery.receiver_phone == "021-234-5678"
        assert delivery.receiver_address == "서울시 종로구"
        assert delivery.receiver_postal_code == "03000"
        assert delivery.carrier == "한진택배"
        assert delivery.tracking_number == "777"
        assert delivery.status == Delivery.Status.PENDING
        event = donation.events.popleft()
        assert isinstance(event, events.DonationCompleted)
        assert event.organization_user_id == organization.user_id

    def test_approve_ignores_empty_organization_address(self):
        organization = make_organization(phone="1234", address="주소 미입력")
        donation = make_donation(organization=organization)
        donation.approve_by_organization(organization)
        assert donation.delivery.receiver_address == "주소 미정"
        assert donation.delivery.receiver_phone == "1234"

    def test_approve_twice_keeps_single_delivery(self):
        organization = make_organization()
        donation = make_donation(organization=organization)
        donation.approve_by_organization(organization)
        delivery = donation.delivery

        donation.approve_by_organization(organization)

        assert donation.status == Donation.Status.COMPLETED
        assert donation.delivery is delivery

    def test_approve_refreshes_receiver_and_resets_delivery_status(self):
        organization = make_organization(name="사랑의옷장", phone="01099998888", address="부산시 해운대구")
        donation = make_donation()
        donation.assign_organization(organization)
        delivery = donation.delivery
        delivery.status = Delivery.Status.IN_TRANSIT.value

        donation.approve_by_organization(organization, tracking_number="555")

        assert delivery.receiver_phone == "010-9999-8888"
        assert delivery.receiver_address == "부산시 해운대구"
        assert delivery.receiver_name == "사랑의옷장"
        assert delivery.tracking_number == "555"
        assert delivery.status == Delivery.Status.PENDING

    def test_unlinked_organization_cannot_approve(self):
        donation = make_donation(organization=make_organization())
        with pytest.raises(exceptions.InvalidState) as e:
            donation.approve_by_organization(make_organization())
        assert e.value.message == "해당 기관에 할당된 기부만 승인할 수 있습니다."
        assert donation.status == Donation.Status.PENDING
        assert donation.delivery is None

    def test_reject_cancels_and_unlinks(self):
        organization = make_organization(name="희망재단")
        donation = make_donation(organization=organization)
        donation.reject_by_organization(organization)
        assert donation.status == Donation.Status.CANCELLED
        assert donation.cancel_reason == "기관이 기부를 반려했습니다."
        assert donation.organization is None
        event = donation.events.popleft()
        assert isinstance(event, events.DonationRejectedByOrganization)
        assert event.organization_name == "희망재단"

    def test_unlinked_organization_cannot_reject(self):
        donation = make_donation()
        with pytest.raises(exceptions.InvalidState) as e:
            donation.reject_by_organization(make_organization())
        assert e.value.message == "해당 기관에 할당된 기부만 거부할 수 있습니다."


class TestDonor:
    def test_cancel(self):
        donation = make_donation()
        donation.cancel("마음이 바뀜")
        assert donation.status == Donation.Status.CANCELLED
        assert donation.cancel_reason == "마음이 바뀜"
        assert isinstance(donation.events.popleft(), events.DonationCancelled)

    def test_completed_donation_cannot_be_cancelled(self):
        organization = make_organization()
        donation = make_donation(organization=organization)
        donation.approve_by_organization(organization)
        donation.events.clear()
        with pytest.raises(exceptions.InvalidState):
            donation.cancel("늦은 취소")
        assert donation.status == Donation.Status.COMPLETED
        assert not donation.events
