"""
Complaints service tests — creation, status machine and correspondence.

Service-level properties are exercised directly against
``ComplaintLifecycleService``; the text generator is the offline backend
(pinned by the root conftest), so every generation falls back.
"""

from __future__ import annotations

import pytest

from accounts.models import Role
from complaints.models import (
    Complaint,
    ComplaintMessage,
    ComplaintStatus,
    ComplaintStatusLog,
    MessageOrigin,
)
from complaints.services import RECEPTION_DISPLAY_NAME, ComplaintLifecycleService
from core.domain.exceptions import AuthorizationError, ValidationError
from core.domain.notifications import collect_notifications
from core.text_generation import WELCOME_FALLBACK


def _payload(**overrides) -> dict:
    data = {
        "title": "Water cut for three days",
        "category": "utilities",
        "description": "No running water on our street since Sunday.",
        "area": "village_shalaqan",
    }
    data.update(overrides)
    return data


@pytest.fixture()
def citizen(create_user):
    return create_user(full_name="Ahmed Mahmoud", province="Qalyubia", city="Qanatar", area="village_barada")


@pytest.fixture()
def staff(create_user):
    return create_user(role=Role.STAFF, category_scope=["utilities"])


@pytest.fixture()
def supervisor(create_user):
    return create_user(role=Role.SUPERVISOR)


@pytest.mark.django_db
class TestCreateComplaint:

    def test_new_complaint_is_pending_with_one_welcome_message(self, citizen):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())

        assert complaint.status == ComplaintStatus.PENDING
        assert complaint.resolved_at is None

        messages = list(complaint.messages.all())
        assert len(messages) == 1
        welcome = messages[0]
        assert welcome.sender is None
        assert welcome.sender_display_name == RECEPTION_DISPLAY_NAME
        assert welcome.origin == MessageOrigin.AI_ASSISTED
        assert welcome.text == WELCOME_FALLBACK

    def test_initial_status_log_row(self, citizen):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())

        logs = list(ComplaintStatusLog.objects.filter(complaint=complaint))
        assert len(logs) == 1
        assert logs[0].from_status == ""
        assert logs[0].to_status == ComplaintStatus.PENDING
        assert logs[0].changed_by == citizen

    def test_location_defaults_to_citizen_profile(self, citizen):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload(area=""))

        assert complaint.area == "village_barada"
        assert complaint.province == "Qalyubia"
        assert complaint.city == "Qanatar"

    def test_emits_complaint_submitted(self, citizen):
        with collect_notifications() as emitted:
            complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())

        assert [n.event_type for n in emitted] == ["complaint_submitted"]
        assert emitted[0].target_id == str(complaint.pk)
        assert "Water cut for three days" in emitted[0].body

    @pytest.mark.parametrize(
        "overrides",
        [
            {"title": "   "},
            {"description": ""},
            {"category": "space"},
            {"area": "atlantis"},
        ],
    )
    def test_invalid_input_stores_nothing(self, citizen, overrides):
        with pytest.raises(ValidationError):
            ComplaintLifecycleService.create_complaint(citizen, _payload(**overrides))

        assert not Complaint.objects.exists()
        assert not ComplaintMessage.objects.exists()

    @pytest.mark.parametrize("role", [Role.STAFF, Role.SUPERVISOR])
    def test_only_citizens_file_complaints(self, create_user, role):
        actor = create_user(role=role, category_scope=["all"])
        with pytest.raises(AuthorizationError):
            ComplaintLifecycleService.create_complaint(actor, _payload())
        assert not Complaint.objects.exists()


@pytest.mark.django_db
class TestSetStatus:

    def test_citizen_cannot_change_status(self, citizen):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())

        with pytest.raises(AuthorizationError):
            ComplaintLifecycleService.set_status(complaint, ComplaintStatus.RESOLVED, citizen)

        complaint.refresh_from_db()
        assert complaint.status == ComplaintStatus.PENDING

    def test_resolving_stamps_resolved_at_and_logs(self, citizen, staff):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())

        updated = ComplaintLifecycleService.set_status(complaint, ComplaintStatus.RESOLVED, staff)

        assert updated.status == ComplaintStatus.RESOLVED
        assert updated.resolved_at is not None
        latest = ComplaintStatusLog.objects.filter(complaint=complaint).first()
        assert (latest.from_status, latest.to_status) == (ComplaintStatus.PENDING, ComplaintStatus.RESOLVED)
        assert latest.changed_by == staff

    def test_reopen_clears_resolved_at(self, citizen, supervisor):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())
        ComplaintLifecycleService.set_status(complaint, ComplaintStatus.RESOLVED, supervisor)

        reopened = ComplaintLifecycleService.set_status(complaint, ComplaintStatus.IN_PROGRESS, supervisor)

        assert reopened.status == ComplaintStatus.IN_PROGRESS
        assert reopened.resolved_at is None

    def test_rejected_can_be_reopened(self, citizen, staff):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())
        ComplaintLifecycleService.set_status(complaint, ComplaintStatus.REJECTED, staff)

        reopened = ComplaintLifecycleService.set_status(complaint, ComplaintStatus.PENDING, staff)
        assert reopened.status == ComplaintStatus.PENDING

    def test_same_status_writes_no_log_but_notifies(self, citizen, staff):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())

        with collect_notifications() as emitted:
            ComplaintLifecycleService.set_status(complaint, ComplaintStatus.PENDING, staff)

        assert ComplaintStatusLog.objects.filter(complaint=complaint).count() == 1
        assert [n.event_type for n in emitted] == ["status_changed"]

    def test_unknown_status_rejected(self, citizen, staff):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())
        with pytest.raises(ValidationError):
            ComplaintLifecycleService.set_status(complaint, "archived", staff)

    def test_staff_outside_scope_cannot_change_status(self, citizen, create_user):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())
        legal_desk = create_user(role=Role.STAFF, category_scope=["legal"])

        with pytest.raises(AuthorizationError):
            ComplaintLifecycleService.set_status(complaint, ComplaintStatus.RESOLVED, legal_desk)

    def test_status_history_newest_first(self, citizen, staff):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())
        ComplaintLifecycleService.set_status(complaint, ComplaintStatus.IN_PROGRESS, staff)
        ComplaintLifecycleService.set_status(complaint, ComplaintStatus.RESOLVED, staff)

        history = list(ComplaintLifecycleService.status_history(complaint, citizen))
        assert [log.to_status for log in history] == [
            ComplaintStatus.RESOLVED,
            ComplaintStatus.IN_PROGRESS,
            ComplaintStatus.PENDING,
        ]


@pytest.mark.django_db
class TestCorrespondence:

    def test_thread_in_send_order(self, citizen, staff):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())
        ComplaintLifecycleService.append_message(complaint, citizen, "Any news?")
        ComplaintLifecycleService.append_message(complaint, staff, "A crew is on the way.")

        thread = list(ComplaintLifecycleService.thread(complaint, citizen))
        assert [m.text for m in thread] == [WELCOME_FALLBACK, "Any news?", "A crew is on the way."]
        assert all(m.channel_address == str(complaint.pk) for m in thread)

    def test_sender_display_name_is_frozen(self, citizen):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())
        message = ComplaintLifecycleService.append_message(complaint, citizen, "Hello")

        citizen.full_name = "Renamed Citizen"
        citizen.save(update_fields=["full_name"])

        message.refresh_from_db()
        assert message.sender_display_name == "Ahmed Mahmoud"

    def test_citizen_messages_are_always_human(self, citizen):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())
        message = ComplaintLifecycleService.append_message(
            complaint,
            citizen,
            "Please hurry",
            origin=MessageOrigin.AI_ASSISTED,
        )
        assert message.origin == MessageOrigin.HUMAN

    def test_staff_may_flag_ai_assisted_reply(self, citizen, staff):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())
        message = ComplaintLifecycleService.append_message(
            complaint,
            staff,
            "Dear citizen, the issue is being handled.",
            origin=MessageOrigin.AI_ASSISTED,
        )
        assert message.is_ai_generated

    def test_blank_message_rejected(self, citizen):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())
        with pytest.raises(ValidationError):
            ComplaintLifecycleService.append_message(complaint, citizen, "   ")
        assert complaint.messages.count() == 1

    def test_other_citizen_cannot_post(self, citizen, create_user):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())
        stranger = create_user()
        with pytest.raises(AuthorizationError):
            ComplaintLifecycleService.append_message(complaint, stranger, "Me too")

    def test_append_emits_message_posted(self, citizen, staff):
        complaint = ComplaintLifecycleService.create_complaint(citizen, _payload())
        with collect_notifications() as emitted:
            ComplaintLifecycleService.append_message(complaint, staff, "On it.")
        assert [n.event_type for n in emitted] == ["message_posted"]
