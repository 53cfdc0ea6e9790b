from datetime import timedelta

import pytest
from django.utils import timezone

from apps.leads.lifecycle import (
    OUTBOUND_CONTACT_TYPES,
    STATUS_TIMESTAMPS,
    record_first_contact,
    status_change_fields,
)
from apps.leads.models import InteractionType, Lead, LeadStatus, LostReason

pytestmark = pytest.mark.django_db


def test_every_status_has_a_timestamp_rule():
    assert set(STATUS_TIMESTAMPS) == set(LeadStatus.values)


def test_outbound_contact_types():
    assert OUTBOUND_CONTACT_TYPES == {
        InteractionType.CALL_OUTBOUND,
        InteractionType.EMAIL_SENT,
        InteractionType.SMS_SENT,
    }


def test_contacted_sets_first_contact_and_speed(lead):
    now = lead.created_at + timedelta(minutes=5)

    fields = status_change_fields(lead, LeadStatus.CONTACTED, now=now)

    assert fields == {
        "status": LeadStatus.CONTACTED,
        "first_contact_at": now,
        "speed_to_first_contact_ms": 5 * 60 * 1000,
    }


@pytest.mark.parametrize(
    "status,field",
    [
        (LeadStatus.QUALIFIED, "qualified_at"),
        (LeadStatus.APPOINTMENT_BOOKED, "appointment_booked_at"),
        (LeadStatus.LOST, "lost_at"),
    ],
)
def test_timestamps_are_set_only_once(lead, status, field):
    earlier = timezone.now() - timedelta(days=3)
    setattr(lead, field, earlier)

    fields = status_change_fields(lead, status, now=timezone.now())

    assert fields == {"status": status}


def test_lost_records_reason(lead):
    now = timezone.now()

    fields = status_change_fields(lead, LeadStatus.LOST, now=now, lost_reason=LostReason.PRICE)

    assert fields["lost_at"] == now
    assert fields["lost_reason"] == LostReason.PRICE


def test_promotion_only_from_enquiry(lead):
    now = timezone.now()
    assert "promoted_to_lead_at" not in status_change_fields(lead, LeadStatus.NEW, now=now)

    lead.status = LeadStatus.ENQUIRY
    assert status_change_fields(lead, LeadStatus.NEW, now=now)["promoted_to_lead_at"] == now


def test_statuses_without_timestamp(lead):
    for status in (LeadStatus.NURTURING, LeadStatus.UNQUALIFIED, LeadStatus.TREATMENT_STARTED):
        assert status_change_fields(lead, status, now=timezone.now()) == {"status": status}


def test_unknown_status_is_rejected(lead):
    with pytest.raises(ValueError):
        status_change_fields(lead, "ARCHIVED", now=timezone.now())


def test_first_contact_recorded_once(lead):
    first = timezone.now()
    assert record_first_contact(Lead.objects.filter(practice=lead.practice), lead, now=first) is True
    assert record_first_contact(Lead.objects.filter(practice=lead.practice), lead, now=first + timedelta(hours=1)) is False

    lead.refresh_from_db()
    assert lead.first_contact_at == first
    assert lead.speed_to_first_contact_ms >= 0
