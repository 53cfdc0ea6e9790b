from datetime import timedelta

import pytest
from django.utils import timezone

from apps.appointments import views as appointment_views
from apps.appointments.models import Appointment, AppointmentStatus
from apps.leads.models import Interaction, InteractionType, Lead, LeadStatus

pytestmark = pytest.mark.django_db


def _book(api, user, lead, treatment=None, when=None):
    when = when or timezone.now() + timedelta(days=2)
    payload = {"lead_id": lead.id, "date_time": when.isoformat(), "deposit_amount": "50.00"}
    if treatment is not None:
        payload["treatment_type_id"] = treatment.id
    return api.post("/appointments", payload, user=user)


def test_booking_moves_lead_and_logs_interaction(api, salesperson, lead, treatment):
    response = _book(api, salesperson, lead, treatment)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == AppointmentStatus.SCHEDULED
    assert data["treatment_type"]["name"] == "Invisalign"
    assert data["deposit_amount"] == "50.00"
    lead.refresh_from_db()
    assert lead.status == LeadStatus.APPOINTMENT_BOOKED
    booked_at = lead.appointment_booked_at
    assert booked_at is not None
    log = Interaction.objects.get(lead=lead, type=InteractionType.APPOINTMENT_CREATED)
    assert log.metadata == {"appointment_id": data["id"]}

    _book(api, salesperson, lead)
    lead.refresh_from_db()
    assert lead.appointment_booked_at == booked_at


def test_booking_with_foreign_treatment_is_not_found(api, admin_user, other_lead, treatment):
    response = _book(api, admin_user, other_lead, treatment)

    assert response.status_code == 404
    assert not Appointment.objects.exists()


def test_booking_for_other_tenant_forbidden(api, owner, other_lead):
    response = _book(api, owner, other_lead)

    assert response.status_code == 403


def test_booking_requires_valid_datetime(api, owner, lead):
    response = api.post("/appointments", {"lead_id": lead.id, "date_time": "next tuesday"}, user=owner)

    assert response.status_code == 400


def test_outcome_recorded_exactly_once(api, owner, salesperson, lead):
    appointment_id = _book(api, salesperson, lead).json()["data"]["id"]

    first = api.post(
        f"/appointments/{appointment_id}/outcome",
        {"showed_up": True, "converted_to_treatment": True, "estimated_treatment_value": 3500},
        user=owner,
    )
    second = api.post(f"/appointments/{appointment_id}/outcome", {"showed_up": False}, user=owner)

    assert first.status_code == 200
    assert first.json()["data"]["status"] == AppointmentStatus.ATTENDED
    assert second.status_code == 409
    assert second.json() == {"ok": False, "error": "CONFLICT"}
    appointment = Appointment.objects.get(pk=appointment_id)
    assert appointment.showed_up is True
    assert appointment.confirmed_by_id == owner.id
    assert appointment.confirmation_source == "MANUAL_SALESPERSON"
    lead.refresh_from_db()
    assert lead.status == LeadStatus.TREATMENT_STARTED


def test_no_show_leaves_lead_status(api, salesperson, lead):
    appointment_id = _book(api, salesperson, lead).json()["data"]["id"]

    response = api.post(
        f"/appointments/{appointment_id}/outcome",
        {"showed_up": False, "no_show_reason": "Forgot"},
        user=salesperson,
    )

    assert response.json()["data"]["status"] == AppointmentStatus.NO_SHOW
    lead.refresh_from_db()
    assert lead.status == LeadStatus.APPOINTMENT_BOOKED


def test_outcome_requires_boolean(api, salesperson, lead):
    appointment_id = _book(api, salesperson, lead).json()["data"]["id"]

    response = api.post(f"/appointments/{appointment_id}/outcome", {"showed_up": "yes"}, user=salesperson)

    assert response.status_code == 400


def test_list_filters_by_visibility_status_and_range(api, owner, admin_user, salesperson, lead, other_lead):
    soon = timezone.now() + timedelta(days=1)
    later = timezone.now() + timedelta(days=30)
    _book(api, salesperson, lead, when=soon)
    _book(api, admin_user, other_lead, when=later)

    own = api.get("/appointments", user=owner).json()["data"]
    assert [item["lead_id"] for item in own] == [lead.id]

    everything = api.get("/appointments", user=admin_user).json()["data"]
    assert len(everything) == 2

    ranged = api.get(
        "/appointments",
        user=admin_user,
        start=(soon - timedelta(hours=1)).isoformat(),
        end=(soon + timedelta(hours=1)).isoformat(),
    ).json()["data"]
    assert [item["lead_id"] for item in ranged] == [lead.id]

    attended = api.get("/appointments", user=admin_user, status="ATTENDED").json()["data"]
    assert attended == []


def test_booking_keeps_booked_stamp_written_after_lookup(api, salesperson, lead, monkeypatch):
    earlier = timezone.now() - timedelta(hours=3)
    real_bind_lead = appointment_views.bind_lead

    def bind_then_booked_elsewhere(account, lead_id):
        bound = real_bind_lead(account, lead_id)
        Lead.objects.filter(pk=lead_id).update(
            status=LeadStatus.APPOINTMENT_BOOKED, appointment_booked_at=earlier
        )
        return bound

    monkeypatch.setattr(appointment_views, "bind_lead", bind_then_booked_elsewhere)

    response = _book(api, salesperson, lead)

    assert response.status_code == 201
    lead.refresh_from_db()
    assert lead.appointment_booked_at == earlier


def test_outcome_rejects_overlong_no_show_reason(api, salesperson, lead):
    appointment_id = _book(api, salesperson, lead).json()["data"]["id"]

    response = api.post(
        f"/appointments/{appointment_id}/outcome",
        {"showed_up": False, "no_show_reason": "x" * 256},
        user=salesperson,
    )

    assert response.status_code == 400
    assert Appointment.objects.get(pk=appointment_id).outcome_recorded_at is None
