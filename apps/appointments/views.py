"""Appointment API endpoints."""

from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.views import APIView

from apps.accounts.decorators import with_account
from apps.accounts.policy import bind_appointment, bind_lead, resolve_visibility
from apps.appointments.models import (
    Appointment,
    AppointmentStatus,
    AppointmentType,
    ConfirmationSource,
)
from apps.appointments.serializers import serialize_appointment
from apps.common.api import (
    ok_response,
    parse_choice,
    parse_datetime_value,
    parse_decimal,
    parse_int,
    parse_text,
)
from apps.common.errors import ConflictError, ValidationError
from apps.common.safe_log import safe_log
from apps.common.utils import now_utc
from apps.leads.lifecycle import status_change_fields
from apps.leads.models import InteractionType, LeadStatus

NO_SHOW_REASON_MAX_LENGTH = 255


class AppointmentListCreateView(APIView):
    @with_account
    def get(self, request):
        params = request.query_params
        tenant_filter = resolve_visibility(request.account, parse_int(params.get("practice_id")))
        qs = tenant_filter.apply(Appointment.objects.all())

        appt_status = parse_choice(params.get("status"), AppointmentStatus)
        if appt_status:
            qs = qs.filter(status=appt_status)
        start = parse_datetime_value(params.get("start"))
        end = parse_datetime_value(params.get("end"))
        if start and end:
            qs = qs.between(start, end)

        appointments = qs.select_related("treatment_type").order_by("date_time")
        return ok_response([serialize_appointment(appt) for appt in appointments])

    @with_account
    def post(self, request):
        payload = request.data or {}
        db, lead = bind_lead(request.account, payload.get("lead_id"))
        date_time = parse_datetime_value(payload.get("date_time"), required=True)
        appt_type = parse_choice(payload.get("type"), AppointmentType) or AppointmentType.CONSULTATION
        treatment_type = None
        if payload.get("treatment_type_id") is not None:
            treatment_type = db.get_treatment_type(payload.get("treatment_type_id"))
        notes = parse_text(payload.get("notes"))

        now = now_utc()
        with transaction.atomic():
            lead = db.lock_lead(lead.pk)
            appointment = db.create_appointment(
                lead=lead,
                treatment_type=treatment_type,
                booked_by=request.user,
                date_time=date_time,
                type=appt_type,
                status=AppointmentStatus.SCHEDULED,
                deposit_amount=parse_decimal(payload.get("deposit_amount")),
                preparation_notes=notes,
            )
            db.update_lead(lead, **status_change_fields(lead, LeadStatus.APPOINTMENT_BOOKED, now=now))
            db.create_interaction(
                lead=lead,
                author=request.user,
                type=InteractionType.APPOINTMENT_CREATED,
                body=f"Appointment booked for {date_time.date().isoformat()}",
                metadata={"appointment_id": appointment.id},
            )

        safe_log(
            "appointment.created",
            {"id": appointment.id, "practiceId": appointment.practice_id, "status": appointment.status},
        )
        return ok_response(serialize_appointment(appointment), status_code=status.HTTP_201_CREATED)


class AppointmentOutcomeView(APIView):
    """Record whether the patient attended. Allowed once per appointment."""

    @with_account
    def post(self, request, appointment_id: int):
        db, appointment = bind_appointment(request.account, appointment_id)
        payload = request.data or {}

        showed_up = payload.get("showed_up")
        converted = payload.get("converted_to_treatment", False)
        if not isinstance(showed_up, bool) or not isinstance(converted, bool):
            raise ValidationError()
        source = (
            parse_choice(payload.get("confirmation_source"), ConfirmationSource)
            or ConfirmationSource.MANUAL_SALESPERSON
        )
        fields = {
            "showed_up": showed_up,
            "status": AppointmentStatus.ATTENDED if showed_up else AppointmentStatus.NO_SHOW,
            "no_show_reason": parse_text(payload.get("no_show_reason"), max_length=NO_SHOW_REASON_MAX_LENGTH),
            "consultation_notes": parse_text(payload.get("consultation_notes")),
            "converted_to_treatment": converted,
            "estimated_treatment_value": parse_decimal(payload.get("estimated_treatment_value")),
            "confirmation_source": source,
            "confirmed_by": request.user,
        }

        now = now_utc()
        with transaction.atomic():
            # The null check in the filter makes the write single-shot under races.
            claimed = (
                db.appointments()
                .filter(pk=appointment.pk, outcome_recorded_at__isnull=True)
                .update(outcome_recorded_at=now, updated_at=now, **fields)
            )
            if not claimed:
                raise ConflictError("outcome already recorded")

            if showed_up:
                lead = db.lock_lead(appointment.lead_id)
                new_status = (
                    LeadStatus.TREATMENT_STARTED if converted else LeadStatus.CONSULTATION_COMPLETED
                )
                db.update_lead(lead, **status_change_fields(lead, new_status, now=now))

        appointment.refresh_from_db()
        safe_log(
            "appointment.outcome_recorded",
            {"id": appointment.id, "practiceId": appointment.practice_id, "status": appointment.status},
        )
        return ok_response(serialize_appointment(appointment))
