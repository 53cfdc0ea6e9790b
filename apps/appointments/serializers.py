"""JSON shape for appointments."""

from __future__ import annotations

from typing import Any, Dict

from apps.appointments.models import Appointment


def serialize_appointment(appt: Appointment) -> Dict[str, Any]:
    treatment = appt.treatment_type
    return {
        "id": appt.id,
        "practice_id": appt.practice_id,
        "lead_id": appt.lead_id,
        "treatment_type": {"id": treatment.id, "name": treatment.name} if treatment else None,
        "booked_by_id": appt.booked_by_id,
        "date_time": appt.date_time.isoformat(),
        "type": appt.type,
        "status": appt.status,
        "deposit_amount": str(appt.deposit_amount) if appt.deposit_amount is not None else None,
        "preparation_notes": appt.preparation_notes,
        "showed_up": appt.showed_up,
        "no_show_reason": appt.no_show_reason,
        "consultation_notes": appt.consultation_notes,
        "converted_to_treatment": appt.converted_to_treatment,
        "estimated_treatment_value": (
            str(appt.estimated_treatment_value) if appt.estimated_treatment_value is not None else None
        ),
        "outcome_recorded_at": appt.outcome_recorded_at.isoformat() if appt.outcome_recorded_at else None,
        "confirmation_source": appt.confirmation_source or None,
    }
