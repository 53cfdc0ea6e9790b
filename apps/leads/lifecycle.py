"""Lead status transitions and the timestamps they stamp."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from apps.leads.models import InteractionType, Lead, LeadStatus

# Timestamp field stamped the first time a lead enters each status. Every
# status must appear here; a new status has to be placed explicitly.
STATUS_TIMESTAMPS: Dict[str, Optional[str]] = {
    LeadStatus.ENQUIRY.value: None,
    LeadStatus.NEW.value: "promoted_to_lead_at",
    LeadStatus.CONTACTED.value: "first_contact_at",
    LeadStatus.QUALIFIED.value: "qualified_at",
    LeadStatus.NURTURING.value: None,
    LeadStatus.APPOINTMENT_BOOKED.value: "appointment_booked_at",
    LeadStatus.CONSULTATION_COMPLETED.value: None,
    LeadStatus.TREATMENT_STARTED.value: None,
    LeadStatus.LOST.value: "lost_at",
    LeadStatus.UNQUALIFIED.value: None,
}

# Interaction types that count as the practice reaching out to the lead.
OUTBOUND_CONTACT_TYPES = frozenset(
    {
        InteractionType.CALL_OUTBOUND.value,
        InteractionType.EMAIL_SENT.value,
        InteractionType.SMS_SENT.value,
    }
)


def speed_to_contact_ms(lead: Lead, now: datetime) -> int:
    return int((now - lead.created_at).total_seconds() * 1000)


def status_change_fields(
    lead: Lead,
    new_status: str,
    *,
    now: datetime,
    lost_reason: str | None = None,
) -> Dict[str, Any]:
    """Build the field updates for moving ``lead`` to ``new_status``.

    Lifecycle timestamps are only written when still empty.
    """

    if new_status not in STATUS_TIMESTAMPS:
        raise ValueError(f"unknown lead status {new_status!r}")

    fields: Dict[str, Any] = {"status": new_status}
    stamp = STATUS_TIMESTAMPS[new_status]

    if new_status == LeadStatus.NEW and lead.status != LeadStatus.ENQUIRY:
        stamp = None

    if stamp and getattr(lead, stamp) is None:
        fields[stamp] = now
        if stamp == "first_contact_at":
            fields["speed_to_first_contact_ms"] = speed_to_contact_ms(lead, now)

    if new_status == LeadStatus.LOST and lost_reason:
        fields["lost_reason"] = lost_reason
    return fields


def record_first_contact(leads_qs, lead: Lead, *, now: datetime) -> bool:
    """Stamp first contact once; ``leads_qs`` is the tenant-scoped lead queryset."""
    updated = leads_qs.filter(pk=lead.pk, first_contact_at__isnull=True).update(
        first_contact_at=now,
        speed_to_first_contact_ms=speed_to_contact_ms(lead, now),
        updated_at=now,
    )
    return bool(updated)
