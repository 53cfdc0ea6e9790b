"""JSON shapes for leads and interactions."""

from __future__ import annotations

from typing import Any, Dict, Optional

from apps.leads.models import Interaction, Lead


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _decimal(value) -> Optional[str]:
    return str(value) if value is not None else None


def serialize_lead(lead: Lead) -> Dict[str, Any]:
    return {
        "id": lead.id,
        "practice_id": lead.practice_id,
        "campaign_id": lead.campaign_id,
        "assigned_salesperson_id": lead.assigned_salesperson_id,
        "name": lead.name,
        "email": lead.email,
        "phone": lead.phone,
        "source": lead.source,
        "status": lead.status,
        "urgency": lead.urgency,
        "interested_treatments": list(lead.interested_treatments or []),
        "pain_points": list(lead.pain_points or []),
        "motivations": list(lead.motivations or []),
        "objections": list(lead.objections or []),
        "estimated_budget": _decimal(lead.estimated_budget),
        "promoted_to_lead_at": _iso(lead.promoted_to_lead_at),
        "first_contact_at": _iso(lead.first_contact_at),
        "speed_to_first_contact_ms": lead.speed_to_first_contact_ms,
        "qualified_at": _iso(lead.qualified_at),
        "appointment_booked_at": _iso(lead.appointment_booked_at),
        "lost_at": _iso(lead.lost_at),
        "lost_reason": lead.lost_reason or None,
        "recording_consent": lead.recording_consent,
        "recording_consent_at": _iso(lead.recording_consent_at),
        "conversation_summary": lead.conversation_summary,
        "created_at": _iso(lead.created_at),
        "updated_at": _iso(lead.updated_at),
    }


def serialize_interaction(interaction: Interaction) -> Dict[str, Any]:
    return {
        "id": interaction.id,
        "lead_id": interaction.lead_id,
        "practice_id": interaction.practice_id,
        "author_id": interaction.author_id,
        "type": interaction.type,
        "subject": interaction.subject,
        "body": interaction.body,
        "call_duration_seconds": interaction.call_duration_seconds,
        "call_recording_url": interaction.call_recording_url,
        "call_transcript": interaction.call_transcript,
        "metadata": interaction.metadata,
        "ai_summary": interaction.ai_summary,
        "sentiment_score": interaction.sentiment_score,
        "key_topics": list(interaction.key_topics or []),
        "next_best_action": interaction.next_best_action,
        "enrichment_status": interaction.enrichment_status,
        "created_at": _iso(interaction.created_at),
    }
