"""Lead and interaction API endpoints."""

from __future__ import annotations

from django.db import transaction
from django.db.models import Q
from rest_framework import status
from rest_framework.views import APIView

from apps.accounts.decorators import require_roles, with_account
from apps.accounts.models import Role
from apps.accounts.policy import authorize_lead_creation, bind_lead, resolve_visibility
from apps.ai.analysis import summarize_interactions
from apps.appointments.serializers import serialize_appointment
from apps.common.api import (
    BudgetThrottle,
    ok_response,
    parse_choice,
    parse_decimal,
    parse_int,
    parse_str_list,
    parse_text,
)
from apps.common.errors import ValidationError
from apps.common.safe_log import safe_log
from apps.common.utils import now_utc
from apps.leads.lifecycle import OUTBOUND_CONTACT_TYPES, record_first_contact, status_change_fields
from apps.leads.models import InteractionType, Lead, LeadSource, LeadStatus, LostReason, Urgency
from apps.leads.serializers import serialize_interaction, serialize_lead
from apps.leads.utils import MAX_NAME_LENGTH, normalize_email, normalize_phone_number
from apps.workers.tasks import process_interaction

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
SUBJECT_MAX_LENGTH = 255
TREATMENT_MAX_LENGTH = 100
RECORDING_URL_MAX_LENGTH = 500


def queue_enrichment(interaction_id: int) -> None:
    transaction.on_commit(lambda: process_interaction.delay(interaction_id))


class LeadListCreateView(APIView):
    """List visible leads or create one for a practice."""

    throttle_classes = [BudgetThrottle]
    rate_budget = "lead_search"
    rate_budget_methods = {"GET"}

    @with_account
    def get(self, request):
        params = request.query_params
        practice_id = parse_int(params.get("practice_id"))
        tenant_filter = resolve_visibility(request.account, practice_id)

        qs = tenant_filter.apply(Lead.objects.all())
        lead_status = parse_choice(params.get("status"), LeadStatus)
        if lead_status:
            qs = qs.filter(status=lead_status)
        search = (params.get("search") or "").strip()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(email__icontains=search))

        page = parse_int(params.get("page"), default=1, minimum=1)
        limit = parse_int(params.get("limit"), default=DEFAULT_PAGE_SIZE, minimum=1, maximum=MAX_PAGE_SIZE)
        offset = (page - 1) * limit
        total = qs.count()
        leads = qs.order_by("-created_at")[offset : offset + limit]
        return ok_response(
            {
                "leads": [serialize_lead(lead) for lead in leads],
                "total": total,
                "page": page,
                "limit": limit,
            }
        )

    @require_roles([Role.ADMIN, Role.SALESPERSON])
    def post(self, request):
        payload = request.data or {}
        db = authorize_lead_creation(request.account, payload.get("practice_id"))

        name = parse_text(payload.get("name"), required=True, max_length=MAX_NAME_LENGTH)
        email = normalize_email(parse_text(payload.get("email"), required=True))
        phone = normalize_phone_number(parse_text(payload.get("phone"), required=True))
        source = parse_choice(payload.get("source"), LeadSource, required=True)
        urgency = parse_choice(payload.get("urgency"), Urgency) or Urgency.MEDIUM
        treatments = parse_str_list(payload.get("interested_treatments"), max_item_length=TREATMENT_MAX_LENGTH)
        notes = parse_text(payload.get("notes"))

        with transaction.atomic():
            lead = db.create_lead(
                name=name,
                email=email,
                phone=phone,
                source=source,
                status=LeadStatus.NEW,
                urgency=urgency,
                interested_treatments=treatments,
                assigned_salesperson=request.user,
                pain_points=[],
                motivations=[],
                objections=[],
            )
            if notes:
                db.create_interaction(
                    lead=lead,
                    author=request.user,
                    type=InteractionType.NOTE,
                    body=notes,
                )

        safe_log("lead.created", {"id": lead.id, "practiceId": lead.practice_id, "source": lead.source})
        return ok_response(serialize_lead(lead), status_code=status.HTTP_201_CREATED)


class LeadDetailView(APIView):
    """Fetch or edit one lead."""

    @with_account
    def get(self, request, lead_id: int):
        db, lead = bind_lead(request.account, lead_id)
        data = serialize_lead(lead)
        data["interactions"] = [
            serialize_interaction(item)
            for item in db.interactions().filter(lead=lead).order_by("-created_at")[:20]
        ]
        data["appointments"] = [
            serialize_appointment(item)
            for item in db.appointments()
            .filter(lead=lead)
            .select_related("treatment_type")
            .order_by("-date_time")
        ]
        return ok_response(data)

    @with_account
    def patch(self, request, lead_id: int):
        db, lead = bind_lead(request.account, lead_id)
        payload = request.data or {}
        updates = {}

        if "name" in payload:
            updates["name"] = parse_text(payload.get("name"), required=True, max_length=MAX_NAME_LENGTH)
        if "email" in payload:
            updates["email"] = normalize_email(parse_text(payload.get("email"), required=True))
        if "phone" in payload:
            updates["phone"] = normalize_phone_number(parse_text(payload.get("phone"), required=True))
        if "urgency" in payload:
            updates["urgency"] = parse_choice(payload.get("urgency"), Urgency, required=True)
        if "interested_treatments" in payload:
            updates["interested_treatments"] = parse_str_list(payload.get("interested_treatments"), max_item_length=TREATMENT_MAX_LENGTH)
        if "estimated_budget" in payload:
            updates["estimated_budget"] = parse_decimal(payload.get("estimated_budget"))
        if "recording_consent" in payload:
            consent = payload.get("recording_consent")
            if not isinstance(consent, bool):
                raise ValidationError()
            updates["recording_consent"] = consent
            updates["recording_consent_at"] = now_utc() if consent else None

        if updates:
            db.update_lead(lead, **updates)
        return ok_response(serialize_lead(lead))


class LeadStatusView(APIView):
    """Move a lead through the pipeline and log the change."""

    @with_account
    def post(self, request, lead_id: int):
        db, lead = bind_lead(request.account, lead_id)
        payload = request.data or {}
        new_status = parse_choice(payload.get("status"), LeadStatus, required=True)
        lost_reason = parse_choice(payload.get("lost_reason"), LostReason)
        notes = parse_text(payload.get("notes"))
        now = now_utc()

        with transaction.atomic():
            # Set-once timestamps are decided on the locked row, not the bound copy.
            lead = db.lock_lead(lead.pk)
            old_status = lead.status
            body = f"Status changed from {old_status} to {new_status}"
            if notes:
                body = f"{body}: {notes}"
            db.update_lead(lead, **status_change_fields(lead, new_status, now=now, lost_reason=lost_reason))
            db.create_interaction(
                lead=lead,
                author=request.user,
                type=InteractionType.STATUS_CHANGE,
                body=body,
                metadata={"old_status": old_status, "new_status": new_status},
            )

        safe_log(
            "lead.status_changed",
            {"id": lead.id, "practiceId": lead.practice_id, "status": new_status},
        )
        return ok_response(serialize_lead(lead))


class LeadInteractionsView(APIView):
    """List or log interactions for a lead."""

    @with_account
    def get(self, request, lead_id: int):
        db, lead = bind_lead(request.account, lead_id)
        limit = parse_int(
            request.query_params.get("limit"), default=DEFAULT_PAGE_SIZE, minimum=1, maximum=MAX_PAGE_SIZE
        )
        interactions = db.interactions().filter(lead=lead).order_by("-created_at")[:limit]
        return ok_response([serialize_interaction(item) for item in interactions])

    @with_account
    def post(self, request, lead_id: int):
        db, lead = bind_lead(request.account, lead_id)
        payload = request.data or {}
        interaction_type = parse_choice(payload.get("type"), InteractionType, required=True)
        duration = parse_int(payload.get("call_duration_seconds"), minimum=0)
        recording_url = parse_text(payload.get("call_recording_url"), max_length=RECORDING_URL_MAX_LENGTH) or None

        with transaction.atomic():
            interaction = db.create_interaction(
                lead=lead,
                author=request.user,
                type=interaction_type,
                subject=parse_text(payload.get("subject"), max_length=SUBJECT_MAX_LENGTH),
                body=parse_text(payload.get("body")),
                call_duration_seconds=duration,
                call_recording_url=recording_url,
            )
            if interaction_type in OUTBOUND_CONTACT_TYPES:
                record_first_contact(db.leads(), lead, now=now_utc())
            queue_enrichment(interaction.id)

        safe_log(
            "interaction.created",
            {"id": interaction.id, "practiceId": interaction.practice_id, "type": interaction.type},
        )
        return ok_response(serialize_interaction(interaction), status_code=status.HTTP_201_CREATED)


class LeadSummaryView(APIView):
    """Summarize recent interactions onto the lead."""

    @with_account
    def post(self, request, lead_id: int):
        db, lead = bind_lead(request.account, lead_id)
        recent = list(db.interactions().filter(lead=lead).order_by("-created_at")[:10])
        summary = summarize_interactions(recent)
        db.update_lead(lead, conversation_summary=summary)
        return ok_response({"summary": summary})
