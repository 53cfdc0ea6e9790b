"""Pipeline and performance metrics, always scoped to visible practices."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from django.db.models import QuerySet, Sum
from django.utils import timezone
from rest_framework.views import APIView

from apps.accounts.decorators import with_account
from apps.accounts.policy import TenantFilter, bind_tenant, resolve_visibility
from apps.appointments.models import Appointment, AppointmentStatus
from apps.common.api import ok_response, parse_datetime_value, parse_int
from apps.common.errors import ValidationError
from apps.leads.models import InteractionType, Lead, LeadStatus
from apps.practices.models import DentalPractice

S = LeadStatus

CONTACTED_STATUSES = [
    S.CONTACTED,
    S.QUALIFIED,
    S.NURTURING,
    S.APPOINTMENT_BOOKED,
    S.CONSULTATION_COMPLETED,
    S.TREATMENT_STARTED,
]
QUALIFIED_STATUSES = CONTACTED_STATUSES[1:]
BOOKED_STATUSES = [S.APPOINTMENT_BOOKED, S.CONSULTATION_COMPLETED, S.TREATMENT_STARTED]
COMPLETED_STATUSES = [S.CONSULTATION_COMPLETED, S.TREATMENT_STARTED]

FUNNEL_STAGES: List[Tuple[str, List[str]]] = [
    ("Enquiry", [S.ENQUIRY]),
    ("New", [S.NEW]),
    ("Contacted", [S.CONTACTED]),
    ("Qualified", [S.QUALIFIED]),
    ("Booked", [S.APPOINTMENT_BOOKED]),
    ("Completed", [S.CONSULTATION_COMPLETED]),
    ("Converted", [S.TREATMENT_STARTED]),
]


def _ratio(numerator, denominator) -> float:
    return float(numerator) / float(denominator) if denominator else 0.0


def _date_range(params) -> Tuple[Any, Any]:
    start = parse_datetime_value(params.get("start"), required=True)
    end = parse_datetime_value(params.get("end"), required=True)
    if start > end:
        raise ValidationError()
    return start, end


def practice_metrics(db, start, end) -> Dict[str, Any]:
    leads: QuerySet = db.leads().filter(created_at__gte=start, created_at__lte=end)
    interactions: QuerySet = db.interactions().filter(created_at__gte=start, created_at__lte=end)

    total = leads.count()
    contacted = leads.filter(status__in=CONTACTED_STATUSES).count()
    qualified = leads.filter(status__in=QUALIFIED_STATUSES).count()
    booked = leads.filter(status__in=BOOKED_STATUSES).count()
    completed = leads.filter(status__in=COMPLETED_STATUSES).count()
    treatments = leads.filter(status=S.TREATMENT_STARTED).count()

    spend = db.campaigns().aggregate(total=Sum("spend"))["total"] or Decimal("0")
    revenue = (
        db.appointments()
        .filter(created_at__gte=start, created_at__lte=end, converted_to_treatment=True)
        .aggregate(total=Sum("estimated_treatment_value"))["total"]
        or Decimal("0")
    )

    return {
        "total_leads": total,
        "new_leads": leads.filter(status__in=[S.ENQUIRY, S.NEW]).count(),
        "contacted": contacted,
        "qualified": qualified,
        "appointments_booked": booked,
        "consultations_completed": completed,
        "treatments_started": treatments,
        "lost_leads": leads.filter(status=S.LOST).count(),
        "contact_rate": _ratio(contacted, total),
        "qualification_rate": _ratio(qualified, contacted),
        "booking_rate": _ratio(booked, qualified),
        "show_rate": _ratio(completed, booked),
        "conversion_rate": _ratio(treatments, completed),
        "total_spend": float(spend),
        "total_revenue": float(revenue),
        "roi": _ratio(revenue, spend),
        "cost_per_lead": _ratio(spend, total),
        "cost_per_appointment": _ratio(spend, booked),
        "total_calls": interactions.filter(
            type__in=[InteractionType.CALL_OUTBOUND, InteractionType.CALL_INBOUND]
        ).count(),
        "total_emails": interactions.filter(
            type__in=[InteractionType.EMAIL_SENT, InteractionType.EMAIL_RECEIVED]
        ).count(),
        "total_sms": interactions.filter(
            type__in=[InteractionType.SMS_SENT, InteractionType.SMS_RECEIVED]
        ).count(),
    }


def funnel(tenant_filter: TenantFilter, start, end) -> List[Dict[str, Any]]:
    leads = tenant_filter.apply(Lead.objects.filter(created_at__gte=start, created_at__lte=end))
    return [
        {"stage": name, "count": leads.filter(status__in=statuses).count()}
        for name, statuses in FUNNEL_STAGES
    ]


def dashboard_summary(tenant_filter: TenantFilter) -> Dict[str, Any]:
    now = timezone.now()
    leads = tenant_filter.apply(Lead.objects.all())
    appointments = tenant_filter.apply(Appointment.objects.all())
    practices = tenant_filter.apply(DentalPractice.objects.all(), field="id")
    return {
        "total_leads_30d": leads.filter(created_at__gte=now - timedelta(days=30)).count(),
        "new_leads_7d": leads.filter(created_at__gte=now - timedelta(days=7)).count(),
        "appointments_30d": appointments.filter(created_at__gte=now - timedelta(days=30)).count(),
        "upcoming_appointments": appointments.filter(
            date_time__gte=now, status=AppointmentStatus.SCHEDULED
        ).count(),
        "total_practices": practices.count(),
    }


class PracticeMetricsView(APIView):
    @with_account
    def get(self, request):
        params = request.query_params
        db = bind_tenant(request.account, params.get("practice_id"))
        start, end = _date_range(params)
        return ok_response(practice_metrics(db, start, end))


class FunnelView(APIView):
    @with_account
    def get(self, request):
        params = request.query_params
        tenant_filter = resolve_visibility(request.account, parse_int(params.get("practice_id")))
        start, end = _date_range(params)
        return ok_response(funnel(tenant_filter, start, end))


class DashboardSummaryView(APIView):
    @with_account
    def get(self, request):
        return ok_response(dashboard_summary(resolve_visibility(request.account)))
