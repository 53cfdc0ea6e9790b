"""Practice listing for the dashboard."""

from __future__ import annotations

from django.db.models import Count
from rest_framework.views import APIView

from apps.accounts.decorators import with_account
from apps.accounts.policy import resolve_visibility
from apps.common.api import ok_response
from apps.practices.models import DentalPractice


class PracticeListView(APIView):
    """Practices the caller may see, with lead and appointment counts."""

    @with_account
    def get(self, request):
        tenant_filter = resolve_visibility(request.account)
        practices = (
            tenant_filter.apply(DentalPractice.objects.all(), field="id")
            .annotate(
                lead_count=Count("leads", distinct=True),
                appointment_count=Count("appointments", distinct=True),
            )
            .order_by("name")
        )
        data = [
            {
                "id": practice.id,
                "name": practice.name,
                "city": practice.city,
                "status": practice.status,
                "assigned_salesperson_id": practice.assigned_salesperson_id,
                "lead_count": practice.lead_count,
                "appointment_count": practice.appointment_count,
            }
            for practice in practices
        ]
        return ok_response(data)
