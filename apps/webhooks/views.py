"""Webhook endpoints such as lead ingestion."""

from __future__ import annotations

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from apps.common.errors import ServiceError
from apps.common.rate_limit import client_ip
from apps.common.utils import minimal_error, minimal_ok
from apps.webhooks.pipeline import MetaLeadPipeline


@csrf_exempt
@require_POST
def meta_lead_webhook(request: HttpRequest) -> JsonResponse:
    pipeline = MetaLeadPipeline()
    try:
        # Size is checked from the header before the body is read.
        pipeline.check_size(request.META.get("CONTENT_LENGTH"))
        result = pipeline.process(
            request.body,
            request.headers.get("X-Hub-Signature-256"),
            source_ip=client_ip(request),
        )
    except ServiceError as exc:
        return minimal_error(exc.code, exc.status_code)

    if result.duplicate:
        return minimal_ok(
            status="duplicate",
            lead_id=result.lead_id,
            processed_at=result.processed_at.isoformat() if result.processed_at else None,
        )
    return minimal_ok(status="created", lead_id=result.lead_id)
