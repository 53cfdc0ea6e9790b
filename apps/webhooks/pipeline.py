"""Meta lead-ads ingestion: verify, deduplicate and materialize a Lead.

The unique ``WebhookEvent.event_id`` is the only arbiter of "already
processed". Claiming the event and creating the Lead share one transaction,
so a delivery rejected after the claim (bad contact data, unknown campaign)
leaves nothing behind and the provider's retry is processed normally.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import IntegrityError, transaction

from apps.common.errors import (
    CampaignNotFound,
    ConfigurationError,
    InvalidPayload,
    InvalidSignature,
    MissingSignature,
    PayloadTooLarge,
    RateLimited,
)
from apps.common.rate_limit import RATE_LIMITS, FixedWindowRateLimiter, get_rate_limiter
from apps.common.safe_log import safe_log
from apps.common.utils import now_utc
from apps.leads.models import Lead, LeadSource, LeadStatus
from apps.leads.utils import clean_name, normalize_email, normalize_phone_number
from apps.practices.models import Campaign
from apps.webhooks.models import WebhookEvent, WebhookProvider
from apps.webhooks.serializers import MetaLeadSerializer

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="
EVENT_TYPE = "lead_created"
# Stand-in for an absent or undecodable signature; never equals a real HMAC.
_UNSET_DIGEST = bytes(hashlib.sha256().digest_size)


@dataclass(frozen=True)
class WebhookResult:
    status: str
    lead_id: Optional[int]
    processed_at: Optional[datetime] = None

    @property
    def duplicate(self) -> bool:
        return self.status == "duplicate"


def verify_signature(body: bytes, header: Optional[str], secret: str) -> None:
    """Check ``header`` against HMAC-SHA256 of the raw ``body``.

    Raises ``MissingSignature`` or ``InvalidSignature``; both surface as the
    same error code. The digest and the comparison run on every path, so a
    missing header takes as long as a wrong one.
    """

    if not secret:
        raise ConfigurationError("META_APP_SECRET is not configured")

    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    received = _UNSET_DIGEST
    if header:
        received_hex = header.strip()
        if received_hex.startswith(SIGNATURE_PREFIX):
            received_hex = received_hex[len(SIGNATURE_PREFIX):]
        try:
            received = bytes.fromhex(received_hex)
        except ValueError:
            received = _UNSET_DIGEST

    matches = hmac.compare_digest(received, expected)
    if not header:
        raise MissingSignature()
    if not matches:
        raise InvalidSignature()


def first_field_value(field_data: List[Dict[str, Any]], name: str) -> str:
    for item in field_data:
        if item["name"] == name:
            values = item["values"]
            return values[0] if values else ""
    return ""


class MetaLeadPipeline:
    """Turns one signed Meta delivery into a Lead, at most once per lead id."""

    provider = WebhookProvider.META

    def __init__(
        self,
        secret: Optional[str] = None,
        limiter: Optional[FixedWindowRateLimiter] = None,
        max_body_bytes: Optional[int] = None,
    ) -> None:
        self.secret = settings.META_APP_SECRET if secret is None else secret
        # An empty limiter is falsy (it defines __len__), so test for None.
        self.limiter = limiter if limiter is not None else get_rate_limiter()
        self.max_body_bytes = (
            max_body_bytes
            if max_body_bytes is not None
            else getattr(settings, "WEBHOOK_MAX_BODY_BYTES", 1_048_576)
        )

    def check_size(self, declared_length: Optional[str]) -> None:
        try:
            declared = int(declared_length or 0)
        except ValueError:
            declared = 0
        if declared > self.max_body_bytes:
            raise PayloadTooLarge()

    def check_rate(self, source_ip: str) -> None:
        budget = RATE_LIMITS["webhook"]
        if not self.limiter.allow(budget.key(source_ip), budget.max_requests, budget.window_ms):
            safe_log("webhook.rate_limited", {"source": source_ip}, level=logging.WARNING)
            raise RateLimited()

    def parse(self, body: bytes) -> Dict[str, Any]:
        try:
            data = json.loads(body)
        except (UnicodeDecodeError, ValueError) as exc:
            raise InvalidPayload() from exc
        serializer = MetaLeadSerializer(data=data)
        if not serializer.is_valid():
            raise InvalidPayload()
        return serializer.validated_data

    def process(
        self,
        body: bytes,
        signature: Optional[str],
        *,
        source_ip: str = "unknown",
        declared_length: Optional[str] = None,
    ) -> WebhookResult:
        self.check_size(declared_length)
        if len(body) > self.max_body_bytes:
            raise PayloadTooLarge()
        self.check_rate(source_ip)

        try:
            verify_signature(body, signature, self.secret)
        except MissingSignature:
            safe_log("webhook.missing_signature", {"source": source_ip}, level=logging.WARNING)
            raise
        except InvalidSignature:
            safe_log("webhook.signature_mismatch", {"source": source_ip}, level=logging.WARNING)
            raise

        try:
            payload = self.parse(body)
        except InvalidPayload:
            safe_log("webhook.invalid_payload", {"source": source_ip}, level=logging.WARNING)
            raise

        with transaction.atomic():
            event_id = f"{self.provider.lower()}:{payload['leadId']}"
            event = self._claim(event_id, json.loads(body))
            if event is None:
                existing = WebhookEvent.objects.filter(event_id=event_id).first()
                logger.info("webhook.duplicate", extra={"event_id": event_id})
                return WebhookResult(
                    status="duplicate",
                    lead_id=existing.lead_id if existing else None,
                    processed_at=existing.processed_at if existing else None,
                )

            lead = self._materialize(payload)
            event.lead = lead
            event.save(update_fields=["lead", "updated_at"])

        safe_log(
            "webhook.lead_created",
            {"id": lead.id, "practiceId": lead.practice_id, "source": lead.source},
        )
        return WebhookResult(status="created", lead_id=lead.id, processed_at=event.processed_at)

    def _claim(self, event_id: str, raw_payload: Dict[str, Any]) -> Optional[WebhookEvent]:
        try:
            with transaction.atomic():
                return WebhookEvent.objects.create(
                    event_id=event_id,
                    provider=self.provider,
                    event_type=EVENT_TYPE,
                    payload=raw_payload,
                    processed_at=now_utc(),
                )
        except IntegrityError:
            return None

    def _materialize(self, payload: Dict[str, Any]) -> Lead:
        field_data = payload["field_data"]
        name = clean_name(first_field_value(field_data, "full_name"))
        phone = normalize_phone_number(first_field_value(field_data, "phone_number"))
        email = normalize_email(first_field_value(field_data, "email"))

        campaign = (
            Campaign.objects.select_related("practice")
            .filter(external_id=payload["campaignId"])
            .first()
        )
        if campaign is None:
            raise CampaignNotFound()

        # Pre-tenant: the campaign decides the tenant, so the gateway is bypassed here.
        return Lead.objects.create(
            practice_id=campaign.practice_id,
            campaign=campaign,
            assigned_salesperson_id=campaign.practice.assigned_salesperson_id,
            name=name,
            email=email,
            phone=phone,
            source=LeadSource.FACEBOOK_AD,
            status=LeadStatus.ENQUIRY,
            interested_treatments=[],
            pain_points=[],
            motivations=[],
            objections=[],
        )
