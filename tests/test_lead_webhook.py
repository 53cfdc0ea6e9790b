import hashlib
import hmac
import json

import pytest
from django.apps import apps as django_apps
from django.core.exceptions import ImproperlyConfigured
from django.db import IntegrityError

from apps.common.errors import InvalidSignature, MissingSignature, PayloadTooLarge, RateLimited
from apps.common.rate_limit import FixedWindowRateLimiter, RateBudget
from apps.leads.models import Lead, LeadSource, LeadStatus
from apps.practices.models import Campaign
from apps.webhooks.models import WebhookEvent
from apps.webhooks.pipeline import MetaLeadPipeline, verify_signature

pytestmark = pytest.mark.django_db

URL = "/webhooks/meta-leads"


def _payload(lead_id="lead-123", campaign_id="cmp-123", **fields):
    values = {
        "full_name": ["John Doe"],
        "email": ["John.Doe@Example.com"],
        "phone_number": ["+44 (7700) 900-123"],
    }
    values.update(fields)
    return {
        "leadId": lead_id,
        "campaignId": campaign_id,
        "created_time": "2024-05-01T10:00:00+0000",
        "field_data": [{"name": name, "values": vals} for name, vals in values.items()],
    }


def _post(client, body: bytes, signature=None, **extra):
    headers = {}
    if signature is not None:
        headers["HTTP_X_HUB_SIGNATURE_256"] = signature
    headers.update(extra)
    return client.post(URL, data=body, content_type="application/json", **headers)


def test_webhook_creates_enquiry_lead(client, campaign, salesperson, hmac_signature):
    body = json.dumps(_payload()).encode()

    response = _post(client, body, hmac_signature(body))

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["status"] == "created"
    lead = Lead.objects.get(pk=data["lead_id"])
    assert lead.practice_id == campaign.practice_id
    assert lead.campaign_id == campaign.id
    assert lead.assigned_salesperson_id == salesperson.id
    assert lead.status == LeadStatus.ENQUIRY
    assert lead.source == LeadSource.FACEBOOK_AD
    assert lead.email == "john.doe@example.com"
    assert lead.phone == "+447700900123"
    assert lead.objections == []
    event = WebhookEvent.objects.get(event_id="meta:lead-123")
    assert event.lead_id == lead.id
    assert event.event_type == "lead_created"


def test_duplicate_delivery_returns_first_lead(client, campaign, hmac_signature):
    body = json.dumps(_payload()).encode()
    first = _post(client, body, hmac_signature(body)).json()

    second = _post(client, body, hmac_signature(body))

    assert second.status_code == 200
    data = second.json()
    assert data["status"] == "duplicate"
    assert data["lead_id"] == first["lead_id"]
    assert data["processed_at"]
    assert Lead.objects.count() == 1
    assert WebhookEvent.objects.count() == 1


def test_signature_accepted_without_prefix(client, campaign, hmac_signature):
    body = json.dumps(_payload()).encode()
    bare = hmac_signature(body)[len("sha256="):]

    response = _post(client, body, bare)

    assert response.status_code == 200
    assert response.json()["status"] == "created"


def test_missing_and_invalid_signature_share_error(client, campaign, hmac_signature):
    body = json.dumps(_payload()).encode()

    missing = _post(client, body)
    wrong_secret = _post(client, body, hmac_signature(body, secret="other-secret"))
    not_hex = _post(client, body, "sha256=zz-not-hex")

    for response in (missing, wrong_secret, not_hex):
        assert response.status_code == 401
        assert response.json() == {"ok": False, "error": "INVALID_SIGNATURE"}
    assert not WebhookEvent.objects.exists()
    assert not Lead.objects.exists()


def test_signature_covers_raw_bytes(client, campaign, hmac_signature):
    body = json.dumps(_payload()).encode()
    reformatted = json.dumps(_payload(), indent=2).encode()

    response = _post(client, reformatted, hmac_signature(body))

    assert response.status_code == 401


def test_oversized_body_rejected_before_verification(client, hmac_signature):
    body = b"{" + b" " * (1_048_577 - 2) + b"}"
    assert len(body) == 1_048_577

    response = _post(client, body, hmac_signature(body))

    assert response.status_code == 413
    assert response.json() == {"ok": False, "error": "PAYLOAD_TOO_LARGE"}


def test_body_at_size_limit_reaches_schema_validation(client, hmac_signature):
    body = b"{" + b" " * (1_048_576 - 2) + b"}"
    assert len(body) == 1_048_576

    response = _post(client, body, hmac_signature(body))

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "INVALID_PAYLOAD"}


def test_overlong_lead_id_rejected_before_claim(client, campaign, hmac_signature):
    body = json.dumps(_payload(lead_id="x" * 300)).encode()

    response = _post(client, body, hmac_signature(body))

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "INVALID_PAYLOAD"}
    assert not WebhookEvent.objects.exists()


def test_overlong_phone_rejected(client, campaign, hmac_signature):
    body = json.dumps(_payload(phone_number=["1" * 40])).encode()

    response = _post(client, body, hmac_signature(body))

    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_PHONE"
    assert not Lead.objects.exists()


def test_overlong_full_name_rejected(client, campaign, hmac_signature):
    body = json.dumps(_payload(full_name=["N" * 256])).encode()

    response = _post(client, body, hmac_signature(body))

    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_PAYLOAD"
    assert not WebhookEvent.objects.exists()
    assert not Lead.objects.exists()


def test_schema_violation_is_invalid_payload(client, campaign, hmac_signature):
    payload = _payload()
    del payload["campaignId"]
    body = json.dumps(payload).encode()

    response = _post(client, body, hmac_signature(body))

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "INVALID_PAYLOAD"}


def test_malformed_json_is_invalid_payload(client, hmac_signature):
    body = b"{not json"

    response = _post(client, body, hmac_signature(body))

    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_PAYLOAD"


def test_short_phone_rejected_and_not_claimed(client, campaign, hmac_signature):
    body = json.dumps(_payload(phone_number=["12345"])).encode()

    response = _post(client, body, hmac_signature(body))

    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_PHONE"
    assert not WebhookEvent.objects.exists()
    assert not Lead.objects.exists()


def test_bad_email_rejected(client, campaign, hmac_signature):
    body = json.dumps(_payload(email=["not-an-email"])).encode()

    response = _post(client, body, hmac_signature(body))

    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_EMAIL"


def test_unknown_campaign_is_404_and_retry_succeeds(client, practice, hmac_signature):
    body = json.dumps(_payload(campaign_id="missing")).encode()

    response = _post(client, body, hmac_signature(body))

    assert response.status_code == 404
    assert response.json()["error"] == "CAMPAIGN_NOT_FOUND"
    assert not WebhookEvent.objects.exists()

    Campaign.objects.create(practice=practice, external_id="missing", name="Late")
    retry = _post(client, body, hmac_signature(body))
    assert retry.json()["status"] == "created"


def test_first_value_wins(client, campaign, hmac_signature):
    payload = _payload()
    payload["field_data"].append({"name": "full_name", "values": ["Second Name"]})
    payload["field_data"][0]["values"].append("Ignored Too")
    body = json.dumps(payload).encode()

    response = _post(client, body, hmac_signature(body))

    assert Lead.objects.get(pk=response.json()["lead_id"]).name == "John Doe"


def test_get_not_allowed(client):
    response = client.get(URL)
    assert response.status_code == 405


def test_rate_limit_rejects_101st_request_per_source():
    now = [1000.0]
    limiter = FixedWindowRateLimiter(clock=lambda: now[0])
    pipeline = MetaLeadPipeline(secret="s", limiter=limiter)

    for _ in range(100):
        pipeline.check_rate("203.0.113.9")
    with pytest.raises(RateLimited):
        pipeline.check_rate("203.0.113.9")
    pipeline.check_rate("198.51.100.1")

    now[0] += 60
    pipeline.check_rate("203.0.113.9")


def test_pipeline_keeps_injected_empty_limiter_and_size_cap():
    limiter = FixedWindowRateLimiter()
    assert len(limiter) == 0

    pipeline = MetaLeadPipeline(secret="s", limiter=limiter, max_body_bytes=0)

    assert pipeline.limiter is limiter
    assert pipeline.max_body_bytes == 0
    with pytest.raises(PayloadTooLarge):
        pipeline.process(b"{}", None)


def test_rate_limited_response_uses_forwarded_ip(client, campaign, hmac_signature, monkeypatch):
    monkeypatch.setattr(
        "apps.webhooks.pipeline.RATE_LIMITS", {"webhook": RateBudget("webhook", 1, 60_000)}
    )
    body = json.dumps(_payload()).encode()
    forwarded = {"HTTP_X_FORWARDED_FOR": "203.0.113.9, 10.0.0.1"}

    assert _post(client, body, hmac_signature(body), **forwarded).status_code == 200
    limited = _post(client, body, hmac_signature(body), **forwarded)

    assert limited.status_code == 429
    assert limited.json() == {"ok": False, "error": "RATE_LIMITED"}
    other = _post(client, body, hmac_signature(body), HTTP_X_FORWARDED_FOR="198.51.100.7")
    assert other.json()["status"] == "duplicate"


def test_event_id_unique_at_storage_layer(campaign):
    WebhookEvent.objects.create(
        event_id="meta:dup", provider="META", event_type="lead_created", payload={}, processed_at="2024-01-01T00:00:00Z"
    )
    with pytest.raises(IntegrityError):
        WebhookEvent.objects.create(
            event_id="meta:dup", provider="META", event_type="lead_created", payload={}, processed_at="2024-01-01T00:00:00Z"
        )


def test_verify_signature_constant_time_compare(monkeypatch):
    calls = []
    real = hmac.compare_digest
    monkeypatch.setattr(
        "apps.webhooks.pipeline.hmac.compare_digest",
        lambda a, b: calls.append((a, b)) or real(a, b),
    )
    body = b"{}"
    signature = hmac.new(b"secret", body, hashlib.sha256).hexdigest()

    verify_signature(body, signature, "secret")

    assert len(calls) == 1


def test_startup_requires_app_secret(settings):
    settings.META_APP_SECRET = ""

    with pytest.raises(ImproperlyConfigured):
        django_apps.get_app_config("webhooks").ready()

    settings.META_APP_SECRET = "configured"
    django_apps.get_app_config("webhooks").ready()


@pytest.mark.parametrize(
    "header,error",
    [(None, MissingSignature), ("", MissingSignature), ("sha256=zz-not-hex", InvalidSignature)],
)
def test_rejected_signatures_still_digest_and_compare(monkeypatch, header, error):
    digests, compares = [], []
    real_new, real_compare = hmac.new, hmac.compare_digest
    monkeypatch.setattr(
        "apps.webhooks.pipeline.hmac.new",
        lambda *args, **kwargs: digests.append(args) or real_new(*args, **kwargs),
    )
    monkeypatch.setattr(
        "apps.webhooks.pipeline.hmac.compare_digest",
        lambda a, b: compares.append((a, b)) or real_compare(a, b),
    )

    with pytest.raises(error):
        verify_signature(b'{"leadId": "1"}', header, "secret")

    assert len(digests) == 1
    assert len(compares) == 1
