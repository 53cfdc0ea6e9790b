"""Domain models for the webhooks module."""

from django.db import models

from apps.common.models import TimeStampedModel
from apps.leads.models import Lead


class WebhookProvider(models.TextChoices):
    META = "META", "Meta lead ads"


class WebhookEvent(TimeStampedModel):
    """Idempotency ledger: one row per distinct provider event, kept forever.

    ``event_id`` is ``<provider>:<provider lead id>``; its unique constraint
    is what decides whether a delivery was already processed.
    """

    event_id = models.CharField(max_length=255, unique=True)
    provider = models.CharField(max_length=16, choices=WebhookProvider.choices)
    event_type = models.CharField(max_length=64)
    payload = models.JSONField()
    processed_at = models.DateTimeField()
    lead = models.ForeignKey(
        Lead,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="webhook_events",
    )

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.event_id
