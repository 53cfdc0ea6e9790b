"""Celery tasks for interaction enrichment and data retention."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.ai.analysis import AIAnalysisError, analyze_interaction
from apps.ai.transcription import generate_transcript
from apps.common.safe_log import safe_log
from apps.common.utils import merge_unique
from apps.leads.models import EnrichmentStatus, Interaction
from apps.practices.gateway import TenantDB, issue_scope

logger = logging.getLogger(__name__)

ENRICHMENT_MAX_ATTEMPTS = int(getattr(settings, "ENRICHMENT_MAX_ATTEMPTS", 3))
ENRICHMENT_INITIAL_DELAY = int(getattr(settings, "ENRICHMENT_INITIAL_DELAY", 30))
ENRICHMENT_MAX_DELAY = int(getattr(settings, "ENRICHMENT_MAX_DELAY", 600))
DATA_RETENTION_DAYS = int(getattr(settings, "DATA_RETENTION_DAYS", 90))


def enrichment_backoff(attempt: int) -> int:
    return min(ENRICHMENT_INITIAL_DELAY * (2 ** (attempt - 1)), ENRICHMENT_MAX_DELAY)


@shared_task(bind=True, max_retries=0)
def process_interaction(self, interaction_id: int) -> str:
    """Transcribe and analyse an interaction, then fold insights into its lead.

    Failures never touch the interaction's own content; they are counted on
    the row and retried with backoff until ENRICHMENT_MAX_ATTEMPTS, after
    which the interaction is left with ``enrichment_status=failed``.
    """

    interaction = Interaction.objects.filter(pk=interaction_id).first()
    if interaction is None:
        safe_log("interaction.enrichment_missing", {"id": interaction_id}, level=logging.WARNING)
        return "missing"
    if interaction.enrichment_status != EnrichmentStatus.PENDING:
        return interaction.enrichment_status

    db = TenantDB(issue_scope(interaction.practice_id))
    try:
        if interaction.call_recording_url and not interaction.call_transcript:
            interaction.call_transcript = generate_transcript(interaction.call_recording_url)
            interaction.save(update_fields=["call_transcript", "updated_at"])
        analysis = analyze_interaction(interaction.call_transcript or interaction.body or "")
    except AIAnalysisError as exc:
        return _record_failure(interaction, exc)

    with transaction.atomic():
        interaction.ai_summary = analysis.summary
        interaction.sentiment_score = analysis.sentiment
        interaction.key_topics = analysis.key_topics
        interaction.next_best_action = analysis.next_best_action
        interaction.enrichment_status = EnrichmentStatus.DONE
        interaction.enrichment_attempts += 1
        interaction.enrichment_error = ""
        interaction.save(
            update_fields=[
                "ai_summary",
                "sentiment_score",
                "key_topics",
                "next_best_action",
                "enrichment_status",
                "enrichment_attempts",
                "enrichment_error",
                "updated_at",
            ]
        )

        if analysis.objections or analysis.motivations:
            lead = db.lock_lead(interaction.lead_id)
            db.update_lead(
                lead,
                objections=merge_unique(lead.objections, analysis.objections),
                motivations=merge_unique(lead.motivations, analysis.motivations),
            )

    safe_log("interaction.enriched", {"id": interaction.id, "type": interaction.type})
    return "done"


def _record_failure(interaction: Interaction, exc: Exception) -> str:
    interaction.enrichment_attempts += 1
    interaction.enrichment_error = str(exc)
    attempt = interaction.enrichment_attempts
    if attempt >= ENRICHMENT_MAX_ATTEMPTS:
        interaction.enrichment_status = EnrichmentStatus.FAILED
    interaction.save(
        update_fields=["enrichment_status", "enrichment_attempts", "enrichment_error", "updated_at"]
    )

    if interaction.enrichment_status == EnrichmentStatus.FAILED:
        safe_log(
            "interaction.enrichment_failed",
            {"id": interaction.id, "attempt": attempt},
            level=logging.ERROR,
        )
        return "failed"

    countdown = enrichment_backoff(attempt)
    safe_log(
        "interaction.enrichment_retry",
        {"id": interaction.id, "attempt": attempt, "countdown": countdown},
        level=logging.WARNING,
    )
    process_interaction.apply_async(
        args=[interaction.id],
        countdown=countdown,
        task_id=f"interaction-enrichment-{interaction.id}-retry-{attempt}",
    )
    return "rescheduled"


@shared_task
def enforce_data_retention() -> int:
    """Drop call recording links older than DATA_RETENTION_DAYS."""
    cutoff = timezone.now() - timedelta(days=DATA_RETENTION_DAYS)
    count = Interaction.objects.filter(
        call_recording_url__isnull=False,
        created_at__lt=cutoff,
    ).update(call_recording_url=None, updated_at=timezone.now())
    safe_log("data_retention.complete", {"count": count})
    return count
