"""Leads and the interactions logged against them."""

from django.conf import settings
from django.db import models

from apps.common.fields import CompatArrayField
from apps.common.models import TimeStampedModel
from apps.practices.models import Campaign, DentalPractice


class LeadSource(models.TextChoices):
    MANUAL = "MANUAL", "Manual entry"
    FACEBOOK_AD = "FACEBOOK_AD", "Facebook ad"
    INSTAGRAM_AD = "INSTAGRAM_AD", "Instagram ad"
    GOOGLE_AD = "GOOGLE_AD", "Google ad"
    REFERRAL = "REFERRAL", "Referral"
    ORGANIC = "ORGANIC", "Organic"
    WEBSITE = "WEBSITE", "Website"
    WALK_IN = "WALK_IN", "Walk-in"
    OTHER = "OTHER", "Other"


class LeadStatus(models.TextChoices):
    """Pipeline stages in order, followed by the terminal side states."""

    ENQUIRY = "ENQUIRY", "Enquiry"
    NEW = "NEW", "New"
    CONTACTED = "CONTACTED", "Contacted"
    QUALIFIED = "QUALIFIED", "Qualified"
    NURTURING = "NURTURING", "Nurturing"
    APPOINTMENT_BOOKED = "APPOINTMENT_BOOKED", "Appointment booked"
    CONSULTATION_COMPLETED = "CONSULTATION_COMPLETED", "Consultation completed"
    TREATMENT_STARTED = "TREATMENT_STARTED", "Treatment started"
    LOST = "LOST", "Lost"
    UNQUALIFIED = "UNQUALIFIED", "Unqualified"


class LostReason(models.TextChoices):
    PRICE = "PRICE", "Price"
    TIMING = "TIMING", "Timing"
    COMPETITOR = "COMPETITOR", "Went elsewhere"
    NO_RESPONSE = "NO_RESPONSE", "No response"
    NOT_SUITABLE = "NOT_SUITABLE", "Not suitable"
    OTHER = "OTHER", "Other"


class Urgency(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"


class Lead(TimeStampedModel):
    """A prospective patient moving through the acquisition pipeline."""

    practice = models.ForeignKey(
        DentalPractice, on_delete=models.CASCADE, related_name="leads"
    )
    campaign = models.ForeignKey(
        Campaign, on_delete=models.SET_NULL, null=True, blank=True, related_name="leads"
    )
    assigned_salesperson = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_leads",
    )
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32)
    source = models.CharField(max_length=20, choices=LeadSource.choices)
    status = models.CharField(
        max_length=32, choices=LeadStatus.choices, default=LeadStatus.NEW, db_index=True
    )
    urgency = models.CharField(max_length=8, choices=Urgency.choices, default=Urgency.MEDIUM)
    interested_treatments = CompatArrayField(models.CharField(max_length=100), blank=True, default=list)
    pain_points = CompatArrayField(models.CharField(max_length=255), blank=True, default=list)
    motivations = CompatArrayField(models.CharField(max_length=255), blank=True, default=list)
    objections = CompatArrayField(models.CharField(max_length=255), blank=True, default=list)
    estimated_budget = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    promoted_to_lead_at = models.DateTimeField(null=True, blank=True)
    first_contact_at = models.DateTimeField(null=True, blank=True)
    speed_to_first_contact_ms = models.BigIntegerField(null=True, blank=True)
    qualified_at = models.DateTimeField(null=True, blank=True)
    appointment_booked_at = models.DateTimeField(null=True, blank=True)
    lost_at = models.DateTimeField(null=True, blank=True)
    lost_reason = models.CharField(max_length=20, choices=LostReason.choices, blank=True)

    recording_consent = models.BooleanField(default=False)
    recording_consent_at = models.DateTimeField(null=True, blank=True)
    conversation_summary = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Lead {self.pk} ({self.status})"


class InteractionType(models.TextChoices):
    CALL_OUTBOUND = "CALL_OUTBOUND", "Outbound call"
    CALL_INBOUND = "CALL_INBOUND", "Inbound call"
    EMAIL_SENT = "EMAIL_SENT", "Email sent"
    EMAIL_RECEIVED = "EMAIL_RECEIVED", "Email received"
    SMS_SENT = "SMS_SENT", "SMS sent"
    SMS_RECEIVED = "SMS_RECEIVED", "SMS received"
    NOTE = "NOTE", "Note"
    STATUS_CHANGE = "STATUS_CHANGE", "Status change"
    APPOINTMENT_CREATED = "APPOINTMENT_CREATED", "Appointment created"


class EnrichmentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    DONE = "done", "Done"
    FAILED = "failed", "Failed"


class Interaction(TimeStampedModel):
    """One logged contact event. Only the enrichment fields change after creation."""

    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name="interactions")
    practice = models.ForeignKey(
        DentalPractice, on_delete=models.CASCADE, related_name="interactions"
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="interactions",
    )
    type = models.CharField(max_length=24, choices=InteractionType.choices)
    subject = models.CharField(max_length=255, blank=True)
    body = models.TextField(blank=True)
    call_duration_seconds = models.PositiveIntegerField(null=True, blank=True)
    call_recording_url = models.URLField(max_length=500, null=True, blank=True)
    call_transcript = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    ai_summary = models.TextField(blank=True)
    sentiment_score = models.FloatField(null=True, blank=True)
    key_topics = CompatArrayField(models.CharField(max_length=100), blank=True, default=list)
    next_best_action = models.CharField(max_length=255, blank=True)
    enrichment_status = models.CharField(
        max_length=8, choices=EnrichmentStatus.choices, default=EnrichmentStatus.PENDING
    )
    enrichment_attempts = models.PositiveIntegerField(default=0)
    enrichment_error = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at"]
