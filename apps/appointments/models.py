"""Domain models for the appointments module."""

from django.conf import settings
from django.db import models

from apps.common.models import TimeStampedModel
from apps.leads.models import Lead
from apps.practices.models import DentalPractice, TreatmentType


class AppointmentStatus(models.TextChoices):
    """Possible lifecycle states for an appointment."""

    SCHEDULED = "SCHEDULED", "Scheduled"
    ATTENDED = "ATTENDED", "Attended"
    NO_SHOW = "NO_SHOW", "No show"
    CANCELLED = "CANCELLED", "Cancelled"


class AppointmentType(models.TextChoices):
    CONSULTATION = "CONSULTATION", "Consultation"
    TREATMENT = "TREATMENT", "Treatment"
    FOLLOW_UP = "FOLLOW_UP", "Follow-up"


class ConfirmationSource(models.TextChoices):
    MANUAL_SALESPERSON = "MANUAL_SALESPERSON", "Salesperson"
    MANUAL_PRACTICE = "MANUAL_PRACTICE", "Practice"
    PATIENT_PORTAL = "PATIENT_PORTAL", "Patient portal"


class AppointmentQuerySet(models.QuerySet):
    """Custom queryset helpers for appointments."""

    def scheduled(self):
        return self.filter(status=AppointmentStatus.SCHEDULED)

    def between(self, start, end):
        return self.filter(date_time__gte=start, date_time__lte=end)


class Appointment(TimeStampedModel):
    """A consultation booked for a lead; the outcome is recorded exactly once."""

    practice = models.ForeignKey(
        DentalPractice, on_delete=models.CASCADE, related_name="appointments"
    )
    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name="appointments")
    treatment_type = models.ForeignKey(
        TreatmentType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="appointments",
    )
    booked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="booked_appointments",
    )
    date_time = models.DateTimeField(db_index=True)
    type = models.CharField(
        max_length=16, choices=AppointmentType.choices, default=AppointmentType.CONSULTATION
    )
    status = models.CharField(
        max_length=16,
        choices=AppointmentStatus.choices,
        default=AppointmentStatus.SCHEDULED,
    )
    deposit_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    preparation_notes = models.TextField(blank=True)

    showed_up = models.BooleanField(null=True, blank=True)
    no_show_reason = models.CharField(max_length=255, blank=True)
    consultation_notes = models.TextField(blank=True)
    converted_to_treatment = models.BooleanField(default=False)
    estimated_treatment_value = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True
    )
    outcome_recorded_at = models.DateTimeField(null=True, blank=True)
    confirmation_source = models.CharField(
        max_length=24, choices=ConfirmationSource.choices, blank=True
    )
    confirmed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="confirmed_appointments",
    )

    objects = AppointmentQuerySet.as_manager()

    class Meta:
        ordering = ["date_time"]

    @property
    def has_outcome(self) -> bool:
        return self.outcome_recorded_at is not None
