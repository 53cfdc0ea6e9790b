"""Dental practices (tenants) and the records hanging directly off them."""

from django.conf import settings
from django.db import models

from apps.common.models import TimeStampedModel


class PracticeStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    PAUSED = "PAUSED", "Paused"
    CHURNED = "CHURNED", "Churned"


class DentalPractice(TimeStampedModel):
    """A dental practice: the unit of data isolation."""

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    city = models.CharField(max_length=128, blank=True)
    status = models.CharField(
        max_length=16, choices=PracticeStatus.choices, default=PracticeStatus.ACTIVE
    )
    assigned_salesperson = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_practices",
    )

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class TreatmentType(TimeStampedModel):
    """Treatments a practice sells, with an indicative price."""

    practice = models.ForeignKey(
        DentalPractice, on_delete=models.CASCADE, related_name="treatment_types"
    )
    name = models.CharField(max_length=255)
    average_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    class Meta:
        unique_together = ("practice", "name")
        ordering = ["practice_id", "name"]

    def __str__(self) -> str:
        return f"{self.practice.name}: {self.name}"


class Campaign(TimeStampedModel):
    """Paid acquisition campaign; ``external_id`` is the ad platform's id."""

    practice = models.ForeignKey(
        DentalPractice, on_delete=models.CASCADE, related_name="campaigns"
    )
    external_id = models.CharField(max_length=128, unique=True)
    name = models.CharField(max_length=255)
    spend = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name
