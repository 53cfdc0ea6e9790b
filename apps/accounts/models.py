"""Accounts and tenancy models."""

from __future__ import annotations

from django.contrib.auth.models import User
from django.db import models

from apps.common.models import TimeStampedModel
from apps.practices.models import DentalPractice


class Role(models.TextChoices):
    ADMIN = "ADMIN", "Admin"
    SALESPERSON = "SALESPERSON", "Salesperson"
    PRACTICE_OWNER = "PRACTICE_OWNER", "Practice owner"
    PRACTICE_STAFF = "PRACTICE_STAFF", "Practice staff"


class Account(TimeStampedModel):
    """Internal user record tying an authenticated identity to a role.

    Practice roles are linked to exactly one practice; salespeople see the
    practices assigned to them on ``DentalPractice.assigned_salesperson``.
    """

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="account")
    role = models.CharField(max_length=20, choices=Role.choices)
    practice = models.ForeignKey(
        DentalPractice,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="accounts",
    )
    full_name = models.CharField(max_length=200, blank=True)
    must_change_password = models.BooleanField(default=False)

    def __str__(self) -> str:
        return f"{self.user.email} ({self.role})"
