"""Tenant-scoped access to practice-owned records.

Application code reaches leads, interactions, appointments, campaigns and
treatment types through a ``TenantDB`` bound to one ``TenantScope``. Every read
filters on the bound practice and every create writes it, so nothing done
through a ``TenantDB`` can observe or touch another practice's rows. Which
practice a caller may bind to is decided by ``apps.accounts.policy``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from django.db import models

from apps.appointments.models import Appointment
from apps.common.errors import NotFoundError
from apps.leads.models import Interaction, Lead
from apps.practices.models import Campaign, TreatmentType

_ISSUER = object()


@dataclass(frozen=True, slots=True)
class TenantScope:
    """Capability proving that access to one practice was authorized."""

    practice_id: int
    _issuer: object = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self._issuer is not _ISSUER:
            raise TypeError("TenantScope must be issued through issue_scope()")


def issue_scope(practice_id: int) -> TenantScope:
    """Mint a scope. Only the access policy and background jobs acting on a
    record's own practice call this."""
    return TenantScope(practice_id=int(practice_id), _issuer=_ISSUER)


class TenantDB:
    def __init__(self, scope: TenantScope) -> None:
        if not isinstance(scope, TenantScope):
            raise TypeError("TenantDB requires a TenantScope")
        self.scope = scope

    @property
    def practice_id(self) -> int:
        return self.scope.practice_id

    def _scoped(self, model: type[models.Model]) -> models.QuerySet:
        return model.objects.filter(practice_id=self.practice_id)

    def _get(self, model: type[models.Model], pk: Any, queryset: models.QuerySet | None = None):
        qs = queryset if queryset is not None else self._scoped(model)
        try:
            obj = qs.filter(pk=pk).first()
        except (TypeError, ValueError):
            obj = None
        if obj is None:
            raise NotFoundError(f"{model.__name__} not found")
        return obj

    def _create(self, model: type[models.Model], fields: dict[str, Any]):
        fields.pop("practice", None)
        fields["practice_id"] = self.practice_id
        return model.objects.create(**fields)

    def _update(self, obj: models.Model, fields: dict[str, Any]):
        if getattr(obj, "practice_id", None) != self.practice_id:
            raise NotFoundError(f"{type(obj).__name__} not found")
        fields.pop("practice", None)
        fields.pop("practice_id", None)
        for name, value in fields.items():
            setattr(obj, name, value)
        obj.save(update_fields=[*fields.keys(), "updated_at"])
        return obj

    # Leads
    def leads(self) -> models.QuerySet:
        return self._scoped(Lead)

    def get_lead(self, pk: Any) -> Lead:
        return self._get(Lead, pk)

    def lock_lead(self, pk: Any) -> Lead:
        """Re-read a lead under a row lock; call inside ``transaction.atomic()``."""
        return self._get(Lead, pk, self.leads().select_for_update())

    def create_lead(self, **fields: Any) -> Lead:
        return self._create(Lead, fields)

    def update_lead(self, lead: Lead, **fields: Any) -> Lead:
        return self._update(lead, fields)

    # Interactions
    def interactions(self) -> models.QuerySet:
        return self._scoped(Interaction)

    def create_interaction(self, **fields: Any) -> Interaction:
        fields.setdefault("metadata", {})
        return self._create(Interaction, fields)

    # Appointments
    def appointments(self) -> models.QuerySet:
        return self._scoped(Appointment)

    def get_appointment(self, pk: Any) -> Appointment:
        return self._get(Appointment, pk)

    def create_appointment(self, **fields: Any) -> Appointment:
        return self._create(Appointment, fields)

    def update_appointment(self, appointment: Appointment, **fields: Any) -> Appointment:
        return self._update(appointment, fields)

    # Campaigns and treatments
    def campaigns(self) -> models.QuerySet:
        return self._scoped(Campaign)

    def treatment_types(self) -> models.QuerySet:
        return self._scoped(TreatmentType)

    def get_treatment_type(self, pk: Any) -> TreatmentType:
        return self._get(TreatmentType, pk)
