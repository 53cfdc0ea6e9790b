"""Role-based tenant visibility.

Every query or mutation derives what the caller may see from here, on every
request. Nothing is cached between requests, and an account whose role
resolves to no practice is refused with ``Forbidden`` instead of getting an
empty result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, FrozenSet, Optional

from django.db import models

from apps.accounts.models import Account, Role
from apps.appointments.models import Appointment
from apps.common.errors import Forbidden, NotFoundError
from apps.leads.models import Lead
from apps.practices.gateway import TenantDB, issue_scope
from apps.practices.models import DentalPractice

PRACTICE_ROLES = frozenset({Role.PRACTICE_OWNER.value, Role.PRACTICE_STAFF.value})
LEAD_CREATOR_ROLES = frozenset({Role.ADMIN.value, Role.SALESPERSON.value})


@dataclass(frozen=True)
class TenantFilter:
    """Practices a caller may see; ``practice_ids=None`` means unrestricted."""

    practice_ids: Optional[FrozenSet[int]]

    @property
    def unrestricted(self) -> bool:
        return self.practice_ids is None

    def allows(self, practice_id: int) -> bool:
        return self.practice_ids is None or practice_id in self.practice_ids

    def apply(self, queryset: models.QuerySet, field: str = "practice_id") -> models.QuerySet:
        if self.practice_ids is None:
            return queryset
        return queryset.filter(**{f"{field}__in": self.practice_ids})


def get_account(user) -> Optional[Account]:
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    try:
        return user.account
    except Account.DoesNotExist:
        return None


def assigned_practice_ids(account: Account) -> FrozenSet[int]:
    return frozenset(
        DentalPractice.objects.filter(assigned_salesperson_id=account.user_id).values_list(
            "id", flat=True
        )
    )


def resolve_visibility(account: Optional[Account], explicit_practice_id: Optional[int] = None) -> TenantFilter:
    """Compute the tenant filter for ``account``, narrowed by an explicit practice."""

    if account is None:
        raise Forbidden()

    role = account.role
    if role == Role.ADMIN:
        if explicit_practice_id is None:
            return TenantFilter(None)
        return TenantFilter(frozenset({explicit_practice_id}))

    if role == Role.SALESPERSON:
        visible = assigned_practice_ids(account)
        if not visible:
            raise Forbidden()
        if explicit_practice_id is None:
            return TenantFilter(visible)
        if explicit_practice_id not in visible:
            raise Forbidden()
        return TenantFilter(frozenset({explicit_practice_id}))

    if role in PRACTICE_ROLES:
        if account.practice_id is None:
            raise Forbidden()
        if explicit_practice_id is not None and explicit_practice_id != account.practice_id:
            raise Forbidden()
        return TenantFilter(frozenset({account.practice_id}))

    raise Forbidden()


def bind_tenant(account: Optional[Account], practice_id: Any) -> TenantDB:
    """Return a gateway bound to ``practice_id`` if the account may access it."""

    try:
        practice_id = int(practice_id)
    except (TypeError, ValueError) as exc:
        raise NotFoundError("practice not found") from exc
    resolve_visibility(account, practice_id)
    return TenantDB(issue_scope(practice_id))


def authorize_lead_creation(account: Optional[Account], practice_id: Any) -> TenantDB:
    if account is None or account.role not in LEAD_CREATOR_ROLES:
        raise Forbidden()
    db = bind_tenant(account, practice_id)
    if not DentalPractice.objects.filter(pk=db.practice_id).exists():
        raise NotFoundError("practice not found")
    return db


def _owner_practice_id(model: type[models.Model], pk: Any) -> int:
    try:
        practice_id = model.objects.filter(pk=pk).values_list("practice_id", flat=True).first()
    except (TypeError, ValueError):
        practice_id = None
    if practice_id is None:
        raise NotFoundError(f"{model.__name__} not found")
    return practice_id


def bind_lead(account: Optional[Account], lead_id: Any) -> tuple[TenantDB, Lead]:
    """Authorize access to one lead and return it with its tenant gateway."""

    db = bind_tenant(account, _owner_practice_id(Lead, lead_id))
    return db, db.get_lead(lead_id)


def bind_appointment(account: Optional[Account], appointment_id: Any) -> tuple[TenantDB, Appointment]:
    db = bind_tenant(account, _owner_practice_id(Appointment, appointment_id))
    return db, db.get_appointment(appointment_id)
