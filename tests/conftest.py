import hashlib
import hmac
import json

import pytest
from django.conf import settings
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import Account, Role
from apps.common.rate_limit import get_rate_limiter
from apps.leads.models import Lead, LeadSource, LeadStatus
from apps.practices.models import Campaign, DentalPractice, TreatmentType

PASSWORD = "Admin!234"


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    get_rate_limiter().reset()
    yield
    get_rate_limiter().reset()


@pytest.fixture
def make_account(django_user_model):
    def _make(email: str, role: str, practice=None, **extra):
        user = django_user_model.objects.create_user(
            username=email,
            email=email,
            password=PASSWORD,
            is_active=True,
        )
        Account.objects.create(user=user, role=role, practice=practice, full_name=email.split("@")[0], **extra)
        return user

    return _make


@pytest.fixture
def salesperson(make_account):
    return make_account("sales@example.com", Role.SALESPERSON)


@pytest.fixture
def admin_user(make_account):
    return make_account("admin@example.com", Role.ADMIN)


@pytest.fixture
def practice(db, salesperson):
    return DentalPractice.objects.create(
        name="Prime Dental",
        city="London",
        assigned_salesperson=salesperson,
    )


@pytest.fixture
def other_practice(db):
    return DentalPractice.objects.create(name="Other Dental", city="Leeds")


@pytest.fixture
def owner(make_account, practice):
    return make_account("owner@example.com", Role.PRACTICE_OWNER, practice=practice)


@pytest.fixture
def treatment(practice):
    return TreatmentType.objects.create(practice=practice, name="Invisalign", average_price=3500)


@pytest.fixture
def campaign(practice):
    return Campaign.objects.create(practice=practice, external_id="cmp-123", name="Spring", spend=1000)


@pytest.fixture
def lead(practice, salesperson):
    return Lead.objects.create(
        practice=practice,
        assigned_salesperson=salesperson,
        name="John Doe",
        email="john@example.com",
        phone="+447700900000",
        source=LeadSource.MANUAL,
        status=LeadStatus.NEW,
    )


@pytest.fixture
def other_lead(other_practice):
    return Lead.objects.create(
        practice=other_practice,
        name="Jane Roe",
        email="jane@example.com",
        phone="+447700900111",
        source=LeadSource.REFERRAL,
        status=LeadStatus.NEW,
    )


def auth_headers(user):
    token = RefreshToken.for_user(user).access_token
    return {"HTTP_AUTHORIZATION": f"Bearer {token}"}


@pytest.fixture
def api(client):
    """JSON helpers around the Django test client with bearer auth."""

    class _Api:
        def get(self, path, user=None, **params):
            return client.get(path, data=params, **(auth_headers(user) if user else {}))

        def post(self, path, payload=None, user=None, **extra):
            headers = auth_headers(user) if user else {}
            headers.update(extra)
            return client.post(path, data=json.dumps(payload or {}), content_type="application/json", **headers)

        def patch(self, path, payload=None, user=None):
            headers = auth_headers(user) if user else {}
            return client.patch(path, data=json.dumps(payload or {}), content_type="application/json", **headers)

    return _Api()


@pytest.fixture
def hmac_signature():
    def _sign(payload: bytes, secret: str | None = None) -> str:
        key = (secret or settings.META_APP_SECRET).encode()
        return "sha256=" + hmac.new(key, payload, hashlib.sha256).hexdigest()

    return _sign
