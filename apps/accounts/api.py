"""Authentication API views."""

from __future__ import annotations

import logging
from typing import Any, Dict

from django.contrib.auth.models import User
from django.db import transaction
from django.http import HttpRequest
from rest_framework import permissions, status
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.decorators import with_account
from apps.accounts.models import Account, Role
from apps.accounts.policy import PRACTICE_ROLES
from apps.common.api import BudgetThrottle, error_response, ok_response
from apps.common.errors import ConflictError, ValidationError
from apps.common.safe_log import safe_log
from apps.leads.utils import normalize_email
from apps.practices.models import DentalPractice

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def _serialize_account(account: Account) -> Dict[str, Any]:
    practice = account.practice
    return {
        "id": account.user_id,
        "email": account.user.email,
        "full_name": account.full_name,
        "role": account.role,
        "practice": {"id": practice.id, "name": practice.name} if practice else None,
        "must_change_password": account.must_change_password,
    }


def _tokens_for(user: User) -> Dict[str, str]:
    refresh = RefreshToken.for_user(user)
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


class LoginView(APIView):
    """Handle email/password login using JWT tokens."""

    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []
    throttle_classes = [BudgetThrottle]
    rate_budget = "login"

    def post(self, request: HttpRequest):
        payload = request.data or {}
        email = str(payload.get("email", "")).strip().lower()
        password = str(payload.get("password", ""))
        if not email or not password:
            return error_response("INVALID_CREDENTIALS", status_code=status.HTTP_401_UNAUTHORIZED)

        user = User.objects.filter(email__iexact=email).first()
        account = Account.objects.select_related("practice", "user").filter(user=user).first() if user else None
        if not user or not user.is_active or account is None or not user.check_password(password):
            safe_log("auth.login_failure", {"userId": user.id if user else None}, level=logging.WARNING)
            return error_response("INVALID_CREDENTIALS", status_code=status.HTTP_401_UNAUTHORIZED)

        safe_log("auth.login_success", {"userId": user.id, "role": account.role})
        return ok_response({**_tokens_for(user), "user": _serialize_account(account)})


class RegisterView(APIView):
    """Self-service sign-up for practice owners and staff.

    Each registration creates the caller's practice. Admin and salesperson
    accounts are provisioned by an administrator, never through this view.
    """

    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []
    throttle_classes = [BudgetThrottle]
    rate_budget = "sign_up"

    def post(self, request: HttpRequest):
        payload = request.data or {}
        email = normalize_email(str(payload.get("email", "")))
        password = str(payload.get("password", ""))
        full_name = str(payload.get("full_name", "")).strip()
        role = str(payload.get("role", Role.PRACTICE_OWNER))
        practice_name = str(payload.get("practice_name", "")).strip()

        if len(password) < MIN_PASSWORD_LENGTH or not full_name or len(full_name) > 200:
            raise ValidationError()
        if role not in PRACTICE_ROLES or not practice_name or len(practice_name) > 200:
            raise ValidationError()
        if User.objects.filter(email__iexact=email).exists():
            raise ConflictError("account already exists")

        with transaction.atomic():
            user = User.objects.create_user(username=email, email=email, password=password)
            # Self-managed practices start without a salesperson.
            practice = DentalPractice.objects.create(name=practice_name, email=email)
            account = Account.objects.create(
                user=user,
                role=role,
                practice=practice,
                full_name=full_name,
            )

        safe_log("auth.registered", {"userId": user.id, "role": role, "practiceId": practice.id})
        return ok_response(
            {**_tokens_for(user), "user": _serialize_account(account)},
            status_code=status.HTTP_201_CREATED,
        )


class MeView(APIView):
    """Return the authenticated account profile."""

    @with_account
    def get(self, request: HttpRequest):
        return ok_response(_serialize_account(request.account))


class PasswordStatusView(APIView):
    @with_account
    def get(self, request: HttpRequest):
        return ok_response({"must_change_password": request.account.must_change_password})


class ChangePasswordView(APIView):
    """Set a new password and clear the forced-change flag."""

    @with_account
    def post(self, request: HttpRequest):
        payload = request.data or {}
        current = str(payload.get("current_password", ""))
        new = str(payload.get("new_password", ""))
        user: User = request.user
        if not user.check_password(current):
            return error_response("INVALID_CREDENTIALS", status_code=status.HTTP_401_UNAUTHORIZED)
        if len(new) < MIN_PASSWORD_LENGTH or new == current:
            raise ValidationError()

        with transaction.atomic():
            user.set_password(new)
            user.save(update_fields=["password"])
            account = request.account
            account.must_change_password = False
            account.save(update_fields=["must_change_password", "updated_at"])

        safe_log("auth.password_changed", {"userId": user.id})
        return ok_response({"must_change_password": False})
