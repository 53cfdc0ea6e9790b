"""JWT authentication that only admits users with an internal account record."""

from __future__ import annotations

import logging

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

from apps.accounts.models import Account

logger = logging.getLogger(__name__)


class AccountJWTAuthentication(JWTAuthentication):
    """Resolve a verified token to a user that also has an ``Account``.

    A valid identity without an internal record is rejected, never
    auto-provisioned.
    """

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        account = Account.objects.select_related("practice").filter(user=user).first()
        if account is None:
            logger.warning("auth.account_missing", extra={"user_id": user.pk})
            raise AuthenticationFailed("account missing", code="account_missing")
        user.account = account
        return user
