"""Common DRF helpers."""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Type

from django.db import models
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.views import exception_handler as drf_exception_handler

from apps.common.errors import ServiceError, ValidationError
from apps.common.rate_limit import RATE_LIMITS, client_ip, get_rate_limiter


def ok_response(data: Dict[str, Any] | Iterable[Any], status_code: int = status.HTTP_200_OK) -> Response:
    """Return a standardized success envelope."""

    return Response({"ok": True, "data": data}, status=status_code)


def error_response(message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> Response:
    """Return a standardized error envelope."""

    return Response({"ok": False, "error": message}, status=status_code)


_DRF_STATUS_CODES = {
    400: "INVALID_PAYLOAD",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    415: "UNSUPPORTED_MEDIA_TYPE",
    429: "RATE_LIMITED",
}


def exception_handler(exc, context):
    """Render service errors and DRF errors as {ok:false,error:CODE}.

    Validation details are never echoed back; clients get a stable code only.
    """

    if isinstance(exc, ServiceError):
        return error_response(exc.code, status_code=exc.status_code)

    response = drf_exception_handler(exc, context)
    if response is None:
        return response
    response.data = {
        "ok": False,
        "error": _DRF_STATUS_CODES.get(response.status_code, "ERROR"),
    }
    return response


class BudgetThrottle(BaseThrottle):
    """Apply one of the configured RATE_LIMITS budgets to a DRF view.

    Views set ``rate_budget`` to a key of RATE_LIMITS and may restrict it to
    some HTTP methods with ``rate_budget_methods``. Budgets keyed by user fall
    back to the client IP for anonymous callers.
    """

    def allow_request(self, request, view):
        budget_name = getattr(view, "rate_budget", None)
        if budget_name is None:
            return True
        methods = getattr(view, "rate_budget_methods", None)
        if methods is not None and request.method not in methods:
            return True
        budget = RATE_LIMITS[budget_name]
        user = getattr(request, "user", None)
        if budget.per_user and user is not None and user.is_authenticated:
            ident = str(user.pk)
        else:
            ident = client_ip(request)
        return get_rate_limiter().allow(budget.key(ident), budget.max_requests, budget.window_ms)

    def wait(self):
        return None


def parse_int(value: Any, *, default: int | None = None, minimum: int | None = None, maximum: int | None = None) -> int | None:
    """Parse an integer query/body value, clamping into ``[minimum, maximum]``."""

    if value in (None, ""):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError() from exc
    if minimum is not None and number < minimum:
        number = minimum
    if maximum is not None and number > maximum:
        number = maximum
    return number


def parse_choice(value: Any, choices: Type[models.TextChoices], *, required: bool = False) -> str | None:
    if value in (None, ""):
        if required:
            raise ValidationError()
        return None
    if value not in choices.values:
        raise ValidationError()
    return str(value)


def parse_text(value: Any, *, required: bool = False, max_length: int | None = None) -> str:
    """Accept a string no longer than ``max_length``; required values are stripped."""

    if value is None:
        if required:
            raise ValidationError()
        return ""
    if not isinstance(value, str):
        raise ValidationError()
    if required:
        value = value.strip()
        if not value:
            raise ValidationError()
    if max_length is not None and len(value) > max_length:
        raise ValidationError()
    return value


def parse_datetime_value(value: Any, *, required: bool = False) -> datetime | None:
    """Accept ISO-8601 datetimes; naive values are taken as UTC."""

    if value in (None, ""):
        if required:
            raise ValidationError()
        return None
    try:
        parsed = parse_datetime(str(value))
    except ValueError as exc:
        raise ValidationError() from exc
    if parsed is None:
        raise ValidationError()
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def parse_decimal(value: Any) -> Decimal | None:
    if value in (None, ""):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError() from exc


def parse_str_list(value: Any, *, max_item_length: int | None = None) -> List[str]:
    if value in (None, ""):
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError()
    if max_item_length is not None and any(len(item) > max_item_length for item in value):
        raise ValidationError()
    return value
