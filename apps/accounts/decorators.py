"""Decorators enforcing account roles on API view methods."""

from __future__ import annotations

from functools import wraps
from typing import Callable, Iterable

from apps.accounts.policy import get_account
from apps.common.errors import Forbidden


def require_roles(allowed: Iterable[str]):
    """Refuse the call unless the caller's account role is in ``allowed``.

    The account is attached to the request as ``request.account``.
    """

    allowed_set = {str(role) for role in allowed}

    def decorator(view_func: Callable):
        @wraps(view_func)
        def wrapped(self, request, *args, **kwargs):
            account = get_account(getattr(request, "user", None))
            if account is None or account.role not in allowed_set:
                raise Forbidden()
            request.account = account
            return view_func(self, request, *args, **kwargs)

        return wrapped

    return decorator


def with_account(view_func: Callable):
    """Attach the caller's account (or None) as ``request.account``."""

    @wraps(view_func)
    def wrapped(self, request, *args, **kwargs):
        request.account = get_account(getattr(request, "user", None))
        return view_func(self, request, *args, **kwargs)

    return wrapped
