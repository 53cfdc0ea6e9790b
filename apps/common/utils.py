"""Utility helpers shared across apps."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from django.http import JsonResponse
from django.utils import timezone


def now_utc():
    """Return timezone-aware UTC now."""
    return timezone.now()


def minimal_ok(**extra: Any) -> JsonResponse:
    """Return the default JSON envelope used by machine-facing endpoints."""
    payload: Dict[str, Any] = {"ok": True}
    payload.update(extra)
    return JsonResponse(payload)


def minimal_error(code: str, status: int) -> JsonResponse:
    return JsonResponse({"ok": False, "error": code}, status=status)


def merge_unique(existing: Iterable[str], incoming: Iterable[str]) -> List[str]:
    """Append ``incoming`` to ``existing`` keeping first-seen order, no repeats."""
    merged: List[str] = []
    seen = set()
    for item in list(existing or []) + list(incoming or []):
        if item in seen:
            continue
        seen.add(item)
        merged.append(item)
    return merged
