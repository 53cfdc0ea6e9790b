"""PII-redacting log helper.

Use ``safe_log`` for anything that could carry patient data. Only keys in
SAFE_KEYS pass through; keys in PII_KEYS are masked; everything else is
dropped, so a new field stays invisible until it is explicitly allow-listed.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger("opensmile.safe_log")

REDACTED = "[REDACTED]"
MAX_DEPTH_MARKER = "[MAX_DEPTH]"
UNKNOWN_TYPE_MARKER = "[UNKNOWN_TYPE]"
MAX_DEPTH = 5

PII_KEYS = frozenset(
    {
        "email",
        "phone",
        "dateOfBirth",
        "dob",
        "callTranscript",
        "transcript",
        "callRecordingUrl",
        "recordingUrl",
        "emergencyContact",
        "password",
        "notes",
        "body",
        "message",
        "address",
        "postcode",
        "name",
        "fullName",
    }
)

SAFE_KEYS = frozenset(
    {
        "id",
        "status",
        "source",
        "practiceId",
        "userId",
        "role",
        "type",
        "createdAt",
        "updatedAt",
        "count",
        "action",
        "resource",
        "attempt",
        "countdown",
    }
)


def redact(value: Any, depth: int = 0) -> Any:
    if depth > MAX_DEPTH:
        return MAX_DEPTH_MARKER
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [redact(item, depth + 1) for item in value]
    if isinstance(value, dict):
        result: dict[str, Any] = {}
        for key, item in value.items():
            if key in PII_KEYS:
                result[key] = REDACTED
            elif key in SAFE_KEYS:
                result[key] = redact(item, depth + 1)
        return result
    return UNKNOWN_TYPE_MARKER


def safe_log(event: str, data: Any = None, level: int = logging.INFO) -> None:
    payload = redact(data) if data is not None else None
    logger.log(level, event, extra={"event": event, "payload": payload})
