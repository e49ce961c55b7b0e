"""Activity-trail schemas — the canonical record every sink is encoded from.

A LogEvent is built once per logged decision point and never mutated.
Both sink formats (plain line and JSON line) are rendered from it, so the
two files can never disagree about what happened.
"""

from __future__ import annotations

import json
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

UNKNOWN = "unknown"


class ActivityType(str, Enum):
    """Coarse categories of the activity trail."""

    # Domain wrappers
    AUTH_ATTEMPT = "AUTH_ATTEMPT"
    CART_OPERATION = "CART_OPERATION"
    PRODUCT_VIEW = "PRODUCT_VIEW"
    ORDER_CREATED = "ORDER_CREATED"
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"
    API_ACCESS = "API_ACCESS"

    # Generic activity
    HTTP_REQUEST = "HTTP_REQUEST"
    SYSTEM_STARTUP = "SYSTEM_STARTUP"
    SYSTEM_SHUTDOWN = "SYSTEM_SHUTDOWN"
    SYSTEM_ERROR = "SYSTEM_ERROR"


class CartAction(str, Enum):
    """Operations reported by the cart wrapper."""

    VIEW = "VIEW"
    ADD = "ADD"
    REMOVE = "REMOVE"
    UPDATE = "UPDATE"


class RequestContext(BaseModel):
    """The slice of an inbound request the activity trail cares about.

    Every field is optional; missing values become "unknown" in the record.
    Header names are stored lower-cased.
    """

    ip: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    method: str | None = None
    url: str | None = None
    session_id: str | None = None

    model_config = {"frozen": True}

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())


def json_safe(value: Any) -> Any:
    """Copy of `value` with NaN and the infinities replaced by their names.

    JSON has no literal for them, so they are carried as the strings
    "NaN", "Infinity" and "-Infinity".
    """
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return value
    if isinstance(value, dict):
        return {
            (json_safe(key) if isinstance(key, float) else key): json_safe(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [json_safe(item) for item in value]
    return value


def dumps(value: Any) -> str:
    """Compact strict JSON, non-ASCII kept, non-JSON values stringified."""
    return json.dumps(
        json_safe(value),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
        default=str,
    )


def _line_safe(value: str) -> str:
    return value.replace("\r", "\\r").replace("\n", "\\n")


class LogEvent(BaseModel):
    """Canonical activity record.

    Field order is the key order of the structured sink.
    """

    timestamp: str
    activity_type: str
    ip_address: str = UNKNOWN
    user_agent: str = UNKNOWN
    http_method: str = UNKNOWN
    url: str = UNKNOWN
    details: dict[str, Any] = Field(default_factory=dict)
    session_id: Any = UNKNOWN
    user_id: Any = UNKNOWN

    model_config = {"frozen": True}

    @classmethod
    def build(
        cls,
        timestamp: str,
        activity_type: str,
        details: dict[str, Any],
        context: RequestContext,
    ) -> LogEvent:
        """Resolve the context into a record, substituting "unknown" per field."""
        return cls(
            timestamp=timestamp,
            activity_type=activity_type,
            ip_address=context.ip or UNKNOWN,
            user_agent=context.header("user-agent") or UNKNOWN,
            http_method=context.method or UNKNOWN,
            url=context.url or UNKNOWN,
            details=details,
            session_id=_first_present(details, "sessionId", "session_id"),
            user_id=_first_present(details, "userId", "user_id"),
        )

    def to_text_line(self) -> str:
        """`<timestamp> [<TYPE>] <ip> <METHOD> <url> <json(details)>`"""
        prefix = " ".join(
            _line_safe(part)
            for part in (self.ip_address, self.http_method, self.url)
        )
        return f"{self.timestamp} [{_line_safe(self.activity_type)}] {prefix} {dumps(self.details)}"

    def to_json_line(self) -> str:
        return dumps(self.model_dump())


def _first_present(details: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = details.get(key)
        if value is not None and value != "":
            return value
    return UNKNOWN
