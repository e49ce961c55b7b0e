"""Readers for the two activity sinks, shared by the test modules."""

from __future__ import annotations

import json
from typing import Any

from honeypot.activity.logger import ActivityLogger
from honeypot.security.tokens import token_service


def strict_loads(text: str) -> Any:
    """`json.loads` that refuses the NaN/Infinity extensions."""
    return json.loads(text, parse_constant=_reject_constant)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-JSON constant {token}")


def read_structured(activity: ActivityLogger) -> list[dict[str, Any]]:
    """Every JSON record in the structured sink, in file order."""
    if not activity.structured_log_path.exists():
        return []
    with activity.structured_log_path.open(encoding="utf-8") as fh:
        return [strict_loads(line) for line in fh if line.strip()]


def read_text(activity: ActivityLogger) -> list[str]:
    if not activity.activity_log_path.exists():
        return []
    return activity.activity_log_path.read_text(encoding="utf-8").splitlines()


def of_type(records: list[dict[str, Any]], activity_type: str) -> list[dict[str, Any]]:
    return [r for r in records if r["activity_type"] == activity_type]


def suspicious(records: list[dict[str, Any]], tag: str) -> list[dict[str, Any]]:
    """SUSPICIOUS_ACTIVITY records carrying sub-tag `tag`."""
    return [r for r in of_type(records, "SUSPICIOUS_ACTIVITY") if r["details"]["activity"] == tag]


def bearer(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_service.issue(user_id)}"}
