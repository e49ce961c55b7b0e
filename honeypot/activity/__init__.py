"""Honeypot activity trail — canonical records, two sinks, rotation."""

from honeypot.activity.context import context_from_request, resolve_context, system_context
from honeypot.activity.logger import ActivityLogger
from honeypot.activity.rotation import rotate_logs

__all__ = [
    "ActivityLogger",
    "context_from_request",
    "resolve_context",
    "system_context",
    "rotate_logs",
]
