"""Honeypot activity logger — the dual-sink audit trail.

Every business operation reports each of its terminal branches here.
One call produces one canonical LogEvent, appended as one line to the
plain-text sink and one line to the JSON-lines sink, and echoed to the
console logger.

Never raises — a sink that cannot be written is reported as an operational
warning and the request carries on. Losing an audit line is preferable to
failing the request it describes.

Usage:
    activity = ActivityLogger.from_settings(settings.activity)
    activity.suspicious_activity("ADD_TO_CART_INVALID_PRODUCT", {"productId": 42}, request)
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

from honeypot.activity.context import resolve_context
from honeypot.config import ActivityLogSettings
from honeypot.schemas.activity import ActivityType, CartAction, LogEvent, RequestContext, dumps

logger = logging.getLogger(__name__)

_console = structlog.get_logger("honeypot.activity")

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601, UTC, millisecond precision, `Z` suffix."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _SinkHandler(logging.handlers.WatchedFileHandler):
    """Append-only file sink.

    Opens lazily, reopens when the file is renamed or deleted underneath
    it, and turns every write failure into a warning.
    """

    def __init__(self, path: Path) -> None:
        super().__init__(path, mode="a", encoding="utf-8", delay=True)
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            directory = os.path.dirname(self.baseFilename)
            if not os.path.isdir(directory):
                os.makedirs(directory, exist_ok=True)
            super().emit(record)
        except Exception:
            self.handleError(record)

    def handleError(self, record: logging.LogRecord) -> None:  # noqa: N802
        logger.warning(
            "Activity sink %s is not writable, record dropped from this sink",
            self.baseFilename,
            exc_info=True,
        )


class ActivityLogger:
    """Formats activity records and appends them to both sinks.

    One instance per process, created at startup and handed to every
    caller. Thread-safe: each sink handler serializes its own writes.
    """

    def __init__(
        self,
        logs_dir: str | os.PathLike[str],
        activity_log_file: str = "honeypot_activity.log",
        structured_log_file: str = "splunk_input.log",
        console_echo: bool = True,
        clock: Clock = _utc_now,
    ) -> None:
        self.logs_dir = Path(logs_dir)
        self.activity_log_path = self.logs_dir / activity_log_file
        self.structured_log_path = self.logs_dir / structured_log_file
        self._console_echo = console_echo
        self._clock = clock

        try:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.warning("Could not create logs directory %s", self.logs_dir, exc_info=True)

        self._text_sink = _SinkHandler(self.activity_log_path)
        self._json_sink = _SinkHandler(self.structured_log_path)

    @classmethod
    def from_settings(cls, config: ActivityLogSettings) -> ActivityLogger:
        return cls(
            config.logs_dir,
            activity_log_file=config.activity_log_file,
            structured_log_file=config.structured_log_file,
            console_echo=config.console_echo,
        )

    # ── Core primitive ───────────────────────────────────────────────

    def record(
        self,
        activity_type: ActivityType | str,
        details: dict[str, Any] | None = None,
        context: Any = None,
    ) -> None:
        """Build one canonical record and append it to both sinks.

        `context` may be a Starlette request, a RequestContext, a plain
        mapping, any object exposing the same attributes, or None.
        """
        try:
            event = self._build(activity_type, details, context)
        except Exception:
            logger.exception("Could not build activity record for %s", activity_type)
            return

        self._append(self._text_sink, event.to_text_line())
        self._append(self._json_sink, event.to_json_line())

        if self._console_echo:
            try:
                _console.info("honeypot_activity", activity_type=event.activity_type, record=event.to_json_line())
            except Exception:
                logger.warning("Console echo failed for %s", event.activity_type, exc_info=True)

    def _build(self, activity_type: ActivityType | str, details: dict[str, Any] | None, context: Any) -> LogEvent:
        tag = activity_type.value if isinstance(activity_type, ActivityType) else str(activity_type or "")
        if not tag:
            logger.warning("Activity recorded without a type, filing as UNSPECIFIED")
            tag = "UNSPECIFIED"
        # Snapshot through strict JSON: detaches from the caller's objects,
        # names non-finite floats and guarantees both encoders succeed.
        snapshot = json.loads(dumps(details or {}))
        return LogEvent.build(
            timestamp=format_timestamp(self._clock()),
            activity_type=tag,
            details=snapshot,
            context=self._resolve(context),
        )

    @staticmethod
    def _resolve(context: Any) -> RequestContext:
        try:
            return resolve_context(context)
        except Exception:
            logger.warning("Unusable request context %r, recording without it", type(context), exc_info=True)
            return RequestContext()

    @staticmethod
    def _append(sink: _SinkHandler, line: str) -> None:
        sink.handle(logging.makeLogRecord({"msg": line, "levelno": logging.INFO, "levelname": "INFO"}))

    def close(self) -> None:
        for sink in (self._text_sink, self._json_sink):
            sink.close()

    # ── Convenience wrappers ─────────────────────────────────────────

    def auth_attempt(self, email: str | None, success: bool, user_id: Any, context: Any = None) -> None:
        ctx = self._resolve(context)
        self.record(ActivityType.AUTH_ATTEMPT, {
            "email": email,
            "success": success,
            "userId": user_id,
            "sessionId": ctx.session_id,
        }, ctx)

    def cart_operation(
        self,
        operation: CartAction | str,
        product_id: Any,
        quantity: int | None,
        user_id: Any,
        session_id: str | None,
        context: Any = None,
    ) -> None:
        self.record(ActivityType.CART_OPERATION, {
            "operation": operation.value if isinstance(operation, CartAction) else operation,
            "product_id": product_id,
            "quantity": quantity,
            "user_id": user_id,
            "session_id": session_id,
        }, context)

    def product_view(self, product_id: Any, user_id: Any, session_id: str | None, context: Any = None) -> None:
        self.record(ActivityType.PRODUCT_VIEW, {
            "product_id": product_id,
            "user_id": user_id,
            "session_id": session_id,
        }, context)

    def order_created(
        self,
        order_id: Any,
        user_id: Any,
        total_amount: float,
        session_id: str | None,
        context: Any = None,
    ) -> None:
        self.record(ActivityType.ORDER_CREATED, {
            "order_id": order_id,
            "user_id": user_id,
            "total_amount": total_amount,
            "session_id": session_id,
        }, context)

    def suspicious_activity(self, activity: str, details: dict[str, Any] | None, context: Any = None) -> None:
        """Failure branches: validation, not-found, unauthorized, caught exceptions."""
        ctx = self._resolve(context)
        self.record(ActivityType.SUSPICIOUS_ACTIVITY, {
            "activity": activity,
            "details": details or {},
            "sessionId": ctx.session_id,
        }, ctx)

    def api_access(
        self,
        endpoint: str,
        method: str,
        user_id: Any,
        session_id: str | None,
        context: Any = None,
    ) -> None:
        self.record(ActivityType.API_ACCESS, {
            "endpoint": endpoint,
            "method": method,
            "user_id": user_id,
            "session_id": session_id,
        }, context)

    def activity(self, activity_type: ActivityType | str, details: dict[str, Any] | None, context: Any = None) -> None:
        """Generic wrapper — caller picks both the type and the detail shape."""
        self.record(activity_type, details, context)
