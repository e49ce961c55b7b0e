"""Turn unexpected handler failures into a logged `<OP>_ERROR` and a 500."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import HTTPException, status

from honeypot.activity.logger import ActivityLogger
from honeypot.schemas.activity import RequestContext

logger = logging.getLogger(__name__)


@contextmanager
def reporting_errors(
    activity: ActivityLogger,
    tag: str,
    ctx: RequestContext,
    **details: Any,
) -> Iterator[None]:
    """Guard a handler body.

    HTTPExceptions raised on purpose pass through untouched. Anything else
    is recorded as a suspicious `tag` event and answered with a 500.

    Usage:
        with reporting_errors(activity, "GET_ORDER_ERROR", ctx, orderId=order_id):
            ...
    """
    try:
        yield
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("%s while handling %s %s", tag, ctx.method, ctx.url)
        activity.suspicious_activity(tag, {"error": str(exc), **details}, ctx)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error",
        ) from exc
