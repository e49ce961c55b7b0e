"""Build RequestContext values from whatever a call site has at hand.

Real handlers pass a Starlette request; lifecycle hooks pass a synthetic
mapping or `system_context()`; some callers have nothing at all. All of
them end up as the same frozen RequestContext.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from starlette.requests import Request

from honeypot.schemas.activity import RequestContext

SESSION_HEADER = "x-session-id"


def system_context(url: str = "/system/startup") -> RequestContext:
    """Synthetic context for events with no originating HTTP request."""
    return RequestContext(ip="localhost", method="SYSTEM", url=url, headers={})


def context_from_request(request: Request) -> RequestContext:
    headers = {k.lower(): v for k, v in request.headers.items()}
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return RequestContext(
        ip=request.client.host if request.client else None,
        headers=headers,
        method=request.method,
        url=url,
        session_id=headers.get(SESSION_HEADER),
    )


def resolve_context(source: Any) -> RequestContext:
    """Coerce a request, mapping, duck-typed object or None into a RequestContext."""
    if source is None:
        return RequestContext()
    if isinstance(source, RequestContext):
        return source
    if isinstance(source, Request):
        return context_from_request(source)
    if isinstance(source, Mapping):
        return _from_mapping(source)
    return _from_object(source)


def _from_mapping(source: Mapping[str, Any]) -> RequestContext:
    ip = source.get("ip")
    if not ip:
        connection = source.get("connection")
        if isinstance(connection, Mapping):
            ip = connection.get("remoteAddress")
    headers = _lower_headers(source.get("headers"))
    return RequestContext(
        ip=_text(ip),
        headers=headers,
        method=_text(source.get("method")),
        url=_text(source.get("originalUrl") or source.get("url")),
        session_id=_text(source.get("sessionID") or source.get("session_id") or headers.get(SESSION_HEADER)),
    )


def _from_object(source: Any) -> RequestContext:
    ip = getattr(source, "ip", None)
    if not ip:
        connection = getattr(source, "connection", None)
        ip = getattr(connection, "remoteAddress", None)

    # A callable header accessor wins over a raw headers mapping.
    headers = _lower_headers(getattr(source, "headers", None))
    accessor = getattr(source, "get", None)
    if callable(accessor):
        for name in ("User-Agent", "X-Session-Id"):
            value = accessor(name)
            if value:
                headers[name.lower()] = str(value)

    return RequestContext(
        ip=_text(ip),
        headers=headers,
        method=_text(getattr(source, "method", None)),
        url=_text(getattr(source, "originalUrl", None) or getattr(source, "url", None)),
        session_id=_text(getattr(source, "sessionID", None) or headers.get(SESSION_HEADER)),
    )


def _lower_headers(raw: Any) -> dict[str, str]:
    if not isinstance(raw, Mapping):
        return {}
    return {str(k).lower(): str(v) for k, v in raw.items() if v is not None}


def _text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)
