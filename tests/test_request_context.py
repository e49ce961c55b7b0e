"""Tests for honeypot/activity/context.py — request context resolution."""

from __future__ import annotations

from types import SimpleNamespace

from starlette.requests import Request

from honeypot.activity.context import context_from_request, resolve_context, system_context
from honeypot.schemas.activity import RequestContext


def _request(
    path: str = "/api/cart",
    query: bytes = b"",
    headers: list[tuple[bytes, bytes]] | None = None,
    client: tuple[str, int] | None = ("203.0.113.9", 51515),
) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": path,
        "query_string": query,
        "headers": headers or [],
        "client": client,
    }
    return Request(scope)


class TestContextFromRequest:
    """Tests for context_from_request."""

    def test_reads_client_method_and_path(self):
        ctx = context_from_request(_request())
        assert ctx.ip == "203.0.113.9"
        assert ctx.method == "POST"
        assert ctx.url == "/api/cart"

    def test_keeps_query_string(self):
        ctx = context_from_request(_request(path="/api/products", query=b"keyword=lamp&pageNumber=2"))
        assert ctx.url == "/api/products?keyword=lamp&pageNumber=2"

    def test_headers_lowercased_and_session_picked_up(self):
        ctx = context_from_request(_request(headers=[(b"user-agent", b"sqlmap/1.7"), (b"x-session-id", b"guest-1")]))
        assert ctx.header("User-Agent") == "sqlmap/1.7"
        assert ctx.session_id == "guest-1"

    def test_missing_client(self):
        ctx = context_from_request(_request(client=None))
        assert ctx.ip is None


class TestResolveContext:
    """Tests for resolve_context over every accepted shape."""

    def test_none_gives_empty_context(self):
        assert resolve_context(None) == RequestContext()

    def test_request_context_passes_through(self):
        ctx = RequestContext(ip="1.1.1.1")
        assert resolve_context(ctx) is ctx

    def test_starlette_request(self):
        ctx = resolve_context(_request())
        assert ctx.ip == "203.0.113.9"

    def test_plain_mapping(self):
        ctx = resolve_context({
            "ip": "localhost",
            "headers": {"User-Agent": "cron"},
            "method": "SYSTEM",
            "originalUrl": "/system/startup",
        })
        assert ctx == RequestContext(
            ip="localhost",
            headers={"user-agent": "cron"},
            method="SYSTEM",
            url="/system/startup",
        )

    def test_mapping_falls_back_to_connection_address(self):
        ctx = resolve_context({"connection": {"remoteAddress": "::1"}, "url": "/x"})
        assert ctx.ip == "::1"
        assert ctx.url == "/x"

    def test_mapping_original_url_wins_over_url(self):
        ctx = resolve_context({"originalUrl": "/api/a?b=1", "url": "/a"})
        assert ctx.url == "/api/a?b=1"

    def test_mapping_session_sources(self):
        assert resolve_context({"sessionID": "s1"}).session_id == "s1"
        assert resolve_context({"session_id": "s2"}).session_id == "s2"
        assert resolve_context({"headers": {"X-Session-Id": "s3"}}).session_id == "s3"

    def test_empty_values_treated_as_missing(self):
        ctx = resolve_context({"ip": "", "method": "", "headers": {"user-agent": None}})
        assert ctx.ip is None
        assert ctx.method is None
        assert ctx.header("user-agent") is None

    def test_object_with_headers_mapping(self):
        source = SimpleNamespace(
            ip="198.51.100.2",
            headers={"User-Agent": "Mozilla/5.0"},
            method="GET",
            originalUrl="/api/orders/3",
        )
        ctx = resolve_context(source)
        assert ctx.ip == "198.51.100.2"
        assert ctx.header("user-agent") == "Mozilla/5.0"
        assert ctx.url == "/api/orders/3"

    def test_object_with_header_accessor(self):
        headers = {"User-Agent": "nikto", "X-Session-Id": "guest-9"}

        class Legacy:
            method = "DELETE"
            url = "/api/cart/4"
            connection = SimpleNamespace(remoteAddress="192.0.2.1")

            def get(self, name):
                return headers.get(name)

        ctx = resolve_context(Legacy())
        assert ctx.ip == "192.0.2.1"
        assert ctx.header("user-agent") == "nikto"
        assert ctx.session_id == "guest-9"
        assert ctx.method == "DELETE"

    def test_bare_object_gives_empty_context(self):
        assert resolve_context(object()) == RequestContext()


class TestSystemContext:
    """Tests for system_context."""

    def test_defaults(self):
        ctx = system_context()
        assert ctx.ip == "localhost"
        assert ctx.method == "SYSTEM"
        assert ctx.url == "/system/startup"
        assert ctx.headers == {}

    def test_custom_url(self):
        assert system_context("/system/shutdown").url == "/system/shutdown"
