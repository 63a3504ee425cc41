"""Tests for the request-scoped security dependencies."""
from __future__ import annotations

from starlette.requests import Request

from campus_hub.data_scope.resolver import ScopeResolver
from campus_hub.security.dependencies import get_scope_resolver


def _request() -> Request:
    return Request({"type": "http", "method": "GET", "path": "/me", "query_string": b"", "headers": []})


def test_scope_resolver_is_shared_within_a_request(db_session):
    request = _request()

    first = get_scope_resolver(request, db_session)

    assert isinstance(first, ScopeResolver)
    assert get_scope_resolver(request, db_session) is first
    assert get_scope_resolver(_request(), db_session) is not first
