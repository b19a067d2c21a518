"""Shared fakes: a scripted API client and a stand-in for requests.Session."""

import copy
import json
import re
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest

from config.schema import ApiSession, SiteAddress


@dataclass
class Call:
    method: str
    endpoint: str
    params: Optional[dict]
    body: Any
    secondary: bool


class FakeClient:
    """Answers ApiClient.request from a (method, endpoint) route table.

    A route value is either returned as-is (deep-copied) or, if callable,
    called with (params, body). Unknown routes answer None, like a failed call.
    """

    def __init__(self, routes: Optional[dict] = None):
        self.routes = dict(routes or {})
        self.calls: list[Call] = []

    def request(self, endpoint, method="GET", body=None, *, params=None, secondary=False):
        self.calls.append(Call(method, endpoint, params, copy.deepcopy(body), secondary))
        handler = self.routes.get((method, endpoint))
        if callable(handler):
            return handler(params or {}, body)
        return copy.deepcopy(handler)

    def calls_to(self, endpoint: str, method: Optional[str] = None) -> list[Call]:
        return [c for c in self.calls
                if c.endpoint == endpoint and (method is None or c.method == method)]


def scim_routes(users: dict[str, int]) -> dict:
    """Routes for both SCIM lookups over a {username: id} directory."""
    routes: dict = {}
    for name, uid in users.items():
        routes[("GET", f"api/scim/users/{uid}")] = {"id": str(uid), "userName": name}

    def by_filter(params, _body):
        m = re.fullmatch(r'userName eq "(.*)"', params.get("filter", ""))
        name = re.sub(r'\\(.)', r"\1", m.group(1)) if m else None
        if name in users:
            return {"Resources": [{"id": str(users[name]), "userName": name}]}
        return {"Resources": []}

    routes[("GET", "api/scim/users")] = by_filter
    return routes


def paged(items_key: str, pages: list[list[dict]]):
    """Route handler serving ``pages`` by the 1-based ``page`` parameter."""
    def handler(params, _body):
        index = params["page"] - 1
        if index >= len(pages):
            return None
        return {
            "success": True,
            items_key: pages[index],
            "paging": {"HasNextPage": index + 1 < len(pages)},
        }
    return handler


# ─── requests stand-ins ───────────────────────────────────────────────────────

class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = "" if payload is None else json.dumps(payload)
        self.text = text
        self.content = text.encode("utf-8")
        self.reason = "Error" if status_code >= 400 else "OK"

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


@dataclass
class FakeHttp:
    """Records request()/post() calls and replays queued responses."""
    responses: list = field(default_factory=list)
    sent: list = field(default_factory=list)

    def _next(self):
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def request(self, method, url, **kwargs):
        self.sent.append({"method": method, "url": url, **kwargs})
        return self._next()

    def post(self, url, **kwargs):
        self.sent.append({"method": "POST", "url": url, **kwargs})
        return self._next()


@pytest.fixture
def api_session() -> ApiSession:
    return ApiSession(
        site=SiteAddress(base_url="https://acme.example.com", tenant="acme"),
        access_token="session-token",
        api_key="scim-key",
        scim_base_url="https://identity.example.com",
    )
