import json

import httpx
import pytest


class FakeService:
    """Scripted stand-in for the mutex service.

    ``routes`` maps the action (``lock``, ``get``, ``refresh``, ``unlock``)
    to a list of responses served in order; the last one repeats.
    """

    def __init__(self, **routes):
        self.routes = routes
        self.requests = []
        self.hooks = {}

    @staticmethod
    def action(request: httpx.Request) -> str:
        raw = request.url.raw_path.decode("ascii").split("?", 1)[0]
        parts = raw.split("/v1/mutex/", 1)[1].split("/")
        return parts[1] if len(parts) > 1 else "get"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        action = self.action(request)
        hook = self.hooks.get(action)
        if hook is not None:
            hook(request)
        script = self.routes[action]
        response = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(response, Exception):
            raise response
        status, body = response
        if not isinstance(body, str):
            body = json.dumps(body)
        return httpx.Response(status, text=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def actions(self):
        return [self.action(request) for request in self.requests]


LOCK_BODY = {"token": "abc", "expiresAt": "2030-01-01T00:00:00Z"}


@pytest.fixture
def lock_body():
    return dict(LOCK_BODY)
