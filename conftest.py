# Make the flat top-level packages (core, services, api, ui) importable from
# tests that live beside the code.
import os
import sys

import httpx
import pytest

SERVICE_ROOT = os.path.dirname(__file__)

if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)


class UpstreamStub:
    """Stub upstream that records every outbound request it receives."""

    def __init__(self, status_code=200, headers=None, content=b"upstream body"):
        self.status_code = status_code
        self.headers = headers or {}
        self.content = content
        self.requests: list[httpx.Request] = []
        self.bodies: list[bytes] = []
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.bodies.append(request.read())
        if self.error is not None:
            raise self.error
        headers = list(httpx.Headers(self.headers).raw)
        if self.content and not any(k.lower() == b"content-length" for k, _ in headers):
            headers.insert(0, (b"content-length", str(len(self.content)).encode()))
        # Streamed like a real transport, so the body is still unread.
        return httpx.Response(
            self.status_code,
            headers=headers,
            stream=httpx.ByteStream(self.content),
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self),
            follow_redirects=True,
        )


class DownstreamApp:
    """ASGI app standing in for the next handler in the chain."""

    def __init__(self):
        self.calls = []

    async def __call__(self, scope, receive, send):
        self.calls.append((scope, receive, send))
        await send(
            {
                "type": "http.response.start",
                "status": 200,
                "headers": [(b"content-type", b"text/plain")],
            }
        )
        await send({"type": "http.response.body", "body": b"downstream"})


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def downstream():
    return DownstreamApp()
