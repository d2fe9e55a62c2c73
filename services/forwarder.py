"""Conditional request forwarding middleware.

A request carrying the trigger header (``Location`` by default) is replayed
against the URL in that header: same method, same body, inbound headers with
the configured overrides on top. The upstream response is relayed back to the
caller as-is. Requests without the header go to the wrapped app untouched.
"""

import logging
from typing import Mapping

import httpx
from fastapi.responses import PlainTextResponse
from starlette.requests import ClientDisconnect, Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.config import ForwardSettings
from core.exceptions import BodyReadError, ForwardError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest
from core.router import ForwardDecider
from services.upstream import UpstreamClient

logger = logging.getLogger(__name__)

FORWARD_FAILED_MESSAGE = "Failed to forward request"


class Forwarder:
    """ASGI middleware that forwards requests named by a trigger header.

    When no ``client`` is given, the middleware creates one and closes it on
    lifespan shutdown. An injected client belongs to the caller.
    """

    def __init__(
        self,
        app: ASGIApp,
        headers: Mapping[str, str] | None = None,
        name: str = "proxy-forward",
        *,
        trigger_header: str = "Location",
        client: httpx.AsyncClient | None = None,
        logger: RequestLogger | None = None,
    ) -> None:
        self.app = app
        self.name = name
        self._decider = ForwardDecider(trigger_header)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True)
        self._logger = logger
        self._header_builder = HeaderBuilder(headers)
        self._upstream = UpstreamClient(self._client, self._header_builder, logger)

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._header_builder.overrides)

    def replace_headers(self, headers: Mapping[str, str]) -> None:
        """Swap in a new override table for requests that start afterwards."""
        builder = HeaderBuilder(headers)
        self._upstream = UpstreamClient(self._client, builder, self._logger)
        self._header_builder = builder

    async def aclose(self) -> None:
        await self._client.aclose()

    def _close_on_shutdown(self, send: Send) -> Send:
        # A client passed in by the caller stays open; the caller closes it.
        async def wrapped(message: Message) -> None:
            if message["type"] == "lifespan.shutdown.complete":
                await self.aclose()
            await send(message)

        return wrapped

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan" and self._owns_client:
            await self.app(scope, receive, self._close_on_shutdown(send))
            return
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        decision = self._decider.decide(request.headers)
        if not decision.should_forward:
            if self._logger:
                self._logger.log_passthrough(request.method, request.url.path)
            await self.app(scope, receive, send)
            return

        response = await self.forward(request, decision.target)
        await response(scope, receive, send)

    async def forward(self, request: Request, target: str) -> Response:
        """Replay request against target and return the relayed response.

        The request body is cached on ``request``, so it can still be read
        through ``request.body()`` or ``request.stream()`` afterwards.
        """
        logger.info("[%s] Forwarding request to: %s", self.name, target)
        upstream = self._upstream

        try:
            body = await self._read_body(request, target)
            prepared = PreparedRequest(request.method, target, body)
            outbound = upstream.build(prepared, request.headers.raw)
            if self._logger:
                self._logger.log_forward(
                    outbound.method,
                    target,
                    dict(outbound.headers),
                    name=self.name,
                )
            response = await upstream.send(outbound)
        except ForwardError as e:
            return self._error_response(e)

        if self._logger:
            self._logger.log_relay(target, response.status_code)
        return await upstream.relay(response)

    async def _read_body(self, request: Request, target: str) -> bytes:
        try:
            return await request.body()
        except (ClientDisconnect, RuntimeError) as e:
            raise BodyReadError(
                f"Failed to read request body: {e!r}", target=target
            ) from e

    def _error_response(self, error: ForwardError) -> Response:
        logger.error("[%s] %s", self.name, error)
        if self._logger:
            self._logger.log_error(error.target or "", error.status_code, str(error))
        return PlainTextResponse(FORWARD_FAILED_MESSAGE, status_code=error.status_code)


def create_config() -> ForwardSettings:
    """Create the default plugin configuration."""
    return ForwardSettings()


def new(
    app: ASGIApp,
    config: ForwardSettings,
    name: str,
    *,
    client: httpx.AsyncClient | None = None,
    logger: RequestLogger | None = None,
) -> Forwarder:
    """Create a Forwarder wrapping app from plugin configuration."""
    return Forwarder(
        app,
        headers=config.headers,
        name=name,
        trigger_header=config.trigger_header,
        client=client,
        logger=logger,
    )
