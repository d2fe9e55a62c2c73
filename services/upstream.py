"""HTTP client utilities for forwarded requests."""

import logging
from typing import AsyncIterator

import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.exceptions import (
    RelayError,
    RequestBuildError,
    UpstreamConnectionError,
    UpstreamTimeoutError,
)
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest

logger = logging.getLogger(__name__)


class UpstreamClient:
    """Send prepared requests upstream and relay the responses back."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        header_builder: HeaderBuilder,
        request_logger: RequestLogger | None = None,
    ) -> None:
        self._client = client
        self._headers = header_builder
        self._logger = request_logger

    def build(
        self,
        prepared: PreparedRequest,
        inbound_headers: list[tuple[bytes, bytes]],
    ) -> httpx.Request:
        """Build the outbound request with merged headers."""
        try:
            url = httpx.URL(prepared.target_url)
            if not url.is_absolute_url:
                raise RequestBuildError(
                    f"Target is not an absolute URL: {prepared.target_url!r}",
                    target=prepared.target_url,
                )
            request = self._client.build_request(
                prepared.method,
                url,
                content=prepared.body or None,
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError) as e:
            raise RequestBuildError(str(e), target=prepared.target_url) from e

        request.headers = self._headers.merge_outbound(request.headers, inbound_headers)
        return request

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Execute the outbound request, leaving the body unread."""
        target = str(request.url)
        try:
            return await self._client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Upstream timeout: {e}", target=target) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(
                f"Upstream connection error: {e}", target=target
            ) from e

    async def relay(self, response: httpx.Response) -> StreamingResponse:
        """Relay upstream headers, status and raw body bytes."""
        try:
            relayed = StreamingResponse(
                self._iter_body(response),
                status_code=response.status_code,
                background=BackgroundTask(self._cleanup_streaming, response),
            )
            relayed.raw_headers = self._headers.build_relayed(response.headers)
        except Exception:
            await response.aclose()
            raise
        return relayed

    async def _iter_body(self, response: httpx.Response) -> AsyncIterator[bytes]:
        target = str(response.request.url)
        try:
            async for chunk in response.aiter_raw():
                yield chunk
        except httpx.HTTPError as e:
            # Status and headers are already committed; the caller gets a
            # truncated body.
            error = RelayError(f"Failed to copy response body: {e}", target=target)
            logger.warning("%s (%s)", error, target)
            if self._logger:
                self._logger.log_error(target, response.status_code, str(error))
        finally:
            await response.aclose()

    async def _cleanup_streaming(self, response: httpx.Response) -> None:
        """Clean up streaming resources."""
        await response.aclose()
