"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_health, handle_not_forwarded
from core.config import Config
from core.protocols import RequestLogger
from services.forwarder import Forwarder

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def create_app(
    config: Config,
    logger: RequestLogger | None = None,
    client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create the standalone server with the Forwarder in front of it."""
    # Middleware is instantiated before lifespan runs, so the client has to
    # exist up front.
    client = client or httpx.AsyncClient(follow_redirects=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Proxy Forward", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        Forwarder,
        headers=config.forward.headers,
        name=config.forward.name,
        trigger_header=config.forward.trigger_header,
        client=client,
        logger=logger,
    )

    @app.get("/health")
    async def health(request: Request):
        return await handle_health(request, config)

    @app.api_route("/{path:path}", methods=ALL_METHODS)
    async def not_forwarded(request: Request, path: str):
        return await handle_not_forwarded(request, config)

    return app
