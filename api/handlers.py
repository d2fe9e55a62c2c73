"""FastAPI route handlers for requests that are not forwarded."""

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from core.config import Config


async def handle_health(_request: Request, config: Config) -> Response:
    """Report liveness of the standalone server."""
    return JSONResponse({"status": "ok", "name": config.forward.name})


async def handle_not_forwarded(request: Request, config: Config) -> Response:
    """Reject requests that reached the server without a forwarding directive."""
    await request.body()  # consume body
    return JSONResponse(
        {
            "error": "No forwarding directive",
            "detail": f"Set the {config.forward.trigger_header} header to the target URL",
        },
        status_code=404,
    )
