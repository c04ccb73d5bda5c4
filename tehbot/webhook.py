"""Webhook receiver — FastAPI application that feeds updates to a dispatcher.

Contract with the Bot API:

* ``POST <path>`` with a JSON ``Update`` body → dispatch, then ``200 OK``;
* malformed body or a failed dispatch → ``500 Error`` and one
  ``webhook_error`` signal;
* any other method or path → ``404 Not Found``.

Dispatch is awaited before responding, so Telegram only considers the update
delivered once every handler has run.  The app is served by uvicorn from
:meth:`tehbot.dispatcher.Dispatcher.start_webhook`, but can be mounted in any
ASGI server.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from tehcore.logger import TehLogger
from tehsdk.models import Update

if TYPE_CHECKING:
    from tehbot.dispatcher import Dispatcher

logger = TehLogger.get_logger()

_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_webhook_app(dispatcher: "Dispatcher", path: str = "/webhook") -> FastAPI:
    """Build the ASGI app that receives updates for *dispatcher* on *path*."""
    app = FastAPI(
        title="tehbot webhook",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.post(path, response_class=PlainTextResponse)
    async def receive_update(request: Request) -> PlainTextResponse:
        """Validate the body as one Update and dispatch it."""
        body = await request.body()
        try:
            update = Update.model_validate_json(body)
        except ValidationError as exc:
            logger.warning("Invalid webhook payload", extra={"path": path, "error": str(exc)})
            await dispatcher.notify("webhook_error", exc)
            return PlainTextResponse("Error", status_code=500)

        error = await dispatcher.handle_update(update)
        if error is not None:
            await dispatcher.notify("webhook_error", error)
            return PlainTextResponse("Error", status_code=500)
        return PlainTextResponse("OK", status_code=200)

    # Registered last so the update route wins for POST <path>.
    @app.api_route("/{unmatched:path}", methods=_ALL_METHODS, include_in_schema=False)
    async def not_found(unmatched: str) -> PlainTextResponse:
        return PlainTextResponse("Not Found", status_code=404)

    return app
