import logging

from fastapi import HTTPException
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from gallery.core.errors import TooLargeError

logger = logging.getLogger(__name__)


class BodyTooLarge(HTTPException):
    """Raised from inside receive(); FastAPI re-raises HTTPExceptions from body parsing untouched."""

    def __init__(self):
        super().__init__(status_code=TooLargeError.status_code, detail=TooLargeError.message)


class UploadSizeLimitMiddleware:
    """
    Bound the request body of one upload path while it streams in.

    A declared Content-Length over the limit is refused before any byte is read.
    Bodies without one (chunked transfer) are counted message by message and cut
    off as soon as the running total passes the limit.
    """

    def __init__(self, app: ASGIApp, path: str, max_body_bytes: int):
        self.app = app
        self.path = path
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http" or scope["method"] != "POST" or scope["path"] != self.path:
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length", "")
        if length.isdigit() and int(length) > self.max_body_bytes:
            logger.warning("❌ Upload rejected, Content-Length %s", length)
            await self._reject(scope, receive, send)
            return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    logger.warning("❌ Upload rejected after %d streamed bytes", received)
                    raise BodyTooLarge()
            return message

        async def tracking_send(message: Message):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except BodyTooLarge:
            # Normally rendered by the app's exception handlers; this covers reads outside a route
            if response_started:
                raise
            await self._reject(scope, receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send):
        response = JSONResponse(
            status_code=TooLargeError.status_code,
            content={"success": False, "error": TooLargeError.message},
        )
        await response(scope, receive, send)
