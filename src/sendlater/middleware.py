import logging
from typing import Optional

from starlette.concurrency import iterate_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every request with its response code.

    Bodies of error responses are logged too, so validation and scheduling errors
    show up in the server log alongside the request that caused them.
    """

    def __init__(self, app: ASGIApp, logger: logging.Logger):
        self.logger = logger
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            response = await call_next(request)
        except Exception as e:
            self._log_message(
                response_code=500,
                request=request,
                msg=f"Unhandled exception: {str(e)}",
                level=logging.ERROR,
            )
            raise e

        msg = None
        if response.status_code < 400:
            level = logging.INFO
        elif response.status_code < 500:
            msg = await self._decode_body(response)
            level = logging.WARNING
        else:
            msg = await self._decode_body(response)
            level = logging.ERROR

        self._log_message(response_code=response.status_code, request=request, msg=msg, level=level)
        return response

    def _log_message(
        self,
        response_code: int,
        request: Request,
        msg: Optional[str] = None,
        level: int = logging.INFO,
    ) -> None:
        if msg:
            self.logger.log(
                level, "[%s] %s: %s - %s", response_code, request.method, request.url.path, msg
            )
        else:
            self.logger.log(level, "[%s] %s: %s", response_code, request.method, request.url.path)

    async def _decode_body(self, response: Response) -> str:
        if hasattr(response, "body_iterator"):
            chunks = []
            async for chunk in response.body_iterator:  # type: ignore[attr-defined]
                if not isinstance(chunk, bytes):
                    chunk = chunk.encode(response.charset)
                chunks.append(chunk)
            # put the consumed body back so it can still be sent
            response.body_iterator = iterate_in_threadpool(iter(chunks))
            body = b"".join(chunks)
        elif hasattr(response, "body"):
            body = response.body
        else:
            return ""
        return body.decode("utf-8", errors="replace")
