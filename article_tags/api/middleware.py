"""HTTP middleware for request logging and tracing."""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.logging import generate_request_id, get_logger, request_id_var

logger = get_logger("api.requests")

# Paths polled by monitors and browsers; not worth a log line each
QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one line per request and tag it with a request id.

    The id is stored in request_id_var (so every log line of the request
    carries it) and returned to the client in the X-Request-ID header.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        token = request_id_var.set(request_id)

        start = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        fields = {"method": request.method, "path": request.url.path, "client_ip": client_ip}

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={**fields, "duration_ms": self._elapsed_ms(start), "error": str(e)},
                exc_info=True,
            )
            request_id_var.reset(token)
            raise

        response.headers["X-Request-ID"] = request_id

        if request.url.path not in QUIET_PATHS:
            log = logger.info if response.status_code < 400 else logger.warning
            log(
                "Request completed",
                extra={
                    **fields,
                    "status": response.status_code,
                    "duration_ms": self._elapsed_ms(start),
                },
            )

        request_id_var.reset(token)
        return response

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.perf_counter() - start) * 1000)
