import logging
import secrets
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class HTTPLogMiddleware(BaseHTTPMiddleware):
    """Request log with a per-request ID echoed back in X-Request-ID.

    Writes (meeting mutations, RSVPs, votes) are logged at INFO, reads at DEBUG.
    """

    def __init__(self, app, logger_name: str = "iepsched.http"):
        super().__init__(app)
        self._logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or secrets.token_hex(8)
        level = logging.INFO if request.method in WRITE_METHODS else logging.DEBUG
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception as e:
            dur_ms = int((time.perf_counter() - start) * 1000)
            self._logger.warning("http.request error id=%s method=%s path=%s dur_ms=%s err=%r",
                                 request_id, request.method, request.url.path, dur_ms, e)
            raise
        dur_ms = int((time.perf_counter() - start) * 1000)
        self._logger.log(level, "http.request id=%s method=%s path=%s status=%s dur_ms=%s",
                         request_id, request.method, request.url.path, response.status_code, dur_ms)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
