import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class HTTPLogMiddleware(BaseHTTPMiddleware):
    """Debug-level request timing, enabled with REQUEST_DEBUG=1."""

    def __init__(self, app, logger_name: str = "slotboard.http"):
        super().__init__(app)
        self._logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        self._logger.debug("http.request start method=%s path=%s", method, path)
        try:
            response: Response = await call_next(request)
        except Exception as e:
            dur_ms = int((time.perf_counter() - start) * 1000)
            self._logger.warning("http.request error method=%s path=%s dur_ms=%s err=%r",
                                 method, path, dur_ms, e)
            raise
        room_id = request.path_params.get("room_id", "-")
        dur_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Response-Time-Ms"] = str(dur_ms)
        self._logger.debug("http.request end method=%s path=%s room=%s status=%s dur_ms=%s",
                           method, path, room_id, response.status_code, dur_ms)
        return response
