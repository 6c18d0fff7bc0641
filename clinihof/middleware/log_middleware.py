import time
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from clinihof.core.config import settings
from clinihof.core.logger import logger

REQUEST_ID_HEADER = "X-Request-ID"

class LogMiddleware(BaseHTTPMiddleware):
    """One access line per request, tagged with a request id that is echoed back to the client."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex[:12]
        start_time = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        # Flag requests a MASTER may be issuing against another workspace
        marker = " | impersonation" if settings.IMPERSONATION_COOKIE_NAME in request.cookies else ""
        logger.info(
            f"[{request_id}] {request.method} {request.url.path} | "
            f"Status: {response.status_code} | "
            f"Duration: {duration:.4f}s{marker}"
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
