"""
Middleware for trace ID propagation and request context management.

This middleware:
- Extracts trace ID from HTTP headers (X-Trace-ID or X-Request-ID)
- Generates new trace ID if not present
- Tags requests to the AI endpoints with the facade operation they run
- Records HTTP request metrics
- Includes trace and request IDs in HTTP response headers
"""
import time
from typing import Callable, Dict, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging import (
    generate_request_id,
    generate_trace_id,
    get_logger,
    set_request_id,
    set_trace_id,
)
from .metrics import normalize_endpoint, record_http_request

logger = get_logger(__name__)

# endpoint path -> AIService operation
AI_OPERATIONS: Dict[str, str] = {
    "/ai/scripture": "fetch_scripture",
    "/ai/takeaway": "get_key_takeaway",
    "/ai/takeaway/validate": "validate_key_takeaway_response",
    "/ai/score": "get_ai_score",
    "/ai/verses/search": "get_new_verses_based_on_description",
    "/ai/test": "test",
}


def ai_operation_for(path: str) -> Optional[str]:
    return AI_OPERATIONS.get(normalize_endpoint(path))


class TraceIDMiddleware(BaseHTTPMiddleware):
    """Sets trace/request IDs in the logging context for each request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        trace_id = (
            request.headers.get("X-Trace-ID")
            or request.headers.get("X-Request-ID")
            or generate_trace_id()
        )
        request_id = generate_request_id()

        set_trace_id(trace_id)
        set_request_id(request_id)

        request_fields = {"method": request.method, "path": request.url.path}
        operation = ai_operation_for(request.url.path)
        if operation:
            request_fields["ai_operation"] = operation

        start_time = time.time()
        logger.info(
            "request_started",
            client_host=request.client.host if request.client else None,
            **request_fields,
        )

        try:
            response = await call_next(request)

            process_time = time.time() - start_time
            record_http_request(
                method=request.method,
                endpoint=request.url.path,
                status_code=response.status_code,
                duration_seconds=process_time,
            )
            log = logger.warning if response.status_code == 503 and operation else logger.info
            log(
                "request_completed",
                status_code=response.status_code,
                latency_ms=int(process_time * 1000),
                **request_fields,
            )

            response.headers["X-Trace-ID"] = trace_id
            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            process_time = time.time() - start_time
            record_http_request(
                method=request.method,
                endpoint=request.url.path,
                status_code=500,
                duration_seconds=process_time,
            )
            logger.error(
                "request_failed",
                error=str(e),
                error_type=type(e).__name__,
                latency_ms=int(process_time * 1000),
                exc_info=True,
                **request_fields,
            )
            raise
        finally:
            set_trace_id(None)
            set_request_id(None)
