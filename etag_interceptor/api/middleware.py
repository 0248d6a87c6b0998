from typing import Callable, Dict, Iterable, List, Tuple
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.status import HTTP_304_NOT_MODIFIED
from starlette.types import ASGIApp
from etag_interceptor.core.config import settings
from etag_interceptor.core.interceptor import apply_conditional_cache
from etag_interceptor.core.logging import LogContext, PerformanceLogger
from etag_interceptor.models.http import HTTPRequest, HTTPResponse
from etag_interceptor.utils.etag import (
    Fingerprint,
    extract_etag_header,
    fingerprint_from_settings,
)
import time
from etag_interceptor.core.metrics import (
    http_requests_total,
    http_request_duration,
    active_requests,
    cache_hits,
    cache_misses,
    conditional_requests_total,
)

logger = LogContext(__name__)

RawHeaders = List[Tuple[bytes, bytes]]


async def read_body(response: Response) -> bytes:
    """Drain a streaming response into bytes"""
    body = b""
    async for chunk in response.body_iterator:
        body += chunk if isinstance(chunk, bytes) else chunk.encode()
    return body


def merge_raw_headers(raw: RawHeaders, headers: Dict[str, str]) -> RawHeaders:
    """
    Rebuild the header list of an intercepted response

    ``headers`` is the interceptor's single-valued view of the result. Names
    missing from it are dropped. Names whose value still equals the first
    downstream value keep every downstream pair, so repeated headers such
    as Set-Cookie or Vary survive. Changed names are replaced by one pair.

    Args:
        raw: Header pairs of the downstream response, in order
        headers: Headers of the response the interceptor returned

    Returns:
        Header pairs for the response sent to the client
    """
    wanted = {
        name.lower().encode("latin-1"): value.encode("latin-1")
        for name, value in headers.items()
    }

    first_values: Dict[bytes, bytes] = {}
    for name, value in raw:
        first_values.setdefault(name.lower(), value)

    replaced = {
        name for name, value in wanted.items() if first_values.get(name) != value
    }

    merged = [
        (name, value)
        for name, value in raw
        if name.lower() in wanted and name.lower() not in replaced
    ]
    merged.extend((name, wanted[name]) for name in wanted if name in replaced)
    return merged


class ETagMiddleware(BaseHTTPMiddleware):
    """
    Middleware for handling conditional requests with ETags

    The downstream application is treated as the wrapped handler: its
    response is materialized, fingerprinted and either returned with an
    ETag header or replaced by an empty 304 Not Modified when the client's
    If-None-Match equals the fingerprint.
    """

    def __init__(
        self,
        app: ASGIApp,
        fingerprint: Fingerprint | None = None,
        etag_on_not_modified: bool | None = None,
        methods: Iterable[str] | None = None,
    ):
        super().__init__(app)
        self.fingerprint = fingerprint or fingerprint_from_settings(settings)
        self.etag_header = settings.ETAG_HEADER
        self.if_none_match_header = settings.IF_NONE_MATCH_HEADER
        self.etag_on_not_modified = (
            settings.ETAG_ON_NOT_MODIFIED
            if etag_on_not_modified is None
            else etag_on_not_modified
        )
        self.methods = {
            method.upper() for method in (methods or settings.ETAG_METHODS)
        }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method not in self.methods:
            return await call_next(request)

        # downstream errors propagate from here, before any fingerprinting
        downstream = await call_next(request)
        materialized = HTTPResponse(
            status_code=downstream.status_code,
            headers=dict(downstream.headers),
            body=await read_body(downstream),
        )

        with PerformanceLogger(
            logger, f"Conditional cache for {request.method} {request.url.path}"
        ):
            result = apply_conditional_cache(
                HTTPRequest(
                    method=request.method,
                    path=request.url.path,
                    headers=dict(request.headers),
                ),
                materialized,
                self.fingerprint,
                etag_header=self.etag_header,
                if_none_match_header=self.if_none_match_header,
                etag_on_not_modified=self.etag_on_not_modified,
            )

        if settings.METRICS_ENABLED:
            self._record_outcome(request, result)

        response = Response(content=result.body_bytes, status_code=result.status_code)
        response.raw_headers = merge_raw_headers(downstream.raw_headers, result.headers)
        return response

    def _record_outcome(self, request: Request, result: HTTPResponse) -> None:
        client_etag = extract_etag_header(request.headers, self.if_none_match_header)

        if client_etag is None:
            conditional_requests_total.labels(outcome="unconditional").inc()
        elif result.status_code == HTTP_304_NOT_MODIFIED:
            conditional_requests_total.labels(outcome="not_modified").inc()
            cache_hits.labels(cache_type="etag").inc()
        else:
            conditional_requests_total.labels(outcome="modified").inc()
            cache_misses.labels(cache_type="etag").inc()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to generate and track request IDs and establish correlation context

    This middleware:
    1. Reuses a well-formed incoming X-Request-ID header
    2. Otherwise generates a new unique request ID
    3. Sets up correlation context for the request
    4. Stores the request ID in request.state and logging context
    5. Adds the request ID to response headers
    6. Logs request and response info with timing information
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        from etag_interceptor.utils.request_id import (
            REQUEST_ID_HEADER,
            resolve_request_id,
        )
        from etag_interceptor.core.logging import (
            set_request_id,
            add_correlation_id,
            reset_correlation_context,
        )

        reset_correlation_context()

        request_id = resolve_request_id(request.headers)

        request.state.request_id = request_id

        set_request_id(request_id)

        add_correlation_id("method", request.method)
        add_correlation_id("path", request.url.path)
        add_correlation_id(
            "client_ip", request.client.host if request.client else "unknown"
        )

        start_time = time.time()

        logger.info(f"Request received: {request.method} {request.url.path}")

        try:
            response = await call_next(request)

            duration_ms = (time.time() - start_time) * 1000

            add_correlation_id("status_code", response.status_code)
            add_correlation_id("duration_ms", round(duration_ms, 2))

            response.headers[REQUEST_ID_HEADER] = request_id

            logger.info(
                f"Request completed: {request.method} {request.url.path} - {response.status_code} in {duration_ms:.2f}ms"
            )
            return response
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            add_correlation_id("duration_ms", round(duration_ms, 2))
            add_correlation_id("error", str(e))

            logger.exception(f"Unhandled exception in request processing: {str(e)}")
            raise


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware for collecting Prometheus metrics for HTTP requests

    This middleware tracks:
    1. Total HTTP requests with labels for method, endpoint, and status code
    2. HTTP request duration in seconds
    3. Number of currently active requests
    """

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/metrics":
            return await call_next(request)

        active_requests.inc()

        start_time = time.time()
        endpoint = request.url.path

        try:
            response = await call_next(request)
            duration = time.time() - start_time

            http_request_duration.labels(
                method=request.method, endpoint=endpoint
            ).observe(duration)

            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=response.status_code,
            ).inc()

            return response
        except Exception as e:
            http_requests_total.labels(
                method=request.method, endpoint=endpoint, status_code=500
            ).inc()

            logger.error(
                "Request error in PrometheusMiddleware",
                extra={
                    "error": str(e),
                    "error_type": e.__class__.__name__,
                },
            )
            raise
        finally:
            active_requests.dec()
