"""
Conditional caching with entity tags

An interceptor wraps a handler and a fingerprint function. Every call runs
the handler, fingerprints the response it produced, and compares that
fingerprint with the one the client sent in If-None-Match:

- equal: the body is dropped and a 304 Not Modified is returned
- different or absent: the handler's response is returned with the ETag
  header set to the fresh fingerprint

Interceptors keep no state between calls, so one instance can serve
concurrent requests as long as the handler and fingerprint function can.
"""
import functools
import inspect
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Union

from etag_interceptor.core.config import settings
from etag_interceptor.core.exceptions import (
    HandlerContractError,
    InvalidFingerprintError,
)
from etag_interceptor.core.logging import LogContext
from etag_interceptor.models.http import HTTPRequest, HTTPResponse
from etag_interceptor.utils.etag import (
    Fingerprint,
    extract_etag_header,
    is_etag_match,
)

logger = LogContext(__name__)


class Handler(ABC):
    """Anything that turns a request into a response"""

    @abstractmethod
    def handle(self, request: HTTPRequest) -> HTTPResponse:
        pass


class AsyncHandler(ABC):
    @abstractmethod
    async def handle(self, request: HTTPRequest) -> HTTPResponse:
        pass


class FunctionHandler(Handler):
    """Adapts a plain function to the Handler interface"""

    def __init__(self, fn: Callable[[HTTPRequest], HTTPResponse]):
        self.fn = fn

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        return self.fn(request)


class AsyncFunctionHandler(AsyncHandler):
    """Adapts a coroutine function to the AsyncHandler interface"""

    def __init__(self, fn: Callable[[HTTPRequest], Awaitable[HTTPResponse]]):
        self.fn = fn

    async def handle(self, request: HTTPRequest) -> HTTPResponse:
        return await self.fn(request)


def apply_conditional_cache(
    request: HTTPRequest,
    response: HTTPResponse,
    fingerprint: Fingerprint,
    *,
    etag_header: str = "ETag",
    if_none_match_header: str = "If-None-Match",
    etag_on_not_modified: bool = False,
) -> HTTPResponse:
    """
    Decide between 304 Not Modified and the full response

    Args:
        request: The request the response was produced for
        response: The materialized response of the wrapped handler
        fingerprint: Function computing the server fingerprint of a response
        etag_header: Response header that carries the fingerprint
        if_none_match_header: Request header the client fingerprint is read from
        etag_on_not_modified: Echo the fingerprint header on 304 responses

    Returns:
        A new response. ``response`` itself is never modified.

    Raises:
        HandlerContractError: If ``response`` is not an HTTPResponse
        InvalidFingerprintError: If ``fingerprint`` returns a non-string
    """
    if not isinstance(response, HTTPResponse):
        raise HandlerContractError(response)

    client_etag = extract_etag_header(request.headers, if_none_match_header)

    server_etag = fingerprint(response)
    if not isinstance(server_etag, str):
        raise InvalidFingerprintError(server_etag)

    if is_etag_match(server_etag, client_etag):
        logger.debug(
            f"ETag match for {request.method} {request.path}, returning 304",
            extra={"etag": server_etag},
        )
        headers = {etag_header: server_etag} if etag_on_not_modified else {}
        return HTTPResponse.not_modified(headers)

    logger.debug(
        f"ETag miss for {request.method} {request.path}",
        extra={"etag": server_etag, "client_etag": client_etag},
    )
    return response.with_header(etag_header, server_etag)


class _ConditionalCacheBase:
    def __init__(
        self,
        fingerprint: Fingerprint,
        *,
        etag_header: str | None = None,
        if_none_match_header: str | None = None,
        etag_on_not_modified: bool | None = None,
    ):
        self.fingerprint = fingerprint
        self.etag_header = etag_header or settings.ETAG_HEADER
        self.if_none_match_header = (
            if_none_match_header or settings.IF_NONE_MATCH_HEADER
        )
        self.etag_on_not_modified = (
            settings.ETAG_ON_NOT_MODIFIED
            if etag_on_not_modified is None
            else etag_on_not_modified
        )

    def _apply(self, request: HTTPRequest, response: HTTPResponse) -> HTTPResponse:
        return apply_conditional_cache(
            request,
            response,
            self.fingerprint,
            etag_header=self.etag_header,
            if_none_match_header=self.if_none_match_header,
            etag_on_not_modified=self.etag_on_not_modified,
        )


class ConditionalCacheInterceptor(_ConditionalCacheBase, Handler):
    """
    Handler decorator adding ETag based conditional caching

    Example:
        hello = FunctionHandler(lambda request: HTTPResponse(
            status_code=200, body="<h1>Hello</h1>"
        ))
        handler = ConditionalCacheInterceptor(hello, body_digest_fingerprint())
        response = handler.handle(HTTPRequest(method="GET", path="/"))
    """

    def __init__(
        self,
        inner: Union[Handler, Callable[[HTTPRequest], HTTPResponse]],
        fingerprint: Fingerprint,
        **options: Any,
    ):
        super().__init__(fingerprint, **options)
        self.inner = inner if isinstance(inner, Handler) else FunctionHandler(inner)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        # handler errors propagate before any fingerprinting happens
        response = self.inner.handle(request)
        return self._apply(request, response)

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        return self.handle(request)


class AsyncConditionalCacheInterceptor(_ConditionalCacheBase, AsyncHandler):
    """Same as ConditionalCacheInterceptor for handlers that must be awaited"""

    def __init__(
        self,
        inner: Union[AsyncHandler, Callable[[HTTPRequest], Awaitable[HTTPResponse]]],
        fingerprint: Fingerprint,
        **options: Any,
    ):
        super().__init__(fingerprint, **options)
        self.inner = (
            inner if isinstance(inner, AsyncHandler) else AsyncFunctionHandler(inner)
        )

    async def handle(self, request: HTTPRequest) -> HTTPResponse:
        response = await self.inner.handle(request)
        return self._apply(request, response)

    async def __call__(self, request: HTTPRequest) -> HTTPResponse:
        return await self.handle(request)


def conditional_cache(fingerprint: Fingerprint, **options: Any):
    """
    Decorator form of the interceptor for plain handler functions

    Coroutine functions get the async interceptor, everything else the
    synchronous one.
    """

    def decorator(fn):
        if inspect.iscoroutinefunction(fn):
            interceptor = AsyncConditionalCacheInterceptor(fn, fingerprint, **options)

            @functools.wraps(fn)
            async def async_wrapper(request: HTTPRequest) -> HTTPResponse:
                return await interceptor.handle(request)

            async_wrapper.interceptor = interceptor
            return async_wrapper

        interceptor = ConditionalCacheInterceptor(fn, fingerprint, **options)

        @functools.wraps(fn)
        def wrapper(request: HTTPRequest) -> HTTPResponse:
            return interceptor.handle(request)

        wrapper.interceptor = interceptor
        return wrapper

    return decorator
