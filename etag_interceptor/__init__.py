"""
HTTP conditional caching (ETag / If-None-Match) as a handler interceptor.
"""
from etag_interceptor.core.interceptor import (
    AsyncConditionalCacheInterceptor,
    AsyncFunctionHandler,
    AsyncHandler,
    ConditionalCacheInterceptor,
    FunctionHandler,
    Handler,
    apply_conditional_cache,
    conditional_cache,
)
from etag_interceptor.models.http import HTTPRequest, HTTPResponse
from etag_interceptor.utils.etag import (
    Fingerprint,
    body_digest_fingerprint,
    constant_fingerprint,
)

__all__ = [
    "AsyncConditionalCacheInterceptor",
    "AsyncFunctionHandler",
    "AsyncHandler",
    "ConditionalCacheInterceptor",
    "FunctionHandler",
    "Handler",
    "apply_conditional_cache",
    "conditional_cache",
    "HTTPRequest",
    "HTTPResponse",
    "Fingerprint",
    "body_digest_fingerprint",
    "constant_fingerprint",
]
