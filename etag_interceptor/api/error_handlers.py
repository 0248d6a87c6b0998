from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from datetime import datetime, timezone
from typing import Any, Dict
from etag_interceptor.core.exceptions import BaseInterceptorException
from etag_interceptor.core.logging import LogContext

logger = LogContext(__name__)

# map status codes to error codes
STATUS_CODE_MAP = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "UNPROCESSABLE_ENTITY",
    500: "INTERNAL_SERVER_ERROR",
    502: "BAD_GATEWAY",
    503: "SERVICE_UNAVAILABLE",
    504: "GATEWAY_TIMEOUT",
}


def _error_response(
    request: Request, status_code: int, error_code: str, message: str, **fields: Any
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)

    content: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": status_code,
        "error_code": error_code,
        "message": message,
        "path": request.url.path,
        "request_id": request_id,
        **fields,
    }

    response = JSONResponse(status_code=status_code, content=content)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


async def interceptor_exception_handler(
    request: Request,
    exc: BaseInterceptorException,
) -> JSONResponse:
    """Handler for interceptor contract violations"""
    logger.error(
        f"Interceptor contract violation: {exc.detail}",
        extra={"error_code": exc.error_code},
    )
    fields = {"additional_info": exc.additional_info} if exc.additional_info else {}
    return _error_response(
        request, exc.status_code, exc.error_code, exc.detail, **fields
    )


async def http_exception_handler(
    request: Request,
    exc: HTTPException,
) -> JSONResponse:
    """
    Handler for FastAPI HTTP Exceptions
    """
    error_code = STATUS_CODE_MAP.get(exc.status_code, f"HTTP_ERROR_{exc.status_code}")
    return _error_response(request, exc.status_code, error_code, exc.detail)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return _error_response(
        request,
        422,
        "VALIDATION_ERROR",
        "Request validation error",
        errors=exc.errors(),
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handler for unexpected exceptions"""
    return _error_response(
        request,
        500,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
        type=exc.__class__.__name__,
    )


def setup_error_handlers(app: FastAPI) -> None:
    # interceptor contract violations
    app.add_exception_handler(BaseInterceptorException, interceptor_exception_handler)

    # fastapi and starlette http exceptions
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # validation errors
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # catch all for unexpected exceptions
    app.add_exception_handler(Exception, generic_exception_handler)
