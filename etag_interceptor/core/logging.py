import logging
import json
import time
from typing import Dict, Any, List
from contextvars import ContextVar
from etag_interceptor.core.config import settings

correlation_context_var: ContextVar[Dict[str, Any]] = ContextVar(
    "correlation_context", default={}
)

# attributes every LogRecord has; anything else on a record came in through extra
_RESERVED_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


def add_correlation_id(key: str, value: Any) -> None:
    """
    Add a key-value pair to the correlation context
    """
    # copy so concurrent requests never share one dict
    correlation_context_var.set({**correlation_context_var.get(), key: value})


def set_request_id(request_id: str) -> None:
    add_correlation_id("request_id", request_id)


def get_correlation_context() -> Dict[str, Any]:
    return correlation_context_var.get()


def reset_correlation_context() -> None:
    correlation_context_var.set({})


class LogContext:
    """
    Logger wrapper that stamps every record with the correlation context
    of the request being served
    """

    def __init__(self, logger_name: str | None = None):
        self.logger = logging.getLogger(logger_name)

    def debug(self, message: str, extra: Dict[str, Any] | None = None) -> None:
        self._log(logging.DEBUG, message, extra)

    def info(self, message: str, extra: Dict[str, Any] | None = None) -> None:
        self._log(logging.INFO, message, extra)

    def warning(self, message: str, extra: Dict[str, Any] | None = None) -> None:
        self._log(logging.WARNING, message, extra)

    def error(
        self, message: str, extra: Dict[str, Any] | None = None, exc_info: bool = False
    ) -> None:
        self._log(logging.ERROR, message, extra, exc_info)

    def exception(self, message: str, extra: Dict[str, Any] | None = None) -> None:
        self._log(logging.ERROR, message, extra, exc_info=True)

    def _log(
        self,
        level: int,
        message: str,
        extra: Dict[str, Any] | None = None,
        exc_info: bool = False,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return

        self.logger.log(
            level,
            message,
            extra={**get_correlation_context(), **(extra or {})},
            exc_info=exc_info,
        )


class CustomFormatter(logging.Formatter):
    """
    Renders each record as one JSON object per line

    Correlation fields and anything passed through ``extra`` become top
    level keys. Exceptions are reduced to their type and message.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "message": record.getMessage(),
            "path": f"{record.pathname}:{record.lineno}",
            "service": settings.PROJECT_NAME,
        }

        log_entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_")
        )

        if record.exc_info and isinstance(record.exc_info, tuple):
            exc_type, exc_value, *_ = record.exc_info
            if exc_type and exc_value:
                log_entry["error"] = {
                    "type": exc_type.__name__,
                    "message": str(exc_value),
                }

        return json.dumps(log_entry, default=str)


class PerformanceLogger:
    """
    Times the enclosed block and logs its duration

    Success is logged at DEBUG, failure at ERROR with the traceback. The
    exception itself is never suppressed.
    """

    def __init__(self, logger: LogContext, operation_name: str):
        self.logger = logger
        self.operation_name = operation_name
        self.duration_ms: float | None = None
        self._started = 0.0

    def __enter__(self) -> "PerformanceLogger":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.duration_ms = (time.perf_counter() - self._started) * 1000
        extra = {"operation": self.operation_name, "duration_ms": self.duration_ms}

        if exc_type is None:
            self.logger.debug(
                f"{self.operation_name} took {self.duration_ms:.2f}ms", extra=extra
            )
            return

        self.logger.error(
            f"{self.operation_name} failed after {self.duration_ms:.2f}ms",
            extra=extra,
            exc_info=True,
        )


def setup_logging() -> None:
    formatter = CustomFormatter()

    # console only gets warnings; the optional file gets everything
    handlers: List[logging.Handler] = []
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    handlers.append(console_handler)

    if settings.LOG_FILE:
        file_handler = logging.FileHandler(settings.LOG_FILE)
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.LOG_LEVEL)
    root_logger.handlers = []
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    reset_correlation_context()
