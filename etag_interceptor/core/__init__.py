from .exceptions import (
    BaseInterceptorException,
    HandlerContractError,
    InvalidFingerprintError,
    FingerprintConfigurationError,
)
from .logging import setup_logging

__all__ = [
    "BaseInterceptorException",
    "HandlerContractError",
    "InvalidFingerprintError",
    "FingerprintConfigurationError",
    "setup_logging",
]
