from typing import Dict, Any


class BaseInterceptorException(Exception):
    """Base exception class for interceptor contract violations"""

    def __init__(
        self,
        detail: str,
        error_code: str,
        status_code: int = 500,
        additional_info: Dict[str, Any] | None = None,
    ):
        super().__init__(detail)
        self.detail = detail
        self.error_code = error_code
        self.status_code = status_code
        self.additional_info = additional_info or {}


class HandlerContractError(BaseInterceptorException):
    """Raised when a wrapped handler returns something other than a response"""

    def __init__(self, returned: Any):
        super().__init__(
            detail=(
                "Wrapped handler must return an HTTPResponse, "
                f"got {type(returned).__name__}"
            ),
            error_code="HANDLER_CONTRACT_ERROR",
            additional_info={"returned_type": type(returned).__name__},
        )


class InvalidFingerprintError(BaseInterceptorException):
    """Raised when a fingerprint function returns a non-string value"""

    def __init__(self, fingerprint: Any):
        super().__init__(
            detail=(
                "Fingerprint function must return a string, "
                f"got {type(fingerprint).__name__}"
            ),
            error_code="INVALID_FINGERPRINT",
            additional_info={"returned_type": type(fingerprint).__name__},
        )


class FingerprintConfigurationError(BaseInterceptorException):
    """Raised when a fingerprint strategy is configured with an unknown algorithm"""

    def __init__(self, algorithm: str):
        super().__init__(
            detail=f"Unknown fingerprint algorithm: {algorithm}",
            error_code="FINGERPRINT_CONFIGURATION_ERROR",
            additional_info={"algorithm": algorithm},
        )
