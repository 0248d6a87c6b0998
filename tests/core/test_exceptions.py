from etag_interceptor.core.exceptions import (
    BaseInterceptorException,
    FingerprintConfigurationError,
    HandlerContractError,
    InvalidFingerprintError,
)


class TestBaseInterceptorException:
    def test_base_exception(self):
        exception = BaseInterceptorException(
            detail="Test error",
            error_code="TEST_ERROR",
            additional_info={"test": "info"},
        )

        assert exception.status_code == 500
        assert exception.detail == "Test error"
        assert str(exception) == "Test error"
        assert exception.error_code == "TEST_ERROR"
        assert exception.additional_info == {"test": "info"}

    def test_default_additional_info(self):
        exception = BaseInterceptorException(detail="Test error", error_code="TEST_ERROR")

        assert exception.additional_info == {}


class TestSpecificExceptions:
    def test_handler_contract_error(self):
        exception = HandlerContractError(None)

        assert exception.error_code == "HANDLER_CONTRACT_ERROR"
        assert "NoneType" in exception.detail
        assert exception.additional_info == {"returned_type": "NoneType"}

    def test_invalid_fingerprint_error(self):
        exception = InvalidFingerprintError(b"bytes-tag")

        assert exception.error_code == "INVALID_FINGERPRINT"
        assert exception.additional_info == {"returned_type": "bytes"}

    def test_fingerprint_configuration_error(self):
        exception = FingerprintConfigurationError("crc0")

        assert exception.detail == "Unknown fingerprint algorithm: crc0"
        assert isinstance(exception, BaseInterceptorException)
