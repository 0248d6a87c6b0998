import json
import pytest
from unittest.mock import MagicMock
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from etag_interceptor.api.error_handlers import (
    generic_exception_handler,
    interceptor_exception_handler,
    setup_error_handlers,
)
from etag_interceptor.core.exceptions import HandlerContractError


class MockRequest:
    def __init__(self, path="/test-path", request_id=None):
        self.url = MagicMock()
        self.url.path = path
        self.headers = {}
        self.state = MagicMock()
        self.state.request_id = request_id


@pytest.fixture
def error_client():
    app = FastAPI()
    setup_error_handlers(app)

    @app.get("/contract")
    async def contract():
        raise HandlerContractError(None)

    @app.get("/generic")
    async def generic():
        raise ValueError("Unexpected error")

    return TestClient(app, raise_server_exceptions=False)


class TestInterceptorExceptionHandler:
    @pytest.mark.asyncio
    async def test_interceptor_exception_handler(self):
        request = MockRequest(request_id="req-9")

        response = await interceptor_exception_handler(
            request, HandlerContractError(["not", "a", "response"])
        )

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "req-9"

        content = json.loads(response.body)
        assert content["error_code"] == "HANDLER_CONTRACT_ERROR"
        assert content["additional_info"] == {"returned_type": "list"}
        assert content["path"] == "/test-path"
        assert "timestamp" in content

    def test_response_format(self, error_client):
        response = error_client.get("/contract")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error_code"] == "HANDLER_CONTRACT_ERROR"


class TestGenericExceptionHandler:
    @pytest.mark.asyncio
    async def test_generic_exception_handler(self):
        response = await generic_exception_handler(
            MockRequest(), RuntimeError("boom")
        )

        content = json.loads(response.body)
        assert response.status_code == 500
        assert content["error_code"] == "INTERNAL_SERVER_ERROR"
        assert content["type"] == "RuntimeError"
        assert "boom" not in content["message"]

    def test_unexpected_error_becomes_500(self, error_client):
        response = error_client.get("/generic")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["type"] == "ValueError"

    def test_not_found_uses_error_code(self, error_client):
        response = error_client.get("/missing")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "NOT_FOUND"
