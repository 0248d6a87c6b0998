import pytest
from fastapi.testclient import TestClient

from etag_interceptor.main import create_app, HELLO_PAGE
from etag_interceptor.models.http import HTTPRequest, HTTPResponse
from etag_interceptor.utils.etag import constant_fingerprint


class RecordingHandler:
    """Handler returning a fixed response and counting its invocations"""

    def __init__(self, response: HTTPResponse):
        self.response = response
        self.calls = []

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        self.calls.append(request)
        return self.response


class RecordingFingerprint:
    def __init__(self, value: str = "v1"):
        self.value = value
        self.calls = []

    def __call__(self, response: HTTPResponse) -> str:
        self.calls.append(response)
        return self.value


@pytest.fixture
def hello_response():
    return HTTPResponse(status_code=200, body=HELLO_PAGE)


@pytest.fixture
def hello_handler(hello_response):
    return RecordingHandler(hello_response)


@pytest.fixture
def v1_fingerprint():
    return RecordingFingerprint("v1")


@pytest.fixture
def make_request():
    def _make(if_none_match: str | None = None, **headers):
        if if_none_match is not None:
            headers["If-None-Match"] = if_none_match
        return HTTPRequest(method="GET", path="/", headers=headers)

    return _make


@pytest.fixture
def client():
    """Test client for the example app with a constant fingerprint"""
    with TestClient(create_app(fingerprint=constant_fingerprint("v1"))) as test_client:
        yield test_client


@pytest.fixture
def digest_client():
    """Test client for the example app with the body digest fingerprint"""
    with TestClient(create_app()) as test_client:
        yield test_client
