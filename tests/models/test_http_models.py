import pytest
from pydantic import ValidationError

from etag_interceptor.models.http import HTTPRequest, HTTPResponse


class TestHTTPResponse:
    def test_with_header_returns_new_response(self):
        original = HTTPResponse(status_code=200, headers={"Content-Type": "text/html"})

        updated = original.with_header("ETag", "v1")

        assert updated is not original
        assert original.headers == {"Content-Type": "text/html"}
        assert updated.headers == {"Content-Type": "text/html", "ETag": "v1"}

    def test_with_header_replaces_any_casing(self):
        original = HTTPResponse(status_code=200, headers={"etag": "a", "ETAG": "b"})

        assert original.with_header("ETag", "c").headers == {"ETag": "c"}

    def test_responses_are_frozen(self):
        response = HTTPResponse(status_code=200)

        with pytest.raises(ValidationError):
            response.status_code = 500

    def test_not_modified(self):
        response = HTTPResponse.not_modified()

        assert response.status_code == 304
        assert response.headers == {}
        assert response.body == b""

    def test_body_bytes(self):
        assert HTTPResponse(status_code=200, body="é").body_bytes == "é".encode()
        assert HTTPResponse(status_code=200, body=b"raw").body_bytes == b"raw"

    def test_get_header(self):
        response = HTTPResponse(status_code=200, headers={"ETag": "v1"})

        assert response.get_header("etag") == "v1"
        assert response.get_header("Vary") is None


class TestHTTPRequest:
    def test_get_header(self):
        request = HTTPRequest(
            method="GET", path="/", headers={"If-None-Match": '"abc"'}
        )

        assert request.get_header("if-none-match") == '"abc"'
        assert request.body is None

    def test_requests_are_frozen(self):
        request = HTTPRequest(method="GET", path="/")

        with pytest.raises(ValidationError):
            request.path = "/other"
