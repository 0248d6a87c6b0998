import uuid

from etag_interceptor.utils.request_id import REQUEST_ID_HEADER, resolve_request_id


class TestResolveRequestId:
    def test_reuses_incoming_id(self):
        assert resolve_request_id({REQUEST_ID_HEADER: "req-123"}) == "req-123"

    def test_generates_uuid_when_missing(self):
        request_id = resolve_request_id({})

        assert str(uuid.UUID(request_id)) == request_id

    def test_rejects_malformed_id(self):
        request_id = resolve_request_id({REQUEST_ID_HEADER: "bad id\r\ninjected"})

        assert request_id != "bad id\r\ninjected"
        assert len(request_id) == 36

    def test_custom_header_name(self):
        assert resolve_request_id({"X-Trace": "abc"}, header_name="X-Trace") == "abc"
