from pydantic import BaseModel, ConfigDict
from typing import Dict, Optional, Union


def _lookup_header(headers: Dict[str, str], name: str) -> str | None:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


class HTTPRequest(BaseModel):
    """Incoming request as seen by the interceptor. Never modified."""

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    headers: Dict[str, str] = {}
    body: Optional[Union[bytes, str]] = None

    def get_header(self, name: str) -> str | None:
        return _lookup_header(self.headers, name)


class HTTPResponse(BaseModel):
    """
    Response produced by a handler

    Instances are immutable: header changes produce a new response through
    ``with_header`` so a handler may hand out the same response value to
    several concurrent requests.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int
    headers: Dict[str, str] = {}
    body: Union[bytes, str] = b""

    def get_header(self, name: str) -> str | None:
        return _lookup_header(self.headers, name)

    def with_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Return a copy of this response with ``name`` set to ``value``

        Any existing spelling of the header (compared case-insensitively) is
        replaced, so the result carries exactly one value for it.
        """
        headers = {
            key: existing
            for key, existing in self.headers.items()
            if key.lower() != name.lower()
        }
        headers[name] = value
        return self.model_copy(update={"headers": headers})

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode()
        return self.body

    @classmethod
    def not_modified(cls, headers: Dict[str, str] | None = None) -> "HTTPResponse":
        return cls(status_code=304, headers=dict(headers or {}), body=b"")
