from .http import HTTPRequest, HTTPResponse

__all__ = [
    "HTTPRequest",
    "HTTPResponse",
]
