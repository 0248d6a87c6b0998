import re
import uuid
from typing import Mapping

REQUEST_ID_HEADER = "X-Request-ID"

# ids end up in logs and response headers, so only accept plain tokens
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def resolve_request_id(
    headers: Mapping[str, str], header_name: str = REQUEST_ID_HEADER
) -> str:
    """
    Reuse the caller's request ID or mint a new one

    Args:
        headers: The request headers
        header_name: The header carrying an upstream request ID

    Returns:
        The incoming ID when it is a well-formed token, otherwise a new UUID4
    """
    incoming = headers.get(header_name)
    if incoming and _VALID_REQUEST_ID.match(incoming):
        return incoming
    return str(uuid.uuid4())
