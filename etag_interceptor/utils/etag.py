import hashlib
import json
from typing import Any, Callable, Mapping

from etag_interceptor.core.exceptions import FingerprintConfigurationError
from etag_interceptor.models.http import HTTPResponse

Fingerprint = Callable[[HTTPResponse], str]


def quote_etag(value: str, weak: bool = False) -> str:
    """
    Wrap a raw value in double quotes unless it is already an entity tag

    Args:
        value: The raw fingerprint value
        weak: Prefix the result with W/

    Returns:
        The quoted entity tag
    """
    if not (value.startswith('"') and value.endswith('"') and len(value) > 1):
        value = f'"{value}"'
    if weak and not value.startswith("W/"):
        value = f"W/{value}"
    return value


def generate_etag(data: Any, salt: str = "", algorithm: str = "md5") -> str:
    """
    Generate an ETag for the given data

    Args:
        data: The data to generate an etag for
        salt: Optional salt to add to the hash (can be used for versioning)
        algorithm: Name of the hashlib algorithm to use

    Returns:
        A string containing the quoted ETag
    """
    if isinstance(data, bytes):
        content = data
    elif isinstance(data, (dict, list)):
        content = json.dumps(data, sort_keys=True).encode()
    else:
        content = str(data).encode()

    if salt:
        content = content + b":" + salt.encode()

    digest = hashlib.new(algorithm, content).hexdigest()
    return quote_etag(digest)


def constant_fingerprint(value: str) -> Fingerprint:
    """Fingerprint that ignores the response and always returns ``value``."""

    def fingerprint(response: HTTPResponse) -> str:
        return value

    return fingerprint


def body_digest_fingerprint(
    algorithm: str = "md5", salt: str = "", weak: bool = False
) -> Fingerprint:
    """
    Fingerprint derived from a digest of the response body

    Args:
        algorithm: Any algorithm name accepted by hashlib.new
        salt: Optional salt mixed into every digest
        weak: Emit weak entity tags (W/"...")

    Returns:
        A function mapping a response to its quoted entity tag

    Raises:
        FingerprintConfigurationError: If hashlib does not know the algorithm
    """
    try:
        digest_size = hashlib.new(algorithm).digest_size
    except ValueError:
        raise FingerprintConfigurationError(algorithm) from None
    # variable-length digests (shake_*) need an explicit length
    if not digest_size:
        raise FingerprintConfigurationError(algorithm)

    def fingerprint(response: HTTPResponse) -> str:
        etag = generate_etag(response.body_bytes, salt=salt, algorithm=algorithm)
        return quote_etag(etag, weak=weak)

    return fingerprint


def fingerprint_from_settings(settings) -> Fingerprint:
    return body_digest_fingerprint(
        algorithm=settings.FINGERPRINT_ALGORITHM,
        salt=settings.FINGERPRINT_SALT,
        weak=settings.FINGERPRINT_WEAK,
    )


def extract_etag_header(headers: Mapping[str, str], header_name: str) -> str | None:
    """
    Extract an ETag from HTTP headers

    The lookup ignores header name case. The value is returned as sent:
    fingerprints are compared by exact string equality.

    Args:
        headers: HTTP headers mapping
        header_name: The header name to extract (If-None-Match or ETag)

    Returns:
        The extracted ETag value or None if absent or empty
    """
    wanted = header_name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value or None
    return None


def is_etag_match(server_etag: str, client_etag: str | None) -> bool:
    """
    Check if the server ETag matches the one presented by the client

    Args:
        server_etag: The fingerprint computed for the current response
        client_etag: The fingerprint the client sent, None if it sent none

    Returns:
        True only when the client sent a fingerprint equal to the server's
    """
    return client_etag is not None and client_etag == server_etag

