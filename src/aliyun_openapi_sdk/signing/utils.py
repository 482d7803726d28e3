"""
Utility functions for request signing

This module provides utility functions shared by every signing dialect,
including the provider-specific percent-encoder, nonce generation,
timestamp formatting, body digests, header validation and endpoint parsing.
"""

import re
import time
import uuid
import base64
import hashlib
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Dict, List, Optional, Tuple, Union
from urllib.parse import quote_plus, urlparse

from ..exceptions import InvalidHeaderError, InvalidRequestError, ValidationError
from .types import QueryInput, RequestBody

# RFC 7230 token characters
_HEADER_NAME_PATTERN = re.compile(r'^[!#$%&\'*+\-.0-9A-Z^_`a-z|~]+$')
# Control characters other than horizontal tab
_HEADER_VALUE_FORBIDDEN = re.compile(r'[\x00-\x08\x0a-\x1f\x7f]')


def url_encode(value: str) -> str:
    """
    Percent-encode a string following RFC 3986 with the provider substitutions.

    Every byte outside the unreserved set is encoded, then ``+`` becomes
    ``%20``, ``*`` becomes ``%2A`` and ``%7E`` becomes ``~``. The function is
    not idempotent, so each key or value must be encoded exactly once.

    Args:
        value: String to encode

    Returns:
        str: Encoded string
    """
    encoded = quote_plus(value, safe='')
    return encoded.replace('+', '%20').replace('*', '%2A').replace('%7E', '~')


def generate_nonce() -> str:
    """
    Generate a UUID v4 nonce for replay protection.

    Returns:
        str: UUID v4 string for use as nonce
    """
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def format_iso8601_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Format a moment as the ISO 8601 timestamp used by the RPC dialect.

    Args:
        moment: Time to format (uses current time if None)

    Returns:
        str: Timestamp like ``2014-05-26T12:00:00Z``

    Raises:
        InvalidRequestError: If the moment cannot be formatted
    """
    if moment is None:
        moment = utc_now()

    try:
        return _as_utc(moment).strftime('%Y-%m-%dT%H:%M:%SZ')
    except (AttributeError, TypeError, ValueError, OverflowError) as e:
        raise InvalidRequestError(
            f"Invalid ISO 8601 Date: {e}",
            "INVALID_TIMESTAMP",
            {"original_error": str(e)}
        )


def format_rfc1123_date(moment: Optional[datetime] = None) -> str:
    """
    Format a moment as the RFC 1123 date used by the ROA and log dialects.

    Args:
        moment: Time to format (uses current time if None)

    Returns:
        str: Date like ``Mon, 26 May 2014 12:00:00 GMT``

    Raises:
        InvalidRequestError: If the moment cannot be formatted
    """
    if moment is None:
        moment = utc_now()

    try:
        return format_datetime(_as_utc(moment), usegmt=True)
    except (AttributeError, TypeError, ValueError, OverflowError) as e:
        raise InvalidRequestError(
            f"Invalid RFC 1123 Date: {e}",
            "INVALID_TIMESTAMP",
            {"original_error": str(e)}
        )


def normalize_body(body: RequestBody) -> Optional[bytes]:
    """
    Convert a request body to bytes.

    Args:
        body: Body as string, bytes or None

    Returns:
        Optional[bytes]: UTF-8 encoded body, or None when there is no body

    Raises:
        InvalidRequestError: If the body is of an unsupported type
    """
    if body is None:
        return None

    if isinstance(body, str):
        return body.encode('utf-8')

    if isinstance(body, (bytes, bytearray)):
        return bytes(body)

    raise InvalidRequestError(
        f"Body must be string or bytes, got {type(body).__name__}",
        "INVALID_BODY",
        {"body_type": type(body).__name__}
    )


def calculate_content_md5(body: bytes) -> str:
    """Base64 encoded MD5 digest of the body (ROA ``content-md5``)."""
    return base64.b64encode(hashlib.md5(body).digest()).decode('ascii')


def calculate_content_md5_hex(body: bytes) -> str:
    """Upper-case hex MD5 digest of the body (log service ``content-md5``)."""
    return hashlib.md5(body).hexdigest().upper()


def normalize_header_name(name: str) -> str:
    """
    Normalize header name to lowercase for consistent processing.

    Args:
        name: Header name to normalize

    Returns:
        str: Lowercase header name
    """
    return name.lower().strip()


def validate_header(name: str, value: str) -> Tuple[str, str]:
    """
    Validate a header pair for use in a signed request.

    Args:
        name: Header name
        value: Header value

    Returns:
        tuple: The header name and its value as strings

    Raises:
        InvalidHeaderError: If the name is not an RFC 7230 token or the value
            contains control characters or characters outside latin-1
    """
    if not isinstance(name, str) or not _HEADER_NAME_PATTERN.match(name):
        raise InvalidHeaderError(
            f"Cannot parse header: invalid header name {name!r}",
            details={"header": repr(name)}
        )

    if isinstance(value, bytes):
        try:
            value = value.decode('ascii')
        except UnicodeDecodeError as e:
            raise InvalidHeaderError(
                f"Cannot parse header: non-ASCII bytes in value of {name}",
                details={"header": name, "original_error": str(e)}
            )
    else:
        value = str(value)

    if _HEADER_VALUE_FORBIDDEN.search(value):
        raise InvalidHeaderError(
            f"Cannot parse header: invalid value for {name}",
            details={"header": name}
        )

    try:
        value.encode('latin-1')
    except UnicodeEncodeError as e:
        raise InvalidHeaderError(
            f"Cannot parse header: value of {name} is not latin-1 encodable",
            details={"header": name, "original_error": str(e)}
        )

    return name, value


def iter_pairs(items: QueryInput) -> List[Tuple[str, str]]:
    """
    Flatten a mapping or a sequence of pairs into a list of string pairs.

    Raises:
        InvalidRequestError: If an item is not a key/value pair
    """
    if hasattr(items, 'items'):
        items = list(items.items())

    pairs = []
    for item in items:
        try:
            key, value = item
        except (TypeError, ValueError):
            raise InvalidRequestError(
                f"Expected a key/value pair, got {item!r}",
                "INVALID_PARAMETER"
            )
        pairs.append((str(key), str(value)))
    return pairs


def sorted_pairs(params: Dict[str, str]) -> List[Tuple[str, str]]:
    """Parameters sorted by key; code-point order equals UTF-8 byte order."""
    return sorted(params.items(), key=lambda item: item[0])


def parse_endpoint(endpoint: str) -> Dict[str, str]:
    """
    Parse an API endpoint into the components needed for signing.

    Args:
        endpoint: Base URL such as ``https://ecs.aliyuncs.com/``

    Returns:
        dict: ``scheme``, ``host`` (hostname only), ``netloc`` (host and port)
            and ``path`` (may be empty)

    Raises:
        ValidationError: If the endpoint is not an absolute http(s) URL
    """
    if not endpoint:
        raise ValidationError("Endpoint cannot be empty")

    parsed = urlparse(endpoint)

    if parsed.scheme not in ('http', 'https') or not parsed.netloc or not parsed.hostname:
        raise ValidationError(
            f"Invalid endpoint: {endpoint} (need start with http:// or https://)",
            details={"endpoint": endpoint}
        )

    return {
        "scheme": parsed.scheme,
        "host": parsed.hostname,
        "netloc": parsed.netloc,
        "path": parsed.path,
    }


def normalize_timeout(timeout: Union[float, int, timedelta, None]) -> Optional[float]:
    """
    Convert a timeout to seconds.

    Raises:
        InvalidRequestError: If the timeout is negative or of an unsupported type
    """
    if timeout is None:
        return None

    if isinstance(timeout, timedelta):
        seconds = timeout.total_seconds()
    elif isinstance(timeout, (int, float)) and not isinstance(timeout, bool):
        seconds = float(timeout)
    else:
        raise InvalidRequestError(
            f"Timeout must be seconds or timedelta, got {type(timeout).__name__}",
            "INVALID_TIMEOUT"
        )

    if seconds <= 0:
        raise InvalidRequestError("Timeout must be positive", "INVALID_TIMEOUT")

    return seconds


class PerformanceTimer:
    """Simple performance timer for monitoring signing operations."""

    def __init__(self):
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000
