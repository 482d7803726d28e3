"""
Type definitions for request signing functionality

This module provides the enums and data classes shared by the canonical-string
strategies, the signer and the request builders of all three API dialects.
"""

from typing import Dict, List, Optional, Tuple, Union, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ..exceptions import ValidationError


class HttpMethod(str, Enum):
    """HTTP methods supported for signing"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class Dialect(str, Enum):
    """Signing dialects understood by the API gateway"""
    RPC = "rpc"
    ROA = "roa"
    LOG = "log"


@dataclass(frozen=True)
class Credentials:
    """
    Access key pair of an Aliyun account

    Attributes:
        access_key_id: Public access key identifier
        access_key_secret: Secret used as the HMAC key, never serialized
    """
    access_key_id: str
    access_key_secret: str = field(repr=False)

    def __post_init__(self):
        """Validate credentials"""
        if not self.access_key_id:
            raise ValidationError("Access key id cannot be empty")

        if not isinstance(self.access_key_secret, str):
            raise ValidationError("Access key secret must be a string")


@dataclass(frozen=True)
class SigningContext:
    """
    Ephemeral values computed when a request is sent

    Attributes:
        timestamp: Dialect-formatted timestamp (ISO-8601 for RPC, RFC-1123 otherwise)
        nonce: Unique value preventing signature replay
    """
    timestamp: str
    nonce: str


@dataclass
class PreparedRequest:
    """
    Fully addressed and signed request, ready for the transport

    Attributes:
        method: HTTP method
        url: Final request URL (RPC URLs already carry the signed query)
        headers: Final request headers, including authentication headers
        params: Query parameters the transport appends to ``url``
        body: Request body bytes, if any
        timeout: Per-request timeout in seconds, ``None`` for no timeout
        canonical_string: The string that was signed
        signature: Base64 HMAC-SHA1 signature
        context: Timestamp and nonce used for signing
    """
    method: HttpMethod
    url: str
    headers: Dict[str, str]
    params: List[Tuple[str, str]]
    body: Optional[bytes]
    timeout: Optional[float]
    canonical_string: str
    signature: str
    context: SigningContext


# Type aliases for convenience
NonceGenerator = Callable[[], str]
Clock = Callable[[], datetime]
QueryInput = Union[Dict[str, str], List[Tuple[str, str]], Tuple[Tuple[str, str], ...]]
RequestBody = Union[str, bytes, None]
