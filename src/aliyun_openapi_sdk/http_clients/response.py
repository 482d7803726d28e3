"""
Dispatcher and response classifier

The dispatcher performs the single outbound call of a prepared request and
maps transport failures to ``TransportError``. The classifier passes success
responses through untouched and turns error responses into ``ApiError`` using
the dialect's error envelope.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

import requests

from ..exceptions import (
    ApiError,
    InvalidHeaderError,
    ResponseDecodeError,
    TransportError,
)
from ..signing.types import Dialect, PreparedRequest

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class RpcServiceError:
    """Error envelope of the RPC and ROA dialects"""
    code: str
    message: str
    request_id: str = ""
    recommend: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RpcServiceError':
        return cls(
            code=data['Code'],
            message=data['Message'],
            request_id=data.get('RequestId', ''),
            recommend=data.get('Recommend', ''),
        )

    def to_api_error(self, http_status: int) -> ApiError:
        return ApiError(self.code, self.message, self.request_id, http_status, self.recommend)


# ROA errors use the same PascalCase envelope as RPC errors
RoaServiceError = RpcServiceError


@dataclass
class LogServiceError:
    """Error envelope of the log service dialect, which carries no request id"""
    error_code: str
    error_message: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LogServiceError':
        return cls(error_code=data['errorCode'], error_message=data['errorMessage'])

    def to_api_error(self, http_status: int) -> ApiError:
        return ApiError(self.error_code, self.error_message, "", http_status)


ERROR_ENVELOPES = {
    Dialect.RPC: RpcServiceError,
    Dialect.ROA: RoaServiceError,
    Dialect.LOG: LogServiceError,
}


def is_success(status_code: int) -> bool:
    """True for 2xx status codes."""
    return 200 <= status_code < 300


def dispatch(
    session: requests.Session,
    prepared: PreparedRequest,
    verify_ssl: bool = True
) -> requests.Response:
    """
    Send a prepared request through the transport.

    Args:
        session: Transport session
        prepared: Signed request
        verify_ssl: Whether to verify TLS certificates

    Returns:
        requests.Response: Raw response, whatever its status

    Raises:
        TransportError: On connect, timeout or other network failures
        InvalidHeaderError: If the transport rejects a header
    """
    logger.debug(f"Making {prepared.method.value} request to {prepared.url.split('?', 1)[0]}")

    try:
        return session.request(
            prepared.method.value,
            prepared.url,
            params=prepared.params or None,
            headers=prepared.headers,
            data=prepared.body,
            timeout=prepared.timeout,
            verify=verify_ssl,
        )
    except requests.exceptions.InvalidHeader as e:
        raise InvalidHeaderError(f"Cannot parse header: {e}") from e
    except requests.exceptions.Timeout as e:
        raise TransportError(
            f"Request timeout after {prepared.timeout} seconds",
            "TIMEOUT",
            {"original_error": str(e)}
        ) from e
    except requests.exceptions.ConnectionError as e:
        raise TransportError(f"Connection error: {e}", "CONNECTION_ERROR") from e
    except requests.exceptions.RequestException as e:
        raise TransportError(f"Request failed: {e}") from e


def decode_error(response: requests.Response, dialect: Dialect) -> ApiError:
    """
    Decode the error envelope of a non-success response.

    Returns:
        ApiError: Error carrying the provider code, message and request id

    Raises:
        ResponseDecodeError: If the body is not the dialect's error envelope
    """
    envelope_cls = ERROR_ENVELOPES[Dialect(dialect)]
    status = response.status_code

    try:
        data = response.json()
        envelope = envelope_cls.from_dict(data)
    except ValueError as e:
        raise ResponseDecodeError(
            f"Invalid error response body (HTTP {status}): {e}",
            http_status=status
        ) from e
    except (KeyError, TypeError, AttributeError) as e:
        raise ResponseDecodeError(
            f"Unexpected error response format (HTTP {status}): missing {e}",
            http_status=status
        ) from e

    return envelope.to_api_error(status)


def classify_response(response: requests.Response, dialect: Dialect) -> requests.Response:
    """
    Return success responses unchanged, raise for everything else.

    Raises:
        ApiError: For non-success responses with a decodable error envelope
        ResponseDecodeError: For non-success responses whose body does not decode
    """
    if is_success(response.status_code):
        return response

    error = decode_error(response, dialect)
    logger.debug(f"Service returned HTTP {error.http_status}: {error.error_code}")
    raise error


def decode_json(response: requests.Response, into: Optional[Callable[[Any], T]] = None) -> Any:
    """
    Decode a success body as JSON.

    Args:
        response: Success response
        into: Optional converter applied to the decoded value

    Raises:
        ResponseDecodeError: If the body is not JSON or the converter rejects it
    """
    try:
        data = response.json()
    except ValueError as e:
        raise ResponseDecodeError(
            f"Invalid JSON response: {e}",
            http_status=response.status_code
        ) from e

    if into is None:
        return data

    try:
        return into(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ResponseDecodeError(
            f"Cannot convert response with {getattr(into, '__name__', into)!s}: {e}",
            "CONVERSION_ERROR",
            http_status=response.status_code
        ) from e


def decode_text(response: requests.Response) -> str:
    """Decode a success body as text."""
    return response.text
