"""
Shared client and request builder machinery

A client owns the credentials, the endpoint, the configuration and the
transport session for its whole lifetime and never mutates them. Each call
gets a fresh request builder that accumulates method, target, query, headers,
body and timeout, signs at send time and is consumed by exactly one terminal
call (``prepare``, ``send``, ``text`` or ``json``).
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar, Union

import requests
from requests.structures import CaseInsensitiveDict

from ..config import ClientConfig, DEFAULT_CLIENT_CONFIG
from ..exceptions import (
    BuilderConsumedError,
    InvalidHeaderError,
    InvalidRequestError,
    ValidationError,
)
from ..signing.canonical_string import CanonicalRequest, CanonicalStringStrategy, get_strategy
from ..signing.signer import sign
from ..signing.types import (
    Clock,
    Credentials,
    Dialect,
    HttpMethod,
    NonceGenerator,
    PreparedRequest,
    QueryInput,
    RequestBody,
    SigningContext,
)
from ..signing.utils import (
    PerformanceTimer,
    format_rfc1123_date,
    generate_nonce,
    iter_pairs,
    normalize_body,
    normalize_timeout,
    parse_endpoint,
    utc_now,
    validate_header,
)
from .response import classify_response, decode_json, decode_text, dispatch

logger = logging.getLogger(__name__)

T = TypeVar('T')


class BuilderState(Enum):
    """Lifecycle of a request builder"""
    UNCONFIGURED = "unconfigured"
    METHOD_SET = "method_set"
    CONFIGURED = "configured"
    SENT = "sent"


class BaseRequestBuilder(ABC):
    """
    Fluent accumulator for one request.

    Setters mutate the builder and return it so calls can be chained. Once a
    terminal call has run the builder is in the ``SENT`` state and every
    further call raises ``BuilderConsumedError``, so a signed timestamp and
    nonce are never reused.
    """

    dialect: Dialect

    def __init__(self, client: 'BaseClient'):
        self._client = client
        self._state = BuilderState.UNCONFIGURED
        self._method: Optional[HttpMethod] = None
        self._target = ""
        self._query: Dict[str, str] = {}
        self._headers: CaseInsensitiveDict = CaseInsensitiveDict()
        self._timeout: Optional[float] = client.config.timeout

    @property
    def state(self) -> BuilderState:
        return self._state

    @property
    def strategy(self) -> CanonicalStringStrategy:
        return get_strategy(self.dialect)

    def _ensure_open(self) -> None:
        if self._state is BuilderState.SENT:
            raise BuilderConsumedError()

    def _configured(self) -> 'BaseRequestBuilder':
        if self._state is BuilderState.METHOD_SET:
            self._state = BuilderState.CONFIGURED
        return self

    def _normalize_target(self, target: str) -> str:
        return target

    def request(self, method: Union[str, HttpMethod], target: str) -> 'BaseRequestBuilder':
        """
        Set the method and the action (RPC) or resource path (ROA/log).

        Raises:
            InvalidRequestError: If the method is not a supported HTTP method
        """
        self._ensure_open()

        try:
            self._method = HttpMethod(str(getattr(method, 'value', method)).upper())
        except ValueError:
            raise InvalidRequestError(
                f"Invalid HTTP method: {method}",
                "INVALID_METHOD",
                {"method": str(method)}
            )

        self._target = self._normalize_target(target)
        self._state = BuilderState.METHOD_SET
        return self

    def _check_query_key(self, key: str) -> None:
        """Hook for dialects that reserve parameter names."""

    def query(self, params: QueryInput) -> 'BaseRequestBuilder':
        """
        Add query parameters; a repeated key keeps its last value.

        Args:
            params: Mapping or sequence of ``(key, value)`` pairs
        """
        self._ensure_open()
        for key, value in iter_pairs(params):
            self._check_query_key(key)
            self._query[key] = value
        return self._configured()

    def header(self, headers: Union[Dict[str, str], QueryInput]) -> 'BaseRequestBuilder':
        """
        Add request headers; names are case-insensitive.

        Raises:
            InvalidHeaderError: If a name or value is not valid header syntax
        """
        self._ensure_open()
        items = list(headers.items()) if hasattr(headers, 'items') else list(headers)
        validated = []
        for item in items:
            if not isinstance(item, (tuple, list)) or len(item) != 2:
                raise InvalidHeaderError(
                    f"Cannot parse header: expected a name/value pair, got {item!r}"
                )
            validated.append(validate_header(*item))
        for name, value in validated:
            self._headers[name] = value
        return self._configured()

    def timeout(self, timeout: Union[float, int, timedelta]) -> 'BaseRequestBuilder':
        """Set the timeout of the single outbound call, in seconds or as a timedelta."""
        self._ensure_open()
        self._timeout = normalize_timeout(timeout)
        return self._configured()

    def _signing_context(self) -> SigningContext:
        moment = self._client.clock()
        nonce = self._client.nonce_generator()
        if not nonce or not isinstance(nonce, str):
            raise InvalidRequestError(f"Invalid nonce: {nonce!r}", "INVALID_NONCE")
        return SigningContext(timestamp=self._format_timestamp(moment), nonce=nonce)

    @abstractmethod
    def _format_timestamp(self, moment: datetime) -> str:
        """Format the signing time the way the dialect transmits it."""

    def _default_headers(self) -> CaseInsensitiveDict:
        user_agent = self._client.config.user_agent
        return CaseInsensitiveDict({'user-agent': user_agent, 'x-sdk-client': user_agent})

    def _sign(self, canonical_request: CanonicalRequest) -> Tuple[str, str]:
        """Build the canonical string and sign it with the client secret."""
        timer = PerformanceTimer()
        canonical_string = self.strategy.build(canonical_request)
        signing_key = self.strategy.signing_key(self._client.credentials.access_key_secret)
        signature = sign(signing_key, canonical_string)

        if self._client.config.log_canonical_strings:
            logger.debug(f"Canonical string ({self.dialect.value}): {canonical_string!r}")
        logger.debug(f"Signed {self.dialect.value} request in {timer.elapsed_ms():.2f}ms")

        return canonical_string, signature

    @abstractmethod
    def _assemble(self, context: SigningContext) -> PreparedRequest:
        """Sign and lay out the final request."""

    def prepare(self) -> PreparedRequest:
        """
        Sign the request without sending it. Consumes the builder.

        Returns:
            PreparedRequest: Final URL, headers, body and signing material

        Raises:
            InvalidRequestError: If no method is set or signing fails
        """
        self._ensure_open()
        if self._state is BuilderState.UNCONFIGURED:
            raise InvalidRequestError("Request method is not set", "INVALID_METHOD")

        self._state = BuilderState.SENT
        context = self._signing_context()
        return self._assemble(context)

    def send(self) -> requests.Response:
        """
        Sign and send the request. Consumes the builder.

        Returns:
            requests.Response: The success response, body not yet decoded

        Raises:
            TransportError: If the HTTP call fails or times out
            ApiError: If the service answers with an error envelope
            ResponseDecodeError: If an error response body cannot be decoded
        """
        prepared = self.prepare()
        response = dispatch(self._client.session, prepared, self._client.config.verify_ssl)
        return classify_response(response, self.dialect)

    def text(self) -> str:
        """Send the request and return the body as text."""
        return decode_text(self.send())

    def json(self, into: Optional[Callable[[Any], T]] = None) -> Any:
        """
        Send the request and decode the body as JSON.

        Args:
            into: Optional converter applied to the decoded value, such as a
                dataclass factory

        Raises:
            ResponseDecodeError: If the body is not JSON or ``into`` rejects it
        """
        return decode_json(self.send(), into)


class HeaderSignedRequestBuilder(BaseRequestBuilder):
    """
    Request builder for dialects that sign into the ``Authorization`` header.
    """

    def __init__(self, client: 'BaseClient'):
        super().__init__(client)
        self._body: Optional[bytes] = None

    def _normalize_target(self, target: str) -> str:
        if not target:
            return "/"
        return target if target.startswith('/') else f"/{target}"

    def body(self, body: RequestBody) -> 'HeaderSignedRequestBuilder':
        """
        Set the request body; strings are UTF-8 encoded.

        ``content-length`` and ``content-md5`` are derived from it at send time.
        """
        self._ensure_open()
        self._body = normalize_body(body)
        return self._configured()

    def _format_timestamp(self, moment: datetime) -> str:
        return format_rfc1123_date(moment)

    def _host(self) -> str:
        return self._client.endpoint_parts['netloc']

    def _dialect_headers(self, context: SigningContext) -> Dict[str, str]:
        return {}

    def _finalize_headers(self, headers: CaseInsensitiveDict) -> None:
        """Hook run after body headers are set and before signing."""

    def _assemble(self, context: SigningContext) -> PreparedRequest:
        parts = self._client.endpoint_parts
        host = self._host()
        path = parts['path'].rstrip('/') + self._target

        headers = self._default_headers()
        headers.update(self._headers)
        headers.update(self._dialect_headers(context))
        headers['host'] = host
        headers['date'] = context.timestamp

        if self._body is not None:
            headers['content-length'] = str(len(self._body))
            headers['content-md5'] = self.strategy.content_md5(self._body)
        else:
            headers.pop('content-length', None)
            headers.pop('content-md5', None)

        self._finalize_headers(headers)

        canonical_string, signature = self._sign(CanonicalRequest(
            method=self._method.value,
            path=path,
            query=dict(self._query),
            headers=headers,
        ))
        headers['authorization'] = self.strategy.authorization(
            self._client.credentials.access_key_id, signature
        )

        return PreparedRequest(
            method=self._method,
            url=f"{parts['scheme']}://{host}{path}",
            headers=dict(headers),
            params=list(self._query.items()),
            body=self._body,
            timeout=self._timeout,
            canonical_string=canonical_string,
            signature=signature,
            context=context,
        )


class BaseClient(ABC):
    """
    Base class of the dialect clients.

    Credentials, endpoint and configuration are read-only after construction
    and may be shared by requests issued from several threads.
    """

    @property
    @abstractmethod
    def dialect(self) -> Dialect:
        """Signing dialect spoken by the client."""

    @property
    @abstractmethod
    def builder_class(self) -> type:
        """Request builder created for each call."""

    def __init__(
        self,
        access_key_id: str,
        access_key_secret: str,
        endpoint: str,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        nonce_generator: Optional[NonceGenerator] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the client.

        Args:
            access_key_id: Access key id of the Aliyun account
            access_key_secret: Access key secret, used only as the HMAC key
            endpoint: Service endpoint starting with http:// or https://
            config: Client configuration (defaults to DEFAULT_CLIENT_CONFIG)
            session: Transport session (a new requests.Session by default)
            nonce_generator: Source of request nonces (UUID4 by default)
            clock: Source of signing time (current UTC time by default)

        Raises:
            ValidationError: If credentials or endpoint are invalid
        """
        if config is not None and not isinstance(config, ClientConfig):
            raise ValidationError("Config must be a ClientConfig instance")

        self._credentials = Credentials(access_key_id, access_key_secret)
        self._endpoint = endpoint
        self._endpoint_parts = parse_endpoint(endpoint)
        self._config = config or DEFAULT_CLIENT_CONFIG
        self._session = session if session is not None else requests.Session()
        self._nonce_generator = nonce_generator or generate_nonce
        self._clock = clock or utc_now

        logger.info(f"Initialized {self.dialect.value} client for endpoint: {endpoint}")

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def endpoint_parts(self) -> Dict[str, str]:
        return dict(self._endpoint_parts)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def session(self) -> requests.Session:
        return self._session

    @property
    def nonce_generator(self) -> NonceGenerator:
        return self._nonce_generator

    @property
    def clock(self) -> Clock:
        return self._clock

    def execute(self, method: Union[str, HttpMethod], target: str) -> BaseRequestBuilder:
        """
        Create a request with the ``method`` and ``target``.

        Returns:
            A request builder in the method-set state
        """
        return self.builder_class(self).request(method, target)

    def get(self, target: str) -> BaseRequestBuilder:
        """Create a ``GET`` request."""
        return self.execute(HttpMethod.GET, target)

    def post(self, target: str) -> BaseRequestBuilder:
        """Create a ``POST`` request."""
        return self.execute(HttpMethod.POST, target)

    def put(self, target: str) -> BaseRequestBuilder:
        """Create a ``PUT`` request."""
        return self.execute(HttpMethod.PUT, target)

    def delete(self, target: str) -> BaseRequestBuilder:
        """Create a ``DELETE`` request."""
        return self.execute(HttpMethod.DELETE, target)

    def close(self) -> None:
        """Close the transport session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(access_key_id={self._credentials.access_key_id!r}, "
            f"endpoint={self._endpoint!r})"
        )
