"""
RPC style API client

RPC requests name an ``Action`` and carry every piece of authentication
material in the query string, including the ``Signature`` itself.
"""

from datetime import datetime
from typing import Optional

from ..exceptions import InvalidRequestError
from ..signing.canonical_string import CanonicalRequest, sorted_query_string
from ..signing.signer import SIGNATURE_METHOD, SIGNATURE_VERSION
from ..signing.types import Dialect, PreparedRequest, SigningContext
from ..signing.utils import format_iso8601_timestamp, url_encode
from .base import BaseClient, BaseRequestBuilder

DEFAULT_PARAMS = (
    ("Format", "JSON"),
    ("SignatureMethod", SIGNATURE_METHOD),
    ("SignatureVersion", SIGNATURE_VERSION),
)

# Parameters computed by the signer; callers may not supply them
RESERVED_PARAMS = frozenset({
    "AccessKeyId",
    "Action",
    "Signature",
    "SignatureMethod",
    "SignatureNonce",
    "SignatureVersion",
    "Timestamp",
    "Version",
})


class RpcRequestBuilder(BaseRequestBuilder):
    """Request builder for RPC style APIs"""

    dialect = Dialect.RPC

    def __init__(self, client: 'RpcClient'):
        super().__init__(client)
        self._version: Optional[str] = client.version

    def _normalize_target(self, target: str) -> str:
        if not target:
            raise InvalidRequestError("Action cannot be empty", "INVALID_ACTION")
        return target

    def _check_query_key(self, key: str) -> None:
        if key in RESERVED_PARAMS:
            raise InvalidRequestError(
                f"Parameter {key} is set by the signer and cannot be passed as a query",
                "RESERVED_PARAMETER",
                {"parameter": key}
            )

    def version(self, version: str) -> 'RpcRequestBuilder':
        """Set the API version for this request."""
        self._ensure_open()
        self._version = version
        return self._configured()

    def _format_timestamp(self, moment: datetime) -> str:
        return format_iso8601_timestamp(moment)

    def signing_params(self, context: SigningContext) -> dict:
        """Every query parameter that takes part in the signature."""
        if not self._version:
            raise InvalidRequestError("API version is not set", "MISSING_VERSION")

        params = dict(DEFAULT_PARAMS)
        params.update({
            "Action": self._target,
            "AccessKeyId": self._client.credentials.access_key_id,
            "SignatureNonce": context.nonce,
            "Timestamp": context.timestamp,
            "Version": self._version,
        })
        params.update(self._query)
        return params

    def _assemble(self, context: SigningContext) -> PreparedRequest:
        params = self.signing_params(context)
        canonical_string, signature = self._sign(
            CanonicalRequest(method=self._method.value, query=params)
        )

        final_url = (
            f"{self._client.endpoint}?Signature={url_encode(signature)}"
            f"&{sorted_query_string(params)}"
        )

        headers = self._default_headers()
        headers.update(self._headers)

        return PreparedRequest(
            method=self._method,
            url=final_url,
            headers=dict(headers),
            params=[],
            body=None,
            timeout=self._timeout,
            canonical_string=canonical_string,
            signature=signature,
            context=context,
        )


class RpcClient(BaseClient):
    """
    RPC style API client.

    Example:
        client = RpcClient(key_id, key_secret, "https://ecs.aliyuncs.com/", "2014-05-26")
        regions = client.get("DescribeRegions").json()
        instances = client.get("DescribeInstances").query({"RegionId": "cn-hangzhou"}).json()
    """

    dialect = Dialect.RPC
    builder_class = RpcRequestBuilder

    def __init__(self, access_key_id: str, access_key_secret: str, endpoint: str,
                 version: Optional[str] = None, **kwargs):
        """
        Initialize the RPC client.

        Args:
            version: Default API version, e.g. ``2014-05-26`` for ECS
            **kwargs: ``config``, ``session``, ``nonce_generator`` and ``clock``
                as accepted by BaseClient
        """
        super().__init__(access_key_id, access_key_secret, endpoint, **kwargs)
        self._version = version

    @property
    def version(self) -> Optional[str]:
        return self._version
