"""
ROA style API client

ROA requests address a resource path and carry their signature in an
``Authorization: acs <AccessKeyId>:<Signature>`` header.
"""

from typing import Dict, Optional

from ..signing.signer import SIGNATURE_METHOD, SIGNATURE_VERSION
from ..signing.types import Dialect, SigningContext
from .base import BaseClient, HeaderSignedRequestBuilder

DEFAULT_ACCEPT = "application/json"


class RoaRequestBuilder(HeaderSignedRequestBuilder):
    """Request builder for ROA style APIs"""

    dialect = Dialect.ROA

    def __init__(self, client: 'RoaClient'):
        super().__init__(client)
        self._version: Optional[str] = client.version

    def version(self, version: str) -> 'RoaRequestBuilder':
        """Set the API version for this request (``x-acs-version``)."""
        self._ensure_open()
        self._version = version
        return self._configured()

    def _default_headers(self):
        headers = super()._default_headers()
        headers['accept'] = DEFAULT_ACCEPT
        return headers

    def _dialect_headers(self, context: SigningContext) -> Dict[str, str]:
        headers = {
            'x-acs-signature-method': SIGNATURE_METHOD,
            'x-acs-signature-version': SIGNATURE_VERSION,
            'x-acs-signature-nonce': context.nonce,
        }
        if self._version:
            headers['x-acs-version'] = self._version
        return headers


class RoaClient(BaseClient):
    """
    ROA style API client.

    Example:
        client = RoaClient(key_id, key_secret, "https://ros.aliyuncs.com", "2015-09-01")
        regions = client.get("/regions").json()
    """

    dialect = Dialect.ROA
    builder_class = RoaRequestBuilder

    def __init__(self, access_key_id: str, access_key_secret: str, endpoint: str,
                 version: Optional[str] = None, **kwargs):
        super().__init__(access_key_id, access_key_secret, endpoint, **kwargs)
        self._version = version

    @property
    def version(self) -> Optional[str]:
        return self._version
