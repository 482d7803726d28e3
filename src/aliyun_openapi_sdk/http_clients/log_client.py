"""
Log service API client

Log service requests are scoped to a project, which becomes a subdomain of
the endpoint host, and are signed into ``Authorization: SLS <id>:<signature>``.
"""

from typing import Dict, Optional

from requests.structures import CaseInsensitiveDict

from ..exceptions import InvalidRequestError
from ..signing.types import Dialect, SigningContext
from .base import BaseClient, HeaderSignedRequestBuilder

LOG_SIGNATURE_METHOD = "hmac-sha1"
DEFAULT_ACCEPT = "application/json"


class LogRequestBuilder(HeaderSignedRequestBuilder):
    """Request builder for the log service"""

    dialect = Dialect.LOG

    def __init__(self, client: 'LogServiceClient'):
        super().__init__(client)
        self._project: Optional[str] = None

    def project(self, project: str) -> 'LogRequestBuilder':
        """Scope the request to a project."""
        self._ensure_open()
        if not project or '/' in project or ':' in project:
            raise InvalidRequestError(f"Invalid project name: {project!r}", "INVALID_PROJECT")
        self._project = project
        return self._configured()

    def _host(self) -> str:
        host = super()._host()
        if self._project:
            return f"{self._project}.{host}"
        return host

    def _default_headers(self):
        headers = super()._default_headers()
        headers['accept'] = DEFAULT_ACCEPT
        return headers

    def _dialect_headers(self, context: SigningContext) -> Dict[str, str]:
        return {
            'x-log-apiversion': self._client.config.log_api_version,
            'x-log-signaturemethod': LOG_SIGNATURE_METHOD,
        }

    def _finalize_headers(self, headers: CaseInsensitiveDict) -> None:
        if 'x-log-bodyrawsize' not in headers:
            headers['x-log-bodyrawsize'] = str(len(self._body)) if self._body is not None else "0"


class LogServiceClient(BaseClient):
    """
    Log service API client.

    Example:
        client = LogServiceClient(key_id, key_secret, "https://cn-hangzhou.log.aliyuncs.com")
        logstore = client.get("/logstores/my-logstore").project("my-project").json()
    """

    dialect = Dialect.LOG
    builder_class = LogRequestBuilder
