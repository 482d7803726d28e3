"""
Aliyun OpenAPI Python SDK
Signed RPC, ROA and log service requests for the Aliyun OpenAPI gateway
"""

from .version import __version__
from .exceptions import (
    AliyunSDKError,
    ValidationError,
    TransportError,
    InvalidHeaderError,
    InvalidRequestError,
    BuilderConsumedError,
    ResponseDecodeError,
    ApiError,
)
from .config import (
    ClientConfig,
    DEFAULT_CLIENT_CONFIG,
    load_client_config_from_json,
    load_client_config_from_file,
)
from .http_clients import (
    RpcClient,
    RoaClient,
    LogServiceClient,
    RpcRequestBuilder,
    RoaRequestBuilder,
    LogRequestBuilder,
    BuilderState,
    RpcServiceError,
    RoaServiceError,
    LogServiceError,
)
from .signing import (
    HttpMethod,
    Dialect,
    Credentials,
    SigningContext,
    PreparedRequest,
    sign,
    verify,
    url_encode,
    build_canonical_string,
    CanonicalRequest,
)

# Public API exports
__all__ = [
    '__version__',
    # Exceptions
    'AliyunSDKError',
    'ValidationError',
    'TransportError',
    'InvalidHeaderError',
    'InvalidRequestError',
    'BuilderConsumedError',
    'ResponseDecodeError',
    'ApiError',
    # Configuration
    'ClientConfig',
    'DEFAULT_CLIENT_CONFIG',
    'load_client_config_from_json',
    'load_client_config_from_file',
    # Clients
    'RpcClient',
    'RoaClient',
    'LogServiceClient',
    'RpcRequestBuilder',
    'RoaRequestBuilder',
    'LogRequestBuilder',
    'BuilderState',
    'RpcServiceError',
    'RoaServiceError',
    'LogServiceError',
    # Request Signing
    'HttpMethod',
    'Dialect',
    'Credentials',
    'SigningContext',
    'PreparedRequest',
    'sign',
    'verify',
    'url_encode',
    'build_canonical_string',
    'CanonicalRequest',
]
