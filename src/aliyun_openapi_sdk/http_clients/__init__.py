"""
HTTP clients for the Aliyun OpenAPI gateway

One client per signing dialect. Every client hands out fluent request
builders that sign at send time and dispatch through a requests session.
"""

from .base import (
    BaseClient,
    BaseRequestBuilder,
    HeaderSignedRequestBuilder,
    BuilderState,
)
from .rpc_client import RpcClient, RpcRequestBuilder
from .roa_client import RoaClient, RoaRequestBuilder
from .log_client import LogServiceClient, LogRequestBuilder
from .response import (
    RpcServiceError,
    RoaServiceError,
    LogServiceError,
    dispatch,
    classify_response,
    decode_error,
    decode_json,
    decode_text,
)

__all__ = [
    # Clients
    'BaseClient',
    'RpcClient',
    'RoaClient',
    'LogServiceClient',
    # Request builders
    'BaseRequestBuilder',
    'HeaderSignedRequestBuilder',
    'RpcRequestBuilder',
    'RoaRequestBuilder',
    'LogRequestBuilder',
    'BuilderState',
    # Dispatcher and response classifier
    'RpcServiceError',
    'RoaServiceError',
    'LogServiceError',
    'dispatch',
    'classify_response',
    'decode_error',
    'decode_json',
    'decode_text',
]
