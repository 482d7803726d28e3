"""
Aliyun OpenAPI Python SDK - Request Signing Module

HMAC-SHA1 request signing for the RPC, ROA and log service dialects of the
Aliyun OpenAPI gateway.
"""

from .types import (
    HttpMethod,
    Dialect,
    Credentials,
    SigningContext,
    PreparedRequest,
)

from .signer import (
    sign,
    verify,
    rpc_signing_key,
    SIGNATURE_METHOD,
    SIGNATURE_VERSION,
)

from .canonical_string import (
    CanonicalRequest,
    CanonicalStringStrategy,
    RpcCanonicalStrategy,
    RoaCanonicalStrategy,
    LogCanonicalStrategy,
    build_canonical_string,
    canonicalized_headers,
    canonicalized_resource,
    sorted_query_string,
    get_strategy,
)

from .utils import (
    url_encode,
    generate_nonce,
    format_iso8601_timestamp,
    format_rfc1123_date,
    calculate_content_md5,
    calculate_content_md5_hex,
    parse_endpoint,
)

# Public API exports
__all__ = [
    # Types
    'HttpMethod',
    'Dialect',
    'Credentials',
    'SigningContext',
    'PreparedRequest',
    # Signer
    'sign',
    'verify',
    'rpc_signing_key',
    'SIGNATURE_METHOD',
    'SIGNATURE_VERSION',
    # Canonical strings
    'CanonicalRequest',
    'CanonicalStringStrategy',
    'RpcCanonicalStrategy',
    'RoaCanonicalStrategy',
    'LogCanonicalStrategy',
    'build_canonical_string',
    'canonicalized_headers',
    'canonicalized_resource',
    'sorted_query_string',
    'get_strategy',
    # Utilities
    'url_encode',
    'generate_nonce',
    'format_iso8601_timestamp',
    'format_rfc1123_date',
    'calculate_content_md5',
    'calculate_content_md5_hex',
    'parse_endpoint',
]
