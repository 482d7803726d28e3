"""
Configuration management for Aliyun OpenAPI Python SDK

This module provides the immutable client configuration injected into every
client and request builder.
"""

from .client_config import (
    ClientConfig,
    DEFAULT_CLIENT_CONFIG,
    DEFAULT_USER_AGENT,
    DEFAULT_LOG_API_VERSION,
    load_client_config_from_json,
    load_client_config_from_file,
)

__all__ = [
    'ClientConfig',
    'DEFAULT_CLIENT_CONFIG',
    'DEFAULT_USER_AGENT',
    'DEFAULT_LOG_API_VERSION',
    'load_client_config_from_json',
    'load_client_config_from_file',
]
