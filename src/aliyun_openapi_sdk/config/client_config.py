"""
Process-wide client configuration for the Python SDK

A ``ClientConfig`` is immutable once built and is shared by every client and
request builder that receives it. Loading helpers accept the same JSON layout
whether it comes from a string, a dict or a file.
"""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..exceptions import ValidationError
from ..version import __version__

DEFAULT_USER_AGENT = f"aliyun-openapi-python-sdk/{__version__}"
DEFAULT_LOG_API_VERSION = "0.6.0"


@dataclass(frozen=True)
class ClientConfig:
    """
    Configuration shared by the RPC, ROA and log service clients

    Attributes:
        user_agent: Sent as ``User-Agent`` and ``x-sdk-client``
        timeout: Default per-request timeout in seconds, None for no timeout
        verify_ssl: Whether the transport verifies TLS certificates
        log_canonical_strings: Log every canonical string at debug level
        log_api_version: Value of the ``x-log-apiversion`` header
    """
    user_agent: str = DEFAULT_USER_AGENT
    timeout: Optional[float] = None
    verify_ssl: bool = True
    log_canonical_strings: bool = False
    log_api_version: str = DEFAULT_LOG_API_VERSION

    def __post_init__(self):
        """Validate client configuration"""
        if not self.user_agent:
            raise ValidationError("User agent cannot be empty")

        if self.timeout is not None and (
            not isinstance(self.timeout, (int, float)) or isinstance(self.timeout, bool)
        ):
            raise ValidationError(
                f"Timeout must be a number of seconds, got {type(self.timeout).__name__}"
            )

        if self.timeout is not None and self.timeout <= 0:
            raise ValidationError("Timeout must be positive")

        if not self.log_api_version:
            raise ValidationError("Log API version cannot be empty")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClientConfig':
        """Build configuration from a dictionary, rejecting unknown keys"""
        if not isinstance(data, dict):
            raise ValidationError(f"Configuration must be an object, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValidationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                details={"unknown_keys": unknown}
            )

        try:
            return cls(**data)
        except TypeError as e:
            raise ValidationError(f"Invalid configuration format: {e}")

    @classmethod
    def from_json(cls, json_string: str) -> 'ClientConfig':
        """Load configuration from JSON string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'ClientConfig':
        """Load configuration from file"""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ValidationError(f"Failed to read configuration file: {e}", "FILE_ERROR")
        return cls.from_json(json_string)


DEFAULT_CLIENT_CONFIG = ClientConfig()


def load_client_config_from_json(json_string: str) -> ClientConfig:
    """Load client configuration from JSON string"""
    return ClientConfig.from_json(json_string)


def load_client_config_from_file(file_path: Union[str, Path]) -> ClientConfig:
    """Load client configuration from file"""
    return ClientConfig.from_file(file_path)
