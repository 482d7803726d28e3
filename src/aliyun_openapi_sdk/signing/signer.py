"""
HMAC-SHA1 signer shared by all signing dialects

The signer is a pure function of the secret and the canonical string. Dialects
differ only in the key they pass in: the RPC dialect appends a literal ``&``
to the access key secret.
"""

import hmac
import base64
import hashlib

from ..exceptions import InvalidRequestError

SIGNATURE_METHOD = "HMAC-SHA1"
SIGNATURE_VERSION = "1.0"


def sign(secret: str, canonical_string: str) -> str:
    """
    Sign a canonical string.

    Args:
        secret: HMAC key (already dialect-adjusted)
        canonical_string: String to sign

    Returns:
        str: Base64 encoded HMAC-SHA1 digest

    Raises:
        InvalidRequestError: If the key cannot be used as an HMAC key
    """
    try:
        mac = hmac.new(secret.encode('utf-8'), canonical_string.encode('utf-8'), hashlib.sha1)
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidRequestError(
            f"Invalid HMAC-SHA1 secret key: {e}",
            "INVALID_SECRET_KEY",
            {"original_error": str(e)}
        )

    return base64.b64encode(mac.digest()).decode('ascii')


def rpc_signing_key(secret: str) -> str:
    """HMAC key used by the RPC dialect: the secret followed by ``&``."""
    return f"{secret}&"


def verify(secret: str, canonical_string: str, signature: str) -> bool:
    """
    Check a signature against a canonical string in constant time.

    Args:
        secret: HMAC key (already dialect-adjusted)
        canonical_string: String that was signed
        signature: Base64 signature to check

    Returns:
        bool: True if the signature matches
    """
    expected = sign(secret, canonical_string)
    return hmac.compare_digest(expected, signature)
