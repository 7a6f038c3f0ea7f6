"""
Session token generation.
"""

import secrets

# 16 bytes = 128 bits of entropy; anything shorter is refused
MIN_TOKEN_BYTES = 16


def generate_session_token(nbytes: int = 32) -> str:
    """
    Create an opaque, URL-safe session token from the OS CSPRNG.

    Args:
        nbytes: Bytes of randomness before base64 encoding

    Raises:
        ValueError: If nbytes is below MIN_TOKEN_BYTES
    """
    if nbytes < MIN_TOKEN_BYTES:
        raise ValueError(f"Session tokens need at least {MIN_TOKEN_BYTES} random bytes")
    return secrets.token_urlsafe(nbytes)


def redact_token(token: str) -> str:
    """Short prefix of a token, safe to put in logs."""
    return f"{token[:6]}..."
