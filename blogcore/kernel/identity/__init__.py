"""
Identity Core - credential hashing and session tokens.
"""

from blogcore.kernel.identity.password import BCRYPT_ROUNDS, PasswordHasher
from blogcore.kernel.identity.tokens import (
    MIN_TOKEN_BYTES,
    generate_session_token,
    redact_token,
)

__all__ = [
    "BCRYPT_ROUNDS",
    "PasswordHasher",
    "MIN_TOKEN_BYTES",
    "generate_session_token",
    "redact_token",
]
