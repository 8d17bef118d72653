"""Structural decoding and signature verification of a JWT against a single key."""

from dataclasses import dataclass
from typing import Any

import jwt
from jwt import PyJWK
from jwt.exceptions import PyJWTError

# Claim policy lives in the verifier; here only the signature is checked.
_SIGNATURE_ONLY = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


class TokenDecodeError(Exception):
    """Raised when a token cannot be decoded or its signature does not match the key."""


@dataclass(frozen=True, slots=True)
class DecodeAttempt:
    """Outcome of decoding a token with one candidate key."""

    key: PyJWK
    claims: dict[str, Any] | None = None
    error: TokenDecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def decode_and_verify(token: str, key: PyJWK) -> dict[str, Any]:
    """Decode ``token`` and verify its signature with ``key``.

    The token's ``alg`` header must match the key's algorithm. No claim is
    validated and the result does not depend on the current time.

    Raises:
        TokenDecodeError: If the token is malformed, uses another algorithm,
            or the signature does not verify.
    """
    if not isinstance(token, str):
        raise TokenDecodeError(f"Token must be a string, not {type(token).__name__}")
    try:
        return jwt.decode(
            token,
            key.key,
            algorithms=[key.algorithm_name],
            options=_SIGNATURE_ONLY,
        )
    except (PyJWTError, ValueError) as e:
        raise TokenDecodeError(str(e)) from e


def try_decode(token: str, key: PyJWK) -> DecodeAttempt:
    """Like ``decode_and_verify`` but returns the failure instead of raising it."""
    try:
        return DecodeAttempt(key=key, claims=decode_and_verify(token, key))
    except TokenDecodeError as e:
        return DecodeAttempt(key=key, error=e)
