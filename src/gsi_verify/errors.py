"""Exception hierarchy for Google ID token verification."""

from collections.abc import Mapping
from typing import Any


class GoogleSignInError(Exception):
    """Base class for every error raised by gsi-verify."""

    code = "gsi_error"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class KeyFetchError(GoogleSignInError):
    """Raised when Google's public keys cannot be retrieved or parsed."""

    code = "jwks_unavailable"

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        super().__init__(message)


class TokenVerificationError(GoogleSignInError):
    """Raised when an ID token is rejected."""

    code = "token_invalid"


class DecodeSignatureError(TokenVerificationError):
    """The token is malformed or not signed by any of the trusted keys.

    ``cause`` holds the last underlying failure (a decode error, or the
    ``KeyFetchError`` when no keys could be obtained).
    """

    code = "token_invalid"

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class InvalidClaimsError(TokenVerificationError):
    """The signature is valid but the payload fails the issuer, audience or expiry checks.

    ``claims`` is the decoded payload. Treat it as diagnostic data for logs
    and tests; it is deliberately left out of the string form.
    """

    code = "invalid_claims"

    def __init__(self, checks: Mapping[str, bool], claims: Mapping[str, Any]):
        self.checks = dict(checks)
        self.failed = tuple(name for name, passed in self.checks.items() if not passed)
        self.claims = claims
        super().__init__(
            f"Google ID token payload verification failed: {', '.join(self.failed)}"
        )
