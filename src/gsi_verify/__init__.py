"""gsi-verify — Server-side verification of Sign In With Google ID tokens."""

__version__ = "0.1.0"

from gsi_verify.config import GoogleSignInConfig
from gsi_verify.errors import (
    DecodeSignatureError,
    GoogleSignInError,
    InvalidClaimsError,
    KeyFetchError,
    TokenVerificationError,
)
from gsi_verify.jwks import GOOGLE_CERTS_URL, JWKSCache, JWKSFetcher
from gsi_verify.keys import KeySource, StaticKeySource
from gsi_verify.profile import UserProfile, user_info
from gsi_verify.service import GoogleSignIn
from gsi_verify.verifier import ACCEPTED_ISSUERS, GoogleIDTokenVerifier, verify_credential

__all__ = [
    "ACCEPTED_ISSUERS",
    "DecodeSignatureError",
    "GOOGLE_CERTS_URL",
    "GoogleIDTokenVerifier",
    "GoogleSignIn",
    "GoogleSignInConfig",
    "GoogleSignInError",
    "InvalidClaimsError",
    "JWKSCache",
    "JWKSFetcher",
    "KeyFetchError",
    "KeySource",
    "StaticKeySource",
    "TokenVerificationError",
    "UserProfile",
    "user_info",
    "verify_credential",
]
