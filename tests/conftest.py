"""Test fixtures for gsi-verify tests.

All tests are offline — they generate RSA keys, sign ID tokens locally,
and mock the certs endpoint using httpx MockTransport.
"""

import base64
import time
import uuid

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

CLIENT_ID = "REAL-CLIENT.apps.googleusercontent.com"
CERTS_URL = "https://test/oauth2/v3/certs"


def generate_key_pair() -> tuple[str, str]:
    """Generate an RSA key pair as (private_pem, public_pem)."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")
    return private_pem, public_pem


def public_key_to_jwk(public_pem: str, kid: str | None = None) -> dict:
    """Convert a PEM public key to the JWK form Google publishes."""
    from cryptography.hazmat.primitives.serialization import load_pem_public_key

    public_key = load_pem_public_key(public_pem.encode("utf-8"))
    public_numbers = public_key.public_numbers()

    def _int_to_b64url(value: int) -> str:
        byte_length = (value.bit_length() + 7) // 8
        value_bytes = value.to_bytes(byte_length, byteorder="big")
        return base64.urlsafe_b64encode(value_bytes).rstrip(b"=").decode("ascii")

    return {
        "kty": "RSA",
        "kid": kid or uuid.uuid4().hex,
        "use": "sig",
        "alg": "RS256",
        "n": _int_to_b64url(public_numbers.n),
        "e": _int_to_b64url(public_numbers.e),
    }


@pytest.fixture(scope="session")
def key_pairs():
    """Two trusted key pairs, like Google's usual pair of published keys."""
    return [generate_key_pair(), generate_key_pair()]


@pytest.fixture(scope="session")
def private_keys(key_pairs):
    return [private_pem for private_pem, _ in key_pairs]


@pytest.fixture(scope="session")
def public_keys(key_pairs):
    return [public_pem for _, public_pem in key_pairs]


@pytest.fixture(scope="session")
def untrusted_private_key():
    private_pem, _ = generate_key_pair()
    return private_pem


@pytest.fixture(scope="session")
def jwks_response(public_keys):
    """A JWKS response body with both trusted keys."""
    return {
        "keys": [
            public_key_to_jwk(public_pem, kid=f"test-key-{i}")
            for i, public_pem in enumerate(public_keys, start=1)
        ]
    }


def valid_claims(**overrides) -> dict:
    """A claim set that passes every check for CLIENT_ID."""
    claims = {
        "iss": "accounts.google.com",
        "aud": CLIENT_ID,
        "sub": "110169484474386276334",
        "exp": int(time.time()) + 3600,
    }
    claims.update(overrides)
    return {k: v for k, v in claims.items() if v is not None}


def sign(claims: dict, private_key_pem: str, *, kid: str | None = None) -> str:
    """Sign a claim set as an RS256 JWT."""
    headers = {"kid": kid} if kid else None
    return jwt.encode(claims, private_key_pem, algorithm="RS256", headers=headers)


class FakeClock:
    """Manually advanced clock, usable as both monotonic and wall clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_certs_transport(handler_or_body, *, status_code: int = 200, headers: dict | None = None):
    """Create an httpx MockTransport for the certs endpoint.

    Returns the transport and the list of requests it received.
    """
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if callable(handler_or_body):
            return handler_or_body(request)
        return httpx.Response(status_code, json=handler_or_body, headers=headers)

    return httpx.MockTransport(handler), requests
