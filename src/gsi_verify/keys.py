"""Candidate verification keys, their normalisation, and the static key source."""

import abc
from collections.abc import Iterable, Mapping
from typing import Any

from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa
from cryptography.hazmat.primitives.serialization import load_pem_public_key
from jwt import PyJWK
from jwt.algorithms import ECAlgorithm, OKPAlgorithm, RSAAlgorithm
from jwt.exceptions import PyJWTError

_EC_ALGORITHMS = {"secp256r1": "ES256", "secp384r1": "ES384", "secp521r1": "ES512"}


class KeySource(abc.ABC):
    """A current, ordered set of candidate verification keys."""

    @abc.abstractmethod
    async def get_keys(self) -> tuple[PyJWK, ...]: ...


class StaticKeySource(KeySource):
    """Keys supplied by the caller. Useful for tests and for key pinning.

    Args:
        keys: Public keys in any form accepted by ``load_public_key``.
    """

    def __init__(self, keys: Iterable[Any]) -> None:
        self._keys = tuple(load_public_key(key) for key in keys)

    @property
    def keys(self) -> tuple[PyJWK, ...]:
        return self._keys

    async def get_keys(self) -> tuple[PyJWK, ...]:
        return self._keys


def load_public_key(value: Any) -> PyJWK:
    """Normalise a public key into a ``PyJWK``.

    Accepts a ``PyJWK``, a JWK dict, a PEM string or bytes, or a
    ``cryptography`` public key object.

    Raises:
        TypeError: If the value is not a supported key type.
        ValueError: If the key material cannot be parsed.
    """
    if isinstance(value, PyJWK):
        return value
    if isinstance(value, Mapping):
        return _jwk_from_dict(value)
    if isinstance(value, str | bytes):
        data = value.encode("utf-8") if isinstance(value, str) else value
        try:
            value = load_pem_public_key(data)
        except ValueError as e:
            raise ValueError(f"Could not load PEM public key: {e}") from e
        return _jwk_from_public_key(value)
    return _jwk_from_public_key(value)


def parse_jwks(data: Any) -> tuple[PyJWK, ...]:
    """Parse a JSON Web Key Set document into an ordered tuple of keys.

    Raises:
        ValueError: If the document is not a valid key set.
    """
    if not isinstance(data, Mapping):
        raise ValueError("JWKS document must be a JSON object")
    entries = data.get("keys")
    if not isinstance(entries, list):
        raise ValueError("JWKS document has no 'keys' list")

    keys: list[PyJWK] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise ValueError("JWKS entry is not a JSON object")
        keys.append(_jwk_from_dict(entry))
    return tuple(keys)


def _jwk_from_dict(data: Mapping[str, Any]) -> PyJWK:
    try:
        return PyJWK(dict(data))
    except (PyJWTError, ValueError, TypeError) as e:
        raise ValueError(f"Invalid JWK (kid={data.get('kid')}): {e}") from e


def _jwk_from_public_key(key: Any) -> PyJWK:
    if isinstance(key, rsa.RSAPublicKey):
        jwk = RSAAlgorithm.to_jwk(key, as_dict=True)
        algorithm = "RS256"
    elif isinstance(key, ec.EllipticCurvePublicKey):
        algorithm = _EC_ALGORITHMS.get(key.curve.name)
        if algorithm is None:
            raise ValueError(f"Unsupported elliptic curve: {key.curve.name}")
        jwk = ECAlgorithm.to_jwk(key, as_dict=True)
    elif isinstance(key, ed25519.Ed25519PublicKey | ed448.Ed448PublicKey):
        jwk = OKPAlgorithm.to_jwk(key, as_dict=True)
        algorithm = "EdDSA"
    else:
        raise TypeError(f"Unsupported public key type: {type(key).__name__}")

    return PyJWK(jwk, algorithm=algorithm)


def key_source_for(keys: Any) -> KeySource:
    """Resolve a ``KeySource`` from either an existing source or a list of keys."""
    if isinstance(keys, KeySource):
        return keys
    if isinstance(keys, str | bytes | Mapping) or not isinstance(keys, Iterable):
        keys = [keys]
    return StaticKeySource(keys)
