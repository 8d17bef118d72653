"""Google ID token verification: trial decoding against every trusted key, then claim checks."""

import logging
import numbers
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from gsi_verify.decoder import DecodeAttempt, try_decode
from gsi_verify.errors import DecodeSignatureError, InvalidClaimsError, KeyFetchError
from gsi_verify.jwks import JWKSCache
from gsi_verify.keys import KeySource, key_source_for

logger = logging.getLogger("gsi_verify.verifier")

ACCEPTED_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class GoogleIDTokenVerifier:
    """Verifies Google ID tokens for a set of OAuth client IDs.

    Create once per application scope. Stateless across calls apart from its
    key source, which may cache.

    Args:
        client_ids: Accepted audiences, i.e. your app's Google client IDs.
            An empty list rejects every token.
        keys: Where the verification keys come from. ``None`` uses a private
            ``JWKSCache`` over Google's certs endpoint; a ``KeySource`` is used
            as given; anything else is treated as a list of public keys.
        clock: Wall clock in epoch seconds, compared against ``exp``.
    """

    def __init__(
        self,
        client_ids: str | Iterable[str],
        keys: Any = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client_ids = _as_audiences(client_ids)
        self._key_source: KeySource = JWKSCache() if keys is None else key_source_for(keys)
        self._clock = clock

    @property
    def client_ids(self) -> tuple[str, ...]:
        return self._client_ids

    @property
    def key_source(self) -> KeySource:
        return self._key_source

    async def verify(
        self, token: str, *, audiences: str | Iterable[str] | None = None,
    ) -> dict[str, Any]:
        """Verify an encoded Google ID token and return its payload unchanged.

        Args:
            token: The encoded JWT credential.
            audiences: Overrides ``client_ids`` for this call.

        Raises:
            DecodeSignatureError: Keys unavailable, malformed token, or no key
                matched the signature.
            InvalidClaimsError: Issuer, audience or expiry check failed.
        """
        accepted = self._client_ids if audiences is None else _as_audiences(audiences)

        try:
            keys = await self._key_source.get_keys()
        except KeyFetchError as e:
            logger.warning("Cannot verify token, keys unavailable: %s", e.message)
            raise DecodeSignatureError(f"Verification keys unavailable: {e.message}", e) from e

        # Signer is unknown up front: accept the first key that verifies.
        last: DecodeAttempt | None = None
        for key in keys:
            last = try_decode(token, key)
            if last.ok:
                break

        if last is None:
            raise DecodeSignatureError("No verification keys available")
        if not last.ok:
            logger.debug("Token rejected by all %d keys: %s", len(keys), last.error)
            raise DecodeSignatureError(f"Invalid token: {last.error}", last.error) from last.error

        claims = last.claims
        checks = check_claims(claims, accepted, self._clock())
        if not all(checks.values()):
            error = InvalidClaimsError(checks, claims)
            logger.debug("Token claims rejected: %s", ", ".join(error.failed))
            raise error

        logger.debug("Token verified with key kid=%s", last.key.key_id)
        return claims


def check_claims(
    claims: Mapping[str, Any], audiences: Iterable[str], now: float,
) -> dict[str, bool]:
    """Evaluate the issuer, audience and expiry checks, all of them."""
    return {
        "iss": claims.get("iss") in ACCEPTED_ISSUERS,
        "aud": _audience_matches(claims.get("aud"), audiences),
        "exp": _not_expired(claims.get("exp"), now),
    }


def _audience_matches(aud: Any, accepted: Iterable[str]) -> bool:
    if isinstance(aud, str):
        claimed = {aud}
    elif isinstance(aud, list):
        claimed = {a for a in aud if isinstance(a, str)}
    else:
        return False
    return not claimed.isdisjoint(accepted)


def _not_expired(exp: Any, now: float) -> bool:
    if isinstance(exp, bool) or not isinstance(exp, numbers.Real):
        return False
    return exp > now


def _as_audiences(value: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(value)


async def verify_credential(
    token: str, client_ids: str | Iterable[str], keys: Any = None,
) -> dict[str, Any]:
    """Verify a token with a one-off verifier.

    Without ``keys`` every call fetches Google's certs; hold a
    ``GoogleIDTokenVerifier`` instead when verifying repeatedly.
    """
    return await GoogleIDTokenVerifier(client_ids, keys).verify(token)
