"""GoogleSignIn — main entry point for gsi-verify.

Holds one verifier for the application's lifetime and exposes it both
programmatically and as FastAPI dependencies.
"""

from collections.abc import Iterable
from typing import Any

from gsi_verify.config import GoogleSignInConfig
from gsi_verify.jwks import GOOGLE_CERTS_URL, JWKSCache, JWKSFetcher
from gsi_verify.keys import KeySource
from gsi_verify.profile import UserProfile, user_info
from gsi_verify.verifier import GoogleIDTokenVerifier


class GoogleSignIn:
    """Server side of "Sign In With Google".

    Verifies the ID token credential the sign-in button hands to your app.

    Args:
        client_ids: Your app's Google OAuth client ID(s).
        keys: Pinned public keys or a custom ``KeySource``; bypasses the
            certs endpoint entirely. Cannot be combined with ``key_cache``.
        jwks_url: Certs endpoint (default Google's v3 certs). Unused when
            ``keys`` or ``key_cache`` is given.
        jwks_timeout: Certs fetch timeout in seconds (default 10). Unused when
            ``keys`` or ``key_cache`` is given.
        key_cache: A ``JWKSCache`` to share with other instances. By default
            each instance owns its own cache.
        cache_keys: Set False to fetch the certs on every verification.
        cookie_name: Cookie the FastAPI dependencies read the credential from.
        form_field: Form field the FastAPI dependencies read the credential from.

    Raises:
        ValueError: If both ``keys`` and ``key_cache`` are given.
    """

    def __init__(
        self,
        client_ids: str | Iterable[str],
        *,
        keys: Any = None,
        jwks_url: str = GOOGLE_CERTS_URL,
        jwks_timeout: float = 10.0,
        key_cache: JWKSCache | None = None,
        cache_keys: bool = True,
        cookie_name: str | None = None,
        form_field: str | None = "credential",
    ) -> None:
        if keys is not None and key_cache is not None:
            raise ValueError("Pass either keys or key_cache, not both")
        if keys is None:
            if key_cache is not None:
                keys = key_cache
            else:
                fetcher = JWKSFetcher(jwks_url, http_timeout=jwks_timeout)
                keys = JWKSCache(fetcher) if cache_keys else fetcher
        self._verifier = GoogleIDTokenVerifier(client_ids, keys)
        self._cookie_name = cookie_name
        self._form_field = form_field
        self._current_claims_dep = None
        self._current_user_dep = None

    @classmethod
    def from_config(cls, config: GoogleSignInConfig, **kwargs: Any) -> "GoogleSignIn":
        return cls(
            config.client_ids,
            jwks_url=config.jwks_url,
            jwks_timeout=config.jwks_timeout,
            cache_keys=config.cache_keys,
            cookie_name=config.cookie_name,
            form_field=config.form_field,
            **kwargs,
        )

    @property
    def verifier(self) -> GoogleIDTokenVerifier:
        return self._verifier

    @property
    def key_source(self) -> KeySource:
        return self._verifier.key_source

    async def verify_token(self, token: str) -> dict[str, Any]:
        """Verify an encoded Google ID token and return its payload.

        Raises:
            DecodeSignatureError: If the token is not signed by Google.
            InvalidClaimsError: If it is, but not valid for this app right now.
        """
        return await self._verifier.verify(token)

    async def user_info(self, token: str) -> UserProfile:
        """Verify a token and return the user's profile."""
        return user_info(await self._verifier.verify(token))

    @property
    def current_claims(self):
        """FastAPI dependency: the verified token payload of the request.

        Usage:
            gsi = GoogleSignIn(client_ids="...apps.googleusercontent.com")

            @app.post("/login")
            async def login(claims=Depends(gsi.current_claims)):
                print(claims["sub"])
        """
        if self._current_claims_dep is None:
            from gsi_verify.integrations.fastapi import create_current_claims_dep

            self._current_claims_dep = create_current_claims_dep(
                self._verifier, cookie_name=self._cookie_name, form_field=self._form_field,
            )
        return self._current_claims_dep

    @property
    def current_user(self):
        """FastAPI dependency: the signed-in user's ``UserProfile``."""
        if self._current_user_dep is None:
            from gsi_verify.integrations.fastapi import create_current_user_dep

            self._current_user_dep = create_current_user_dep(
                self._verifier, cookie_name=self._cookie_name, form_field=self._form_field,
            )
        return self._current_user_dep
