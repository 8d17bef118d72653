"""gsi-verify configuration."""

import os
from dataclasses import dataclass

from gsi_verify.jwks import GOOGLE_CERTS_URL


@dataclass(frozen=True, slots=True)
class GoogleSignInConfig:
    """Settings for a ``GoogleSignIn`` instance.

    Example:
        GoogleSignInConfig(client_ids=("123.apps.googleusercontent.com",))
        GoogleSignInConfig.from_env()           # reads GOOGLE_CLIENT_ID etc.
    """

    client_ids: tuple[str, ...]
    jwks_url: str = GOOGLE_CERTS_URL
    jwks_timeout: float = 10.0
    cache_keys: bool = True
    cookie_name: str | None = None
    form_field: str | None = "credential"

    def __post_init__(self) -> None:
        if isinstance(self.client_ids, str):
            object.__setattr__(self, "client_ids", (self.client_ids,))
        else:
            object.__setattr__(self, "client_ids", tuple(self.client_ids))
        for client_id in self.client_ids:
            if not isinstance(client_id, str) or not client_id:
                raise ValueError(f"Invalid client id: {client_id!r}")
        if self.jwks_timeout <= 0:
            raise ValueError("jwks_timeout must be positive")

    @classmethod
    def from_env(cls) -> "GoogleSignInConfig":
        """Build a config from environment variables.

        GOOGLE_CLIENT_ID: comma-separated client IDs (required).
        GSI_JWKS_URL: certs endpoint override.
        GSI_JWKS_TIMEOUT: fetch timeout in seconds.
        """
        raw = os.environ.get("GOOGLE_CLIENT_ID", "")
        client_ids = tuple(c.strip() for c in raw.split(",") if c.strip())
        if not client_ids:
            raise ValueError("Missing GOOGLE_CLIENT_ID in environment.")
        return cls(
            client_ids=client_ids,
            jwks_url=os.environ.get("GSI_JWKS_URL", GOOGLE_CERTS_URL),
            jwks_timeout=float(os.environ.get("GSI_JWKS_TIMEOUT", "10")),
        )
