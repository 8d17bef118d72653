"""User details extracted from a verified Google ID token."""

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class UserProfile:
    """Basic Google account details. Fields missing from the token stay ``None``."""

    user_id: str | None = None
    email: str | None = None
    email_verified: bool | None = None
    full_name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture_url: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def user_info(claims: Mapping[str, Any] | None) -> UserProfile | None:
    """Project a verified token payload onto a ``UserProfile``.

    Returns ``None`` when given ``None`` (no signed-in user).

    Raises:
        TypeError: If ``claims`` is not a mapping, e.g. a still-encoded token.
    """
    if claims is None:
        return None
    if not isinstance(claims, Mapping):
        raise TypeError(
            "claims must be a mapping of decoded token claims, "
            f"not {type(claims).__name__}; verify the credential first"
        )
    return UserProfile(
        user_id=claims.get("sub"),
        email=claims.get("email"),
        email_verified=claims.get("email_verified"),
        full_name=claims.get("name"),
        given_name=claims.get("given_name"),
        family_name=claims.get("family_name"),
        picture_url=claims.get("picture"),
    )
