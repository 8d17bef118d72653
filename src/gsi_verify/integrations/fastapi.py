"""FastAPI dependencies for gsi-verify."""

import logging
from typing import Any

from fastapi import Depends, HTTPException, Request

from gsi_verify.errors import GoogleSignInError
from gsi_verify.profile import UserProfile, user_info
from gsi_verify.verifier import GoogleIDTokenVerifier

logger = logging.getLogger("gsi_verify.integrations.fastapi")

VERIFICATION_FAILED = "Google ID token verification failed."


def create_current_claims_dep(
    verifier: GoogleIDTokenVerifier,
    *,
    cookie_name: str | None = None,
    form_field: str | None = "credential",
):
    """Create a FastAPI dependency that extracts and verifies the Google credential.

    Credential resolution order:
    1. ``Authorization: Bearer <token>`` header
    2. Cookie named ``cookie_name`` (if configured)
    3. Form field ``form_field`` of a POST, as sent by Google to a login URI
    """

    async def current_claims(request: Request) -> dict[str, Any]:
        token: str | None = None

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header[7:]

        if token is None and cookie_name:
            token = request.cookies.get(cookie_name)

        if token is None and form_field and request.method == "POST":
            content_type = request.headers.get("Content-Type", "")
            if content_type.startswith(
                ("application/x-www-form-urlencoded", "multipart/form-data")
            ):
                form = await request.form()
                value = form.get(form_field)
                token = value if isinstance(value, str) else None

        if not token:
            raise HTTPException(
                status_code=401,
                detail={"error": "token_missing", "message": "No Google credential provided"},
            )

        try:
            return await verifier.verify(token)
        except GoogleSignInError as e:
            # Details stay in the logs; clients get the generic message.
            logger.info("Google sign-in rejected (%s): %s", e.code, e.message)
            raise HTTPException(
                status_code=401,
                detail={"error": e.code, "message": VERIFICATION_FAILED},
            )

    return current_claims


def create_current_user_dep(
    verifier: GoogleIDTokenVerifier,
    *,
    cookie_name: str | None = None,
    form_field: str | None = "credential",
):
    """Create a FastAPI dependency that returns the signed-in user's profile."""
    current_claims_dep = create_current_claims_dep(
        verifier, cookie_name=cookie_name, form_field=form_field,
    )

    async def current_user(
        claims: dict[str, Any] = Depends(current_claims_dep),
    ) -> UserProfile:
        return user_info(claims)

    return current_user
