"""Tests for projecting verified claims onto a user profile."""

import pytest

from gsi_verify.profile import UserProfile, user_info

GOOGLE_CLAIMS = {
    "iss": "https://accounts.google.com",
    "aud": "REAL-CLIENT.apps.googleusercontent.com",
    "sub": "110169484474386276334",
    "email": "jane.doe@gmail.com",
    "email_verified": True,
    "name": "Jane Doe",
    "given_name": "Jane",
    "family_name": "Doe",
    "picture": "https://lh3.googleusercontent.com/a/photo.jpg",
    "exp": 1_800_000_000,
}


class TestUserInfo:
    def test_none_maps_to_none(self):
        assert user_info(None) is None

    def test_encoded_token_is_rejected(self):
        with pytest.raises(TypeError, match="must be a mapping"):
            user_info("eyJhbGciOiJSUzI1NiJ9.e30.c2ln")

    def test_fields_copied(self):
        assert user_info(GOOGLE_CLAIMS) == UserProfile(
            user_id="110169484474386276334",
            email="jane.doe@gmail.com",
            email_verified=True,
            full_name="Jane Doe",
            given_name="Jane",
            family_name="Doe",
            picture_url="https://lh3.googleusercontent.com/a/photo.jpg",
        )

    def test_missing_picture_stays_absent(self):
        claims = {k: v for k, v in GOOGLE_CLAIMS.items() if k != "picture"}
        profile = user_info(claims)
        assert profile.picture_url is None
        assert profile.email == "jane.doe@gmail.com"

    def test_as_dict(self):
        data = user_info({"sub": "42"}).as_dict()
        assert data == {
            "user_id": "42",
            "email": None,
            "email_verified": None,
            "full_name": None,
            "given_name": None,
            "family_name": None,
            "picture_url": None,
        }
