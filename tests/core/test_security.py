"""
Unit tests for password hashing and JWT helpers.
"""

from datetime import timedelta

from school_admin.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)


class TestPasswordHashing:
    """Tests for hash_password / verify_password."""

    def test_hash_is_not_plain_text(self):
        hashed = hash_password("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert hashed.startswith("$2")

    def test_verify_accepts_correct_password(self):
        hashed = hash_password("s3cret-pass")
        assert verify_password("s3cret-pass", hashed) is True

    def test_verify_rejects_wrong_password(self):
        hashed = hash_password("s3cret-pass")
        assert verify_password("other-pass", hashed) is False

    def test_verify_returns_false_for_malformed_hash(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestTokens:
    """Tests for access/refresh token creation and decoding."""

    def test_access_token_round_trip_carries_claims(self):
        token = create_access_token("42", additional_claims={"email": "a@b.ao", "role": "admin"})
        payload = decode_token(token)

        assert payload is not None
        assert payload["sub"] == "42"
        assert payload["type"] == "access"
        assert payload["email"] == "a@b.ao"
        assert payload["role"] == "admin"

    def test_refresh_token_has_refresh_type(self):
        payload = decode_token(create_refresh_token("42"))
        assert payload is not None
        assert payload["type"] == "refresh"

    def test_expired_token_decodes_to_none(self):
        token = create_access_token("42", expires_delta=timedelta(seconds=-10))
        assert decode_token(token) is None

    def test_tampered_token_decodes_to_none(self):
        token = create_access_token("42")
        header_and_payload = token.rsplit(".", 1)[0]
        assert decode_token(f"{header_and_payload}.invalid-signature") is None
