"""Unit tests for password hashing and JWT helpers."""

import jwt as pyjwt
import pytest

from studybuddy_api.core.security import create_access_token, decode_token, hash_password, verify_password


class TestPasswordHashing:
    def test_hash_and_verify(self) -> None:
        hashed = hash_password("correct-horse-battery")
        assert hashed != "correct-horse-battery"
        assert verify_password("correct-horse-battery", hashed) is True
        assert verify_password("wrong", hashed) is False


class TestJWT:
    SECRET = "test-secret-key-for-testing-32chars"

    def test_round_trip_claims(self) -> None:
        token = create_access_token("alice", "ADMIN", self.SECRET)
        payload = decode_token(token, self.SECRET)
        assert payload["sub"] == "alice"
        assert payload["role"] == "ADMIN"
        assert payload["type"] == "access"

    def test_expired_token_rejected(self) -> None:
        token = create_access_token("alice", "ADMIN", self.SECRET, expires_minutes=-1)
        with pytest.raises(pyjwt.ExpiredSignatureError):
            decode_token(token, self.SECRET)

    def test_wrong_secret_key_rejected(self) -> None:
        token = create_access_token("alice", "ADMIN", self.SECRET)
        with pytest.raises(pyjwt.InvalidSignatureError):
            decode_token(token, "completely-wrong-secret-of-enough-length")
