"""
Tests for password hashing and token helpers
"""

import pytest

from vidtube.core.exceptions import InvalidArgumentError, UnauthorizedError
from vidtube.core.security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    get_password_hash,
    hash_token,
    verify_password,
)


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = get_password_hash("correct horse")

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_overlong_password_rejected(self):
        with pytest.raises(InvalidArgumentError):
            get_password_hash("é" * 40)


class TestTokens:

    def test_access_token_round_trip(self):
        payload = decode_access_token(create_access_token({"sub": "abc"}))

        assert payload["sub"] == "abc"
        assert payload["type"] == "access"
        assert payload["jti"]

    def test_token_types_are_not_interchangeable(self):
        with pytest.raises(UnauthorizedError):
            decode_refresh_token(create_access_token({"sub": "abc"}))
        with pytest.raises(UnauthorizedError):
            decode_access_token(create_refresh_token({"sub": "abc"}))

    def test_refresh_tokens_are_unique(self):
        assert create_refresh_token({"sub": "abc"}) != create_refresh_token({"sub": "abc"})

    def test_token_digest(self):
        digest = hash_token("token")

        assert len(digest) == 64
        assert digest == hash_token("token")
        assert digest != hash_token("other")
