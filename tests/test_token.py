"""
Unit tests — registration token (token_service.py).
"""
from __future__ import annotations

import pytest

from techelons.errors import InvalidTokenError
from techelons.services.token_service import decode_registration_token, encode_registration_token


class TestRegistrationToken:

    @pytest.mark.parametrize("email", ["alice@du.ac.in", "a.b+c@example.com", "x_y-z@ipu.ac.in"])
    def test_round_trip(self, email: str) -> None:
        assert decode_registration_token(encode_registration_token(email)) == email

    def test_deterministic(self) -> None:
        assert encode_registration_token("alice@du.ac.in") == encode_registration_token("alice@du.ac.in")

    def test_url_safe(self) -> None:
        token = encode_registration_token("??>>@example.com")
        assert "+" not in token and "/" not in token

    def test_empty_token(self) -> None:
        with pytest.raises(InvalidTokenError, match="Token is required"):
            decode_registration_token("")

    @pytest.mark.parametrize("garbage", ["%%%", "abc", "bm90LWFuLWVtYWls"])
    def test_garbage_rejected(self, garbage: str) -> None:
        with pytest.raises(InvalidTokenError):
            decode_registration_token(garbage)
