"""
Tests for JWT issuance and verification.
"""

import json
import string
from datetime import timedelta

import jwt as pyjwt
from jwt.utils import base64url_encode
import pytest

from auth.errors import ConfigurationError, InvalidToken
from auth.jwt import ALGORITHM, TokenKind, TokenService
from config.settings import Settings

_B64URL = string.ascii_letters + string.digits + "-_"


def _replace_char(text: str, index: int) -> str:
    original = text[index]
    replacement = next(c for c in _B64URL if c != original)
    return text[:index] + replacement + text[index + 1:]


class TestTokenServiceConstruction:
    def test_empty_secret_is_fatal(self):
        with pytest.raises(ConfigurationError):
            TokenService("")

    def test_from_settings(self):
        settings = Settings(jwt_secret="s3cret", access_token_ttl_minutes=5, refresh_token_ttl_days=1)
        tokens = TokenService.from_settings(settings)
        claims = tokens.verify(tokens.issue_access(1, "a@x.com"))
        assert claims.exp - claims.iat == 5 * 60

    def test_repr_hides_secret(self):
        assert "s3cret" not in repr(TokenService("s3cret"))


class TestIssueAndVerify:
    def test_access_round_trip(self, token_service):
        token = token_service.issue_access(42, "a@x.com")
        assert token.count(".") == 2

        claims = token_service.verify(token)
        assert claims.user_id == 42
        assert claims.email == "a@x.com"
        assert claims.kind is TokenKind.ACCESS
        assert claims.exp - claims.iat == 15 * 60

    def test_refresh_round_trip(self, token_service):
        claims = token_service.verify(token_service.issue_refresh(7, "b@x.com"))
        assert (claims.user_id, claims.email) == (7, "b@x.com")
        assert claims.kind is TokenKind.REFRESH
        assert claims.exp - claims.iat == 7 * 24 * 3600

    def test_header_is_hs256_jwt(self, token_service):
        header = pyjwt.get_unverified_header(token_service.issue_access(1, "a@x.com"))
        assert header == {"alg": "HS256", "typ": "JWT"}

    def test_claims_are_readable_without_secret(self, token_service):
        token = token_service.issue_access(1, "a@x.com")
        payload = pyjwt.decode(token, options={"verify_signature": False})
        assert payload["user_id"] == 1
        assert payload["type"] == "access"

    def test_expired_token_rejected(self):
        tokens = TokenService("test-secret", access_ttl=timedelta(seconds=-1))
        with pytest.raises(InvalidToken):
            tokens.verify(tokens.issue_access(1, "a@x.com"))

    def test_kind_enforced_when_requested(self, token_service):
        access = token_service.issue_access(1, "a@x.com")
        refresh = token_service.issue_refresh(1, "a@x.com")
        with pytest.raises(InvalidToken):
            token_service.verify(access, kind=TokenKind.REFRESH)
        with pytest.raises(InvalidToken):
            token_service.verify(refresh, kind=TokenKind.ACCESS)
        assert token_service.verify(refresh, kind=TokenKind.REFRESH).user_id == 1


class TestRejection:
    def test_every_signature_character_is_checked(self, token_service):
        token = token_service.issue_access(1, "a@x.com")
        head, payload, signature = token.split(".")
        for i in range(len(signature)):
            tampered = f"{head}.{payload}.{_replace_char(signature, i)}"
            with pytest.raises(InvalidToken):
                token_service.verify(tampered)

    def test_altered_payload_rejected(self, token_service):
        token = token_service.issue_access(1, "a@x.com")
        head, _, signature = token.split(".")
        forged = base64url_encode(
            json.dumps({"user_id": 2, "email": "a@x.com", "type": "access",
                        "exp": 9999999999, "iat": 0}).encode()
        ).decode()
        with pytest.raises(InvalidToken):
            token_service.verify(f"{head}.{forged}.{signature}")

    def test_other_secret_rejected(self, token_service):
        foreign = TokenService("another-secret").issue_access(1, "a@x.com")
        with pytest.raises(InvalidToken):
            token_service.verify(foreign)

    @pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c", "a.b.c.d", "...."])
    def test_malformed_rejected(self, token_service, token):
        with pytest.raises(InvalidToken):
            token_service.verify(token)

    def test_none_algorithm_rejected(self, token_service):
        unsigned = pyjwt.encode(
            {"user_id": 1, "email": "a@x.com", "type": "access", "exp": 9999999999, "iat": 0},
            None,
            algorithm="none",
        )
        with pytest.raises(InvalidToken):
            token_service.verify(unsigned)

    def test_missing_claims_rejected(self, token_service):
        token = pyjwt.encode({"user_id": 1, "exp": 9999999999}, "test-secret", algorithm=ALGORITHM)
        with pytest.raises(InvalidToken):
            token_service.verify(token)

    def test_error_does_not_leak_reason(self, token_service):
        tokens = TokenService("test-secret", access_ttl=timedelta(seconds=-1))
        with pytest.raises(InvalidToken) as expired:
            tokens.verify(tokens.issue_access(1, "a@x.com"))
        with pytest.raises(InvalidToken) as garbage:
            token_service.verify("a.b.c")
        assert expired.value.message == garbage.value.message
