"""
Tests for token issuance and validation.
"""

import base64
import json
from datetime import timedelta

import jwt
import pytest

from gatekeeper.auth.errors import SecretNotInitializedError, TokenValidationError
from gatekeeper.auth.jwt import Claims, TokenCodec, get_claims
from gatekeeper.auth.secret import SecretManager
from gatekeeper.core.utils import utc_now


# =============================================================================
# Helpers
# =============================================================================


def tamper(token_string: str, index: int) -> str:
    """Change one character of the token."""
    replacement = "A" if token_string[index] != "A" else "B"
    return token_string[:index] + replacement + token_string[index + 1:]


def b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


@pytest.fixture
def past_codec(secrets, settings):
    """Issues tokens as if it were an hour ago."""
    return TokenCodec(secrets, settings, clock=lambda: utc_now() - timedelta(hours=1))


# =============================================================================
# Issuance Tests
# =============================================================================


class TestIssuance:
    def test_access_token_claims(self, codec):
        token, token_string = codec.access_token("alice")

        assert token.claims.subject == "alice"
        assert len(token.claims.id) == 32
        int(token.claims.id, 16)  # hex encoded
        assert token.raw == token_string

        remaining = token.claims.expires_at - utc_now()
        assert timedelta(minutes=14, seconds=55) < remaining <= timedelta(minutes=15)

    def test_token_ids_are_unique(self, codec):
        ids = {codec.access_token("alice")[0].claims.id for _ in range(50)}
        assert len(ids) == 50

    def test_refresh_token_has_no_expiry(self, codec):
        token_string = codec.refresh_token("alice")
        payload = jwt.decode(token_string, options={"verify_signature": False})

        assert payload["sub"] == "alice"
        assert "exp" not in payload
        assert len(payload["jti"]) == 32

    def test_empty_username(self, codec):
        with pytest.raises(ValueError):
            codec.access_token("")

    def test_secret_required(self, settings):
        codec = TokenCodec(SecretManager(settings), settings)

        with pytest.raises(SecretNotInitializedError):
            codec.access_token("alice")

    def test_token_pair(self, codec):
        pair = codec.issue_token_pair("alice")

        assert pair.token_type == "bearer"
        assert pair.expires_in == 15 * 60
        assert codec.validate_token(pair.access_token).claims.subject == "alice"
        assert codec.validate_token(pair.refresh_token).claims.expires_at is None


# =============================================================================
# Validation Tests
# =============================================================================


class TestValidateToken:
    def test_round_trip(self, codec):
        token, token_string = codec.access_token("alice")

        parsed = codec.validate_token(token_string)

        assert parsed.claims == token.claims
        assert get_claims(parsed) == token.claims
        assert parsed.header["alg"] == "HS256"

    @pytest.mark.parametrize("segment", [0, 1, 2])
    def test_tampered_token_fails(self, codec, segment):
        _, token_string = codec.access_token("alice")
        parts = token_string.split(".")
        offset = sum(len(p) + 1 for p in parts[:segment])
        index = offset + len(parts[segment]) // 2

        with pytest.raises(TokenValidationError) as exc:
            codec.validate_token(tamper(token_string, index))

        assert exc.value.failure.is_fatal

    def test_bad_signature(self, codec, settings):
        other = SecretManager(settings)
        other._secret = b"x" * 32
        _, token_string = TokenCodec(other, settings).access_token("alice")

        with pytest.raises(TokenValidationError) as exc:
            codec.validate_token(token_string)

        assert exc.value.failure.bad_signature
        assert not exc.value.expired

    @pytest.mark.parametrize("token_string", ["", "not-a-token", "a.b.c", "...."])
    def test_malformed(self, codec, token_string):
        with pytest.raises(TokenValidationError) as exc:
            codec.validate_token(token_string)

        assert exc.value.failure.malformed

    def test_none_algorithm_rejected(self, codec):
        token_string = jwt.encode({"sub": "alice", "jti": "abc"}, "", algorithm="none")

        with pytest.raises(TokenValidationError) as exc:
            codec.validate_token(token_string)

        assert exc.value.failure.bad_algorithm

    def test_asymmetric_algorithm_rejected(self, codec):
        header = b64({"alg": "RS256", "typ": "JWT"})
        payload = b64({"sub": "alice", "jti": "abc"})
        token_string = f"{header}.{payload}.c2lnbmF0dXJl"

        with pytest.raises(TokenValidationError) as exc:
            codec.validate_token(token_string)

        assert exc.value.failure.bad_algorithm

    @pytest.mark.parametrize(
        "payload",
        [
            {"sub": "alice"},
            {"jti": "abc"},
            {"sub": "", "jti": "abc"},
            {"sub": "alice", "jti": "abc", "exp": "tomorrow"},
        ],
    )
    def test_invalid_claims(self, codec, secrets, payload):
        token_string = jwt.encode(payload, secrets.secret, algorithm="HS256")

        with pytest.raises(TokenValidationError) as exc:
            codec.validate_token(token_string)

        assert exc.value.failure.claims_invalid


class TestExpiredTokens:
    def test_expired_rejected(self, codec, past_codec):
        _, token_string = past_codec.access_token("alice")

        with pytest.raises(TokenValidationError) as exc:
            codec.validate_token(token_string)

        assert exc.value.expired
        assert not exc.value.failure.is_fatal

    def test_expired_tolerated(self, codec, past_codec):
        token, token_string = past_codec.access_token("alice")

        parsed = codec.validate_expired_token(token_string)

        assert parsed.claims == token.claims
        assert parsed.claims.is_expired()

    def test_valid_token_tolerated(self, codec):
        token, token_string = codec.access_token("alice")
        assert codec.validate_expired_token(token_string).claims == token.claims

    def test_tampered_expired_token(self, codec, past_codec):
        _, token_string = past_codec.access_token("alice")
        signature_start = token_string.rindex(".") + 1
        tampered = tamper(token_string, signature_start + 5)

        with pytest.raises(TokenValidationError):
            codec.validate_token(tampered)
        with pytest.raises(TokenValidationError) as exc:
            codec.validate_expired_token(tampered)

        assert exc.value.failure.bad_signature

    def test_malformed_not_tolerated(self, codec):
        with pytest.raises(TokenValidationError):
            codec.validate_expired_token("garbage")


class TestClaims:
    def test_payload_round_trip(self):
        claims = Claims(
            subject="alice",
            id="ab" * 16,
            expires_at=utc_now().replace(microsecond=0),
        )
        assert Claims.from_payload(claims.to_payload()) == claims

    def test_no_expiry(self):
        claims = Claims(subject="alice", id="abc")

        assert "exp" not in claims.to_payload()
        assert not claims.is_expired()


# =============================================================================
# Refresh Tests
# =============================================================================


class TestRefresh:
    def test_refresh_with_expired_access_token(self, codec, past_codec):
        _, access = past_codec.access_token("alice")
        refresh = codec.refresh_token("alice")

        pair = codec.refresh(access, refresh)

        assert codec.validate_token(pair.access_token).claims.subject == "alice"

    def test_subject_mismatch(self, codec):
        _, access = codec.access_token("alice")
        refresh = codec.refresh_token("mallory")

        with pytest.raises(TokenValidationError) as exc:
            codec.refresh(access, refresh)

        assert exc.value.failure.claims_invalid

    def test_forged_access_token(self, codec):
        _, access = codec.access_token("alice")
        refresh = codec.refresh_token("alice")
        signature_start = access.rindex(".") + 1

        with pytest.raises(TokenValidationError):
            codec.refresh(tamper(access, signature_start + 3), refresh)

    def test_access_token_as_refresh_token(self, codec):
        _, access = codec.access_token("alice")

        with pytest.raises(TokenValidationError) as exc:
            codec.refresh(access, access)

        assert exc.value.failure.claims_invalid

    def test_refresh_token_as_access_token(self, codec):
        refresh = codec.refresh_token("alice")

        with pytest.raises(TokenValidationError) as exc:
            codec.refresh(refresh, refresh)

        assert exc.value.failure.claims_invalid


class TestValidateAccessToken:
    def test_access_token_accepted(self, codec):
        _, access = codec.access_token("alice")

        assert codec.validate_access_token(access).claims.subject == "alice"

    def test_refresh_token_rejected(self, codec):
        refresh = codec.refresh_token("alice")

        with pytest.raises(TokenValidationError) as exc:
            codec.validate_access_token(refresh)

        assert exc.value.failure.claims_invalid
        assert exc.value.failure.is_fatal

    def test_expired_access_token_rejected(self, codec, past_codec):
        _, access = past_codec.access_token("alice")

        with pytest.raises(TokenValidationError) as exc:
            codec.validate_access_token(access)

        assert exc.value.expired
