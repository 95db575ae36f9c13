# =============================================================================
# JWT Token Lifecycle
# =============================================================================
#
# This module provides token issuance and validation:
#   - Claims structure (subject, token id, expiry)
#   - Access tokens (15 minutes) and refresh tokens (no expiry)
#   - Parsing pinned to the HMAC family
#   - Strict and expiry-tolerant validation
#   - Refresh exchange built on both validators
#
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import jwt
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, ValidationError

from gatekeeper.auth.errors import TokenValidationError, ValidationFailure
from gatekeeper.auth.secret import SecretManager
from gatekeeper.config import HMAC_ALGORITHMS, Settings, get_settings
from gatekeeper.core.utils import generate_token_id, utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================


class _ClaimsPayload(BaseModel):
    """Wire shape of the claims, checked strictly after signature verification."""

    sub: StrictStr = Field(min_length=1)
    jti: StrictStr = Field(min_length=1)
    exp: StrictInt | StrictFloat | None = None


class Claims(BaseModel):
    """Authenticated identity carried by a token."""

    model_config = ConfigDict(frozen=True)

    subject: str
    id: str
    expires_at: datetime | None = None  # None for refresh tokens

    @property
    def is_access(self) -> bool:
        """Access tokens expire; refresh tokens never do."""
        return self.expires_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or utc_now()) >= self.expires_at

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"sub": self.subject, "jti": self.id}
        if self.expires_at is not None:
            payload["exp"] = int(self.expires_at.timestamp())
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Claims:
        """
        Build claims from a verified payload.

        Raises:
            pydantic.ValidationError: A claim is missing or has the wrong type
        """
        data = _ClaimsPayload.model_validate(payload)
        expires_at = None
        if data.exp is not None:
            expires_at = datetime.fromtimestamp(int(data.exp), tz=timezone.utc)
        return cls(subject=data.sub, id=data.jti, expires_at=expires_at)


@dataclass(frozen=True)
class Token:
    """A signed token and its typed claims."""

    claims: Claims
    raw: str
    header: dict[str, Any] = field(default_factory=dict)


class TokenPair(BaseModel):
    """Access and refresh token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime
    expires_in: int  # seconds until access token expires


def get_claims(token: Token) -> Claims:
    """Return the claims of a token."""
    return token.claims


# =============================================================================
# Token Codec
# =============================================================================


class TokenCodec:
    """
    Builds, signs, parses and validates tokens.

    The signing secret is read from the injected SecretManager on every
    call, so the codec can be built before the secret is bootstrapped.
    """

    def __init__(
        self,
        secrets: SecretManager,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.secrets = secrets
        self.settings = settings or get_settings()
        self._clock = clock

    @property
    def access_token_lifetime(self) -> timedelta:
        return timedelta(minutes=self.settings.access_token_expire_minutes)

    # =========================================================================
    # Issuance
    # =========================================================================

    def access_token(self, username: str) -> tuple[Token, str]:
        """
        Create a new access token.

        Returns:
            The structured token and its signed string form
        """
        expires_at = self._clock() + self.access_token_lifetime
        claims = self._new_claims(
            username,
            # Whole seconds, so the claims survive a round-trip unchanged
            expires_at=datetime.fromtimestamp(int(expires_at.timestamp()), tz=timezone.utc),
        )
        token_string = self._sign(claims)
        logger.debug(f"Issued access token {claims.id} for {username}")
        return Token(claims=claims, raw=token_string, header=self._header()), token_string

    def refresh_token(self, username: str) -> str:
        """Create a refresh token. Refresh tokens carry no expiry."""
        claims = self._new_claims(username)
        token_string = self._sign(claims)
        logger.debug(f"Issued refresh token {claims.id} for {username}")
        return token_string

    def issue_token_pair(self, username: str) -> TokenPair:
        """Create both access and refresh tokens."""
        access, access_string = self.access_token(username)
        return TokenPair(
            access_token=access_string,
            refresh_token=self.refresh_token(username),
            expires_at=access.claims.expires_at,
            expires_in=int(self.access_token_lifetime.total_seconds()),
        )

    def _new_claims(self, username: str, expires_at: datetime | None = None) -> Claims:
        if not username:
            raise ValueError("username cannot be empty")
        return Claims(
            subject=username,
            id=generate_token_id(self.settings.token_id_length),
            expires_at=expires_at,
        )

    def _header(self) -> dict[str, Any]:
        return {"alg": self.settings.jwt_algorithm, "typ": "JWT"}

    def _sign(self, claims: Claims) -> str:
        return jwt.encode(
            claims.to_payload(),
            self.secrets.secret,
            algorithm=self.settings.jwt_algorithm,
        )

    # =========================================================================
    # Parsing
    # =========================================================================

    def _parse_token(self, token_string: str) -> tuple[Token | None, ValidationFailure | None]:
        """
        Parse and verify a signed token.

        The accepted algorithms are pinned here, never taken from the
        token header, so a token declaring "none" or an asymmetric
        algorithm is rejected before its signature is considered.

        Returns:
            (token, failure). token is None when nothing usable could be
            parsed. A token is returned alongside an expired-only failure.
        """
        secret = self.secrets.secret

        try:
            header = jwt.get_unverified_header(token_string)
            payload = jwt.decode(
                token_string,
                secret,
                algorithms=list(HMAC_ALGORITHMS),
                # Expiry is checked below so it can be reported on its own
                options={"verify_exp": False, "require": ["sub", "jti"]},
            )
        except jwt.InvalidAlgorithmError as e:
            return None, ValidationFailure(bad_algorithm=True, message=f"unexpected signing method: {e}")
        except jwt.InvalidSignatureError:
            return None, ValidationFailure(bad_signature=True, message="signature is invalid")
        except jwt.DecodeError as e:
            return None, ValidationFailure(malformed=True, message=f"token is malformed: {e}")
        except jwt.InvalidTokenError as e:
            return None, ValidationFailure(claims_invalid=True, message=f"invalid claims: {e}")

        try:
            claims = Claims.from_payload(payload)
        except ValidationError as e:
            return None, ValidationFailure(claims_invalid=True, message=f"invalid claims: {e}")

        token = Token(claims=claims, raw=token_string, header=header)
        if claims.is_expired(self._clock()):
            return token, ValidationFailure(expired=True, message="token is expired")

        return token, None

    # =========================================================================
    # Validation
    # =========================================================================

    def validate_token(self, token_string: str) -> Token:
        """
        Verify that the token is well-formed, correctly signed and not expired.

        Raises:
            TokenValidationError: The token is invalid or expired
        """
        token, failure = self._parse_token(token_string)
        if failure is not None:
            logger.debug(f"Rejected token: {failure.message}")
            raise TokenValidationError(failure)
        return token

    def validate_expired_token(self, token_string: str) -> Token:
        """
        Verify that the token is valid, even if it's expired.

        Expiry is the only failure tolerated; a bad signature, malformed
        claims or an unexpected algorithm still fail.

        Raises:
            TokenValidationError: The token is invalid
        """
        token, failure = self._parse_token(token_string)
        if token is None or (failure is not None and failure.is_fatal):
            logger.debug(f"Rejected token: {failure.message}")
            raise TokenValidationError(failure)
        return token

    def validate_access_token(self, token_string: str) -> Token:
        """
        validate_token, additionally rejecting refresh tokens.

        Use this to authenticate requests: a refresh token is only good
        for the refresh exchange.

        Raises:
            TokenValidationError: The token is invalid, expired or not an access token
        """
        token = self.validate_token(token_string)
        if not token.claims.is_access:
            logger.debug("Rejected token: refresh token used as access token")
            raise TokenValidationError(
                ValidationFailure(claims_invalid=True, message="not an access token")
            )
        return token

    # =========================================================================
    # Refresh
    # =========================================================================

    def refresh(self, access_token: str, refresh_token: str) -> TokenPair:
        """
        Exchange a (possibly expired) access token and a refresh token
        for a new token pair.

        Both must be signed by us, be of the right kind (the access token
        expires, the refresh token does not) and be issued to the same
        subject.
        """
        access = self.validate_expired_token(access_token)
        refresh = self.validate_token(refresh_token)

        if not access.claims.is_access or refresh.claims.is_access:
            logger.info(f"Refresh rejected: wrong token kind for {access.claims.subject}")
            raise TokenValidationError(
                ValidationFailure(claims_invalid=True, message="unexpected token type")
            )

        if access.claims.subject != refresh.claims.subject:
            logger.info(
                f"Refresh rejected: subject mismatch "
                f"({access.claims.subject} != {refresh.claims.subject})"
            )
            raise TokenValidationError(
                ValidationFailure(claims_invalid=True, message="token subjects do not match")
            )

        return self.issue_token_pair(access.claims.subject)
