"""
Token layer exceptions.

These are returned to the transport layer as-is; it decides how to
present them (typically a 401). Nothing here carries an HTTP status.
"""

from __future__ import annotations

from dataclasses import dataclass


class TokenError(Exception):
    """Base exception for token errors."""
    pass


class SecretNotInitializedError(TokenError):
    """The signing secret was used before init_secret() completed."""
    pass


class SecretBootstrapError(TokenError):
    """The signing secret could not be generated or persisted."""
    pass


@dataclass(frozen=True)
class ValidationFailure:
    """
    Why a token was rejected.

    Each flag is independent: a token can be both expired and badly
    signed. Only `expired` may ever be tolerated (refresh flow).
    """

    expired: bool = False
    malformed: bool = False
    bad_signature: bool = False
    bad_algorithm: bool = False
    claims_invalid: bool = False
    message: str = ""

    @property
    def is_fatal(self) -> bool:
        """True if anything other than expiry is wrong."""
        return (
            self.malformed
            or self.bad_signature
            or self.bad_algorithm
            or self.claims_invalid
        )


class TokenValidationError(TokenError):
    """A token failed parsing, verification, or expiry checks."""

    def __init__(self, failure: ValidationFailure):
        super().__init__(failure.message or "invalid token")
        self.failure = failure

    @property
    def expired(self) -> bool:
        return self.failure.expired
