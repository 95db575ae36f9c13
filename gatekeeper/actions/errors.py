"""
Errors returned by action controllers.

Every controller method either succeeds or raises an ActionError whose
code is one of the ErrorCode members below. Store failures never
escape raw; they are always wrapped.
"""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Closed set of outcomes a controller can report."""

    INTERNAL_ERR = 1
    INVALID_ARGUMENT = 2
    NOT_FOUND = 3
    ALREADY_EXISTS_ERR = 4
    PERMISSION_DENIED = 5


class ActionError(Exception):
    """A typed controller failure wrapping its underlying cause."""

    def __init__(self, code: ErrorCode, cause: BaseException | None = None):
        self.code = code
        self.cause = cause
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.cause is None or not str(self.cause):
            return self.code.name.lower()
        return str(self.cause)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActionError):
            return NotImplemented
        return self.code == other.code and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.code, self.message))

    def __repr__(self) -> str:
        return f"ActionError({self.code.name}, {self.message!r})"


def new_error(code: ErrorCode, cause: BaseException | str | None = None) -> ActionError:
    """
    Build an ActionError.

    Usage:
        raise new_error(ErrorCode.NOT_FOUND)
        raise new_error(ErrorCode.INVALID_ARGUMENT, "name cannot be empty")
        raise new_error(ErrorCode.INTERNAL_ERR, e) from e
    """
    if isinstance(cause, str):
        cause = Exception(cause)
    return ActionError(code, cause)
