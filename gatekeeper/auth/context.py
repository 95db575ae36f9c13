"""
Request context - the "who is asking, and for what" of each request.

A RequestContext is an immutable, request-scoped carrier. Values are
stored under private key objects that compare by identity, so nothing
outside this module can read or overwrite them by accident.
"""

from __future__ import annotations

import time
from typing import Any, Iterable, Mapping

from gatekeeper.auth.jwt import Claims, Token
from gatekeeper.auth.rules import Rule


class _ContextKey:
    """Opaque key for context values."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"<context key {self.name}>"


_CLAIMS_KEY = _ContextKey("claims")
_RULES_KEY = _ContextKey("rules")
_ORGANIZATION_KEY = _ContextKey("organization")
_ENVIRONMENT_KEY = _ContextKey("environment")


class RequestContext:
    """
    Carrier for request-scoped values.

    with_value() and with_timeout() return a new context; the original
    is never modified, so a context can be shared freely between tasks.

    Usage:
        ctx = RequestContext().with_timeout(5)
        ctx = set_claims_into_context(ctx, token)
        claims = get_claims_from_context(ctx)
    """

    __slots__ = ("_values", "_deadline")

    def __init__(
        self,
        values: Mapping[Any, Any] | None = None,
        deadline: float | None = None,
    ):
        self._values = dict(values or {})
        self._deadline = deadline

    def with_value(self, key: Any, value: Any) -> RequestContext:
        values = dict(self._values)
        values[key] = value
        return RequestContext(values, self._deadline)

    def value(self, key: Any, default: Any = None) -> Any:
        return self._values.get(key, default)

    def with_timeout(self, seconds: float) -> RequestContext:
        """Bound every store round-trip made on behalf of this request."""
        deadline = time.monotonic() + seconds
        if self._deadline is not None:
            deadline = min(deadline, self._deadline)
        return RequestContext(self._values, deadline)

    def remaining(self) -> float | None:
        """Seconds left before the deadline, None if unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def __repr__(self) -> str:
        keys = ", ".join(getattr(k, "name", repr(k)) for k in self._values)
        return f"<RequestContext({keys})>"


# =============================================================================
# Claims
# =============================================================================


def set_claims_into_context(ctx: RequestContext, token: Token) -> RequestContext:
    """Add the token claims into the request context for easier consumption later."""
    return ctx.with_value(_CLAIMS_KEY, token.claims)


def get_claims_from_context(ctx: RequestContext) -> Claims | None:
    """
    Retrieve the claims from the request context.

    Returns None when no claims were bound; callers treat that as an
    unauthenticated request.
    """
    claims = ctx.value(_CLAIMS_KEY)
    if not isinstance(claims, Claims):
        return None
    return claims


def extract_bearer_token(request: Any) -> str:
    """
    Retrieve the bearer token from the request's Authorization header.

    Returns an empty string if the header is absent. The token itself
    is not validated here.
    """
    header = request.headers.get("Authorization")
    if not header:
        return ""
    return header.removeprefix("Bearer ")


# =============================================================================
# Policy subject
# =============================================================================


def with_rules(ctx: RequestContext, rules: Iterable[Rule]) -> RequestContext:
    """Bind the requester's rule set."""
    return ctx.with_value(_RULES_KEY, tuple(rules))


def get_rules_from_context(ctx: RequestContext) -> tuple[Rule, ...]:
    """The requester's rule set; empty if none was bound."""
    rules = ctx.value(_RULES_KEY)
    if not isinstance(rules, tuple):
        return ()
    return rules


def with_org_env(ctx: RequestContext, organization: str, environment: str) -> RequestContext:
    """Bind the organization and environment the request targets."""
    return ctx.with_value(_ORGANIZATION_KEY, organization).with_value(_ENVIRONMENT_KEY, environment)


def get_org_env(ctx: RequestContext) -> tuple[str, str]:
    """The (organization, environment) the request targets; empty if unset."""
    return ctx.value(_ORGANIZATION_KEY, ""), ctx.value(_ENVIRONMENT_KEY, "")
