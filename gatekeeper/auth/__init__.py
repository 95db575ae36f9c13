"""
Authentication and authorization core.

Design principles:
1. Tokens are verified against a pinned algorithm family, never the header
2. One signing secret per process, bootstrapped exactly once
3. Deny by default: access needs an explicit rule
4. Claims travel in an immutable request context under private keys
"""

from gatekeeper.auth.context import (
    RequestContext,
    extract_bearer_token,
    get_claims_from_context,
    get_org_env,
    get_rules_from_context,
    set_claims_into_context,
    with_org_env,
    with_rules,
)
from gatekeeper.auth.errors import (
    SecretBootstrapError,
    SecretNotInitializedError,
    TokenError,
    TokenValidationError,
    ValidationFailure,
)
from gatekeeper.auth.jwt import (
    Claims,
    Token,
    TokenCodec,
    TokenPair,
    get_claims,
)
from gatekeeper.auth.policy import PolicyEngine, ResourcePolicy
from gatekeeper.auth.roles import Role, RoleBindings, load_role_bindings
from gatekeeper.auth.rules import Permission, Rule, RuleType
from gatekeeper.auth.secret import SecretManager

__all__ = [
    # Context
    "RequestContext",
    "extract_bearer_token",
    "get_claims_from_context",
    "get_org_env",
    "get_rules_from_context",
    "set_claims_into_context",
    "with_org_env",
    "with_rules",
    # Errors
    "SecretBootstrapError",
    "SecretNotInitializedError",
    "TokenError",
    "TokenValidationError",
    "ValidationFailure",
    # JWT
    "Claims",
    "Token",
    "TokenCodec",
    "TokenPair",
    "get_claims",
    "SecretManager",
    # Policy
    "PolicyEngine",
    "ResourcePolicy",
    "Permission",
    "Rule",
    "RuleType",
    "Role",
    "RoleBindings",
    "load_role_bindings",
]
