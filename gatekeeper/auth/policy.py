"""
Policy engine - allow/deny decisions over a requester's rule set.

Deny is the default: a request is allowed only if some rule explicitly
grants the permission on the resource type within the requested scope.
"""

from __future__ import annotations

import logging
from typing import Iterable

from gatekeeper.auth.context import RequestContext, get_org_env, get_rules_from_context
from gatekeeper.auth.rules import Permission, Rule, RuleType

logger = logging.getLogger(__name__)


class PolicyEngine:
    """Evaluates rule sets. Stateless; one instance can be shared."""

    def evaluate(
        self,
        rules: Iterable[Rule],
        resource_type: RuleType | str,
        permission: Permission | str,
        organization: str = "",
        environment: str = "",
    ) -> bool:
        """
        Does any rule grant `permission` on `resource_type` within the
        requested organization/environment?
        """
        for rule in rules:
            if (
                rule.resolves(resource_type)
                and rule.grants(permission)
                and rule.covers(organization, environment)
            ):
                return True
        return False


class ResourcePolicy:
    """
    Policy for one resource type, evaluated against a request context.

    Usage:
        policy = ResourcePolicy(RuleType.ORGANIZATIONS)
        if policy.can_read(ctx, organization="acme"):
            ...
    """

    def __init__(self, resource_type: RuleType, engine: PolicyEngine | None = None):
        self.resource_type = resource_type
        self.engine = engine or PolicyEngine()

    def can(
        self,
        ctx: RequestContext,
        permission: Permission,
        organization: str | None = None,
        environment: str | None = None,
    ) -> bool:
        """
        Check a permission. Scope defaults to the org/env bound to the
        request; pass organization/environment to override either.
        """
        ctx_org, ctx_env = get_org_env(ctx)
        organization = ctx_org if organization is None else organization
        environment = ctx_env if environment is None else environment

        allowed = self.engine.evaluate(
            get_rules_from_context(ctx),
            self.resource_type,
            permission,
            organization,
            environment,
        )
        if not allowed:
            logger.info(
                f"Denied {permission.value} on {self.resource_type.value} "
                f"(org={organization!r}, env={environment!r})"
            )
        return allowed

    def can_create(self, ctx: RequestContext, **scope: str) -> bool:
        return self.can(ctx, Permission.CREATE, **scope)

    def can_read(self, ctx: RequestContext, **scope: str) -> bool:
        return self.can(ctx, Permission.READ, **scope)

    def can_update(self, ctx: RequestContext, **scope: str) -> bool:
        return self.can(ctx, Permission.UPDATE, **scope)

    def can_delete(self, ctx: RequestContext, **scope: str) -> bool:
        return self.can(ctx, Permission.DELETE, **scope)
