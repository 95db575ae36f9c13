"""
Rules, resource types and permissions.

This defines WHAT a requester may do, not HOW we check it.
The actual checking happens in policy.py.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


WILDCARD = "*"


class RuleType(str, Enum):
    """Resource types a rule can grant access to."""

    ASSETS = "assets"
    CHECKS = "checks"
    ENTITIES = "entities"
    ENVIRONMENTS = "environments"
    EVENTS = "events"
    HANDLERS = "handlers"
    HOOKS = "hooks"
    MUTATORS = "mutators"
    ORGANIZATIONS = "organizations"
    ROLES = "roles"
    SILENCED = "silenced"
    USERS = "users"


class Permission(str, Enum):
    """What a rule allows on its resource type."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class Rule(BaseModel):
    """
    A grant of permissions over one resource type.

    organization/environment scope the grant; "*" covers every value.
    """

    model_config = ConfigDict(frozen=True)

    type: RuleType
    permissions: frozenset[Permission] = frozenset()
    organization: str = WILDCARD
    environment: str = WILDCARD

    def resolves(self, resource_type: RuleType | str) -> bool:
        """Does this rule apply to the resource type? Exact match only."""
        return self.type.value == _value(resource_type)

    def grants(self, permission: Permission | str) -> bool:
        return any(p.value == _value(permission) for p in self.permissions)

    def covers(self, organization: str, environment: str) -> bool:
        """Is the requested scope within this rule's scope?"""
        return _covers(self.organization, organization) and _covers(self.environment, environment)


def _value(item: Enum | str) -> str:
    return item.value if isinstance(item, Enum) else item


def _covers(granted: str, requested: str) -> bool:
    # Only the wildcard covers an unscoped request
    return granted == WILDCARD or (bool(requested) and granted == requested)
