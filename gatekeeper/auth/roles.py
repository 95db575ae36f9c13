"""
Roles and role bindings.

A requester's rule set is the union of the rules of every role bound
to their username. Bindings can be loaded from a YAML file:

    roles:
      - name: org-admin
        rules:
          - type: organizations
            permissions: [create, read, update, delete]
    bindings:
      alice: [org-admin]
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from gatekeeper.auth.rules import Rule

logger = logging.getLogger(__name__)


class RoleBindingError(Exception):
    """Raised when role bindings are inconsistent."""
    pass


class Role(BaseModel):
    """A named set of rules."""

    name: str = Field(min_length=1)
    rules: list[Rule] = Field(default_factory=list)


class RoleBindings:
    """
    Maps usernames to roles.

    Unknown users and unbound roles resolve to an empty rule set,
    which the policy engine denies.
    """

    def __init__(self):
        self._roles: dict[str, Role] = {}
        self._bindings: dict[str, set[str]] = {}

    def add_role(self, role: Role) -> None:
        if role.name in self._roles:
            raise RoleBindingError(f"Role '{role.name}' is already defined")
        self._roles[role.name] = role

    def get_role(self, name: str) -> Role | None:
        return self._roles.get(name)

    def list_roles(self) -> list[str]:
        """List all defined role names."""
        return list(self._roles.keys())

    def bind(self, username: str, *role_names: str) -> None:
        """Bind roles to a user. Roles must already exist."""
        for name in role_names:
            if name not in self._roles:
                raise RoleBindingError(f"Role '{name}' not found")
        self._bindings.setdefault(username, set()).update(role_names)

    def roles_for(self, username: str) -> list[Role]:
        names = sorted(self._bindings.get(username, ()))
        return [self._roles[name] for name in names]

    def rules_for(self, username: str) -> list[Rule]:
        """Union of the rules of all roles bound to the user."""
        rules: list[Rule] = []
        seen: set[Rule] = set()
        for role in self.roles_for(username):
            for rule in role.rules:
                if rule not in seen:
                    seen.add(rule)
                    rules.append(rule)
        return rules

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoleBindings:
        bindings = cls()
        for role_data in data.get("roles") or []:
            bindings.add_role(Role.model_validate(role_data))
        for username, role_names in (data.get("bindings") or {}).items():
            bindings.bind(username, *role_names)
        return bindings


def load_role_bindings(path: Path | str) -> RoleBindings:
    """Load role bindings from YAML."""
    path = Path(path)
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    bindings = RoleBindings.from_dict(data)
    logger.info(f"Loaded {len(bindings.list_roles())} roles from {path}")
    return bindings
