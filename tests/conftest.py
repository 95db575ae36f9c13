"""
Shared fixtures.
"""

from __future__ import annotations

import asyncio

import pytest

from gatekeeper.auth.context import RequestContext, with_org_env, with_rules
from gatekeeper.auth.jwt import TokenCodec
from gatekeeper.auth.rules import Permission, Rule, RuleType
from gatekeeper.auth.secret import SecretManager
from gatekeeper.config import Settings
from gatekeeper.storage.local import InMemoryStore


def fixture_rule_with_perms(rule_type: RuleType, *perms: Permission) -> Rule:
    """A rule over every organization and environment."""
    return Rule(type=rule_type, permissions=frozenset(perms))


def new_context(*rules: Rule, org: str = "default", env: str = "default") -> RequestContext:
    """A request context with an org/env and a rule set bound."""
    return with_rules(with_org_env(RequestContext(), org, env), rules)


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def secrets(settings, store):
    """A secret manager with its secret bootstrapped."""
    manager = SecretManager(settings)
    asyncio.run(manager.init_secret(store))
    return manager


@pytest.fixture
def codec(secrets, settings):
    return TokenCodec(secrets, settings)
