"""
Organizations controller.

Organizations are scoped by their own name: a rule limited to
organization "acme" only lets its holder see or change "acme".
"""

from __future__ import annotations

from gatekeeper.actions.controller import ActionController
from gatekeeper.auth.context import RequestContext
from gatekeeper.auth.policy import ResourcePolicy
from gatekeeper.auth.rules import RuleType
from gatekeeper.config import Settings
from gatekeeper.core.models import Organization
from gatekeeper.storage.base import OrganizationStore


class OrganizationsController(ActionController[Organization]):
    """Exposes actions in which a viewer can perform on organizations."""

    resource_type = RuleType.ORGANIZATIONS

    def __init__(
        self,
        store: OrganizationStore,
        policy: ResourcePolicy | None = None,
        settings: Settings | None = None,
    ):
        super().__init__(store, policy, settings)

    def key(self, record: Organization) -> str:
        return record.name

    def validate(self, record: Organization) -> None:
        record.validate_fields()

    def scope(self, ctx: RequestContext, name: str) -> dict[str, str]:
        return {"organization": name, "environment": ""}

    async def fetch_all(self) -> list[Organization]:
        return await self.store.get_organizations()

    async def fetch(self, name: str) -> Organization | None:
        return await self.store.get_organization_by_name(name)

    async def persist(self, record: Organization) -> None:
        await self.store.update_organization(record)

    async def remove(self, name: str) -> None:
        await self.store.delete_organization_by_name(name)
