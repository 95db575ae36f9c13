"""
Local storage implementation for development.

An in-memory store that works without any external services.
"""

from __future__ import annotations

from gatekeeper.core.models import Organization
from gatekeeper.storage.base import Store


class InMemoryStore(Store):
    """In-memory store for development and tests."""

    def __init__(self):
        self._secret: bytes | None = None
        self._organizations: dict[str, Organization] = {}

    # =========================================================================
    # Secret
    # =========================================================================

    async def get_jwt_secret(self) -> bytes:
        if self._secret is None:
            raise KeyError("jwt secret not found")
        return self._secret

    async def create_jwt_secret(self, secret: bytes) -> None:
        self._secret = secret

    # =========================================================================
    # Organizations
    # =========================================================================

    async def get_organization_by_name(self, name: str) -> Organization | None:
        org = self._organizations.get(name)
        return org.model_copy() if org else None

    async def get_organizations(self) -> list[Organization]:
        return [org.model_copy() for org in self._organizations.values()]

    async def update_organization(self, org: Organization) -> None:
        self._organizations[org.name] = org.model_copy()

    async def delete_organization_by_name(self, name: str) -> None:
        self._organizations.pop(name, None)


def create_local_store() -> InMemoryStore:
    """Create an empty in-memory store."""
    return InMemoryStore()
