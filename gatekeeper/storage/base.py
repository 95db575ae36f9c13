"""
Storage abstraction layer.

All persistence goes through these interfaces. The durable store
(etcd, PostgreSQL, ...) lives outside this package; gatekeeper only
consumes the contract below.

Conventions:
- Lookups by name return None for an absent record (not an exception)
- Any raised exception is a technical failure of the store
- update_* has upsert semantics keyed by the record name
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from gatekeeper.core.models import Organization


# =============================================================================
# Storage Interfaces
# =============================================================================


class SecretStore(ABC):
    """
    Durable storage for the token signing secret.
    """

    @abstractmethod
    async def get_jwt_secret(self) -> bytes:
        """Return the signing secret. Raises if it does not exist."""
        pass

    @abstractmethod
    async def create_jwt_secret(self, secret: bytes) -> None:
        """Persist the signing secret."""
        pass


class OrganizationStore(ABC):
    """
    Storage for organizations.
    """

    @abstractmethod
    async def get_organization_by_name(self, name: str) -> Organization | None:
        """Get an organization by name, None if absent."""
        pass

    @abstractmethod
    async def get_organizations(self) -> list[Organization]:
        """List all organizations."""
        pass

    @abstractmethod
    async def update_organization(self, org: Organization) -> None:
        """Create or replace an organization."""
        pass

    @abstractmethod
    async def delete_organization_by_name(self, name: str) -> None:
        """Delete an organization."""
        pass


class Store(SecretStore, OrganizationStore, ABC):
    """Everything gatekeeper needs from the durable store."""
