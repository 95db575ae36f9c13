"""
Storage abstractions.

The durable store is an external collaborator; this package defines
the contract gatekeeper consumes and an in-memory implementation.
"""

from gatekeeper.storage.base import (
    OrganizationStore,
    SecretStore,
    Store,
)
from gatekeeper.storage.local import InMemoryStore, create_local_store

__all__ = [
    "OrganizationStore",
    "SecretStore",
    "Store",
    "InMemoryStore",
    "create_local_store",
]
