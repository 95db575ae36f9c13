"""
Signing secret management.

The secret is process-wide state: read from the store on first use,
generated and persisted if absent, then held in memory for the life of
the process. It is never rotated automatically; rotating it (or losing
it) invalidates every token issued so far.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from gatekeeper.auth.errors import SecretBootstrapError, SecretNotInitializedError
from gatekeeper.config import Settings, get_settings
from gatekeeper.core.utils import random_bytes
from gatekeeper.storage.base import SecretStore

logger = logging.getLogger(__name__)


class SecretManager:
    """
    Owns the signing secret.

    init_secret() is safe to call from many concurrent requests: the
    fetch-or-create sequence runs under a lock, so only one caller ever
    creates and persists a secret. Readers see either no secret or the
    committed one, never a partial value.

    Usage:
        secrets = SecretManager()
        await secrets.init_secret(store)  # at startup
        key = secrets.secret
    """

    def __init__(
        self,
        settings: Settings | None = None,
        generate: Callable[[int], bytes] = random_bytes,
    ):
        self.settings = settings or get_settings()
        self._generate = generate
        self._secret: bytes | None = None
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._secret is not None

    @property
    def secret(self) -> bytes:
        """The committed secret."""
        secret = self._secret
        if secret is None:
            raise SecretNotInitializedError("signing secret is not initialized")
        return secret

    async def init_secret(self, store: SecretStore) -> None:
        """
        Retrieve the signing secret, creating it if the store has none.

        Idempotent: once a secret is committed, later calls return
        immediately and never touch the store.

        Raises:
            SecretBootstrapError: Generating or persisting a new secret failed
        """
        if self._secret is not None:
            return

        async with self._lock:
            # Another caller may have committed while we waited
            if self._secret is not None:
                return

            secret = await self._fetch(store)
            if secret is None:
                secret = await self._create(store)

            self._secret = secret

    async def _fetch(self, store: SecretStore) -> bytes | None:
        try:
            secret = await asyncio.wait_for(
                store.get_jwt_secret(), timeout=self.settings.store_timeout
            )
        except Exception as e:
            # Any failure here means "no secret yet"
            logger.info(f"No signing secret in store ({e!r}), creating one")
            return None

        if not secret:
            logger.warning("Store returned an empty signing secret, creating one")
            return None

        logger.info("Signing secret loaded from store")
        return bytes(secret)

    async def _create(self, store: SecretStore) -> bytes:
        try:
            secret = self._generate(self.settings.secret_length)
        except Exception as e:
            raise SecretBootstrapError(f"could not generate signing secret: {e}") from e

        try:
            await asyncio.wait_for(
                store.create_jwt_secret(secret), timeout=self.settings.store_timeout
            )
        except Exception as e:
            logger.error(f"Failed to persist signing secret: {e!r}")
            raise SecretBootstrapError(f"could not persist signing secret: {e}") from e

        logger.info("Signing secret created")
        return secret
