"""
Base class for action controllers.

A controller mediates every operation on one resource type:
permission check, input validation, store call, error mapping.
Subclasses only describe the resource (its key, validation, scope)
and how to reach it in the store.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Generic, TypeVar

from gatekeeper.actions.errors import ErrorCode, new_error
from gatekeeper.auth.context import RequestContext
from gatekeeper.auth.policy import ResourcePolicy
from gatekeeper.auth.rules import RuleType
from gatekeeper.config import Settings, get_settings

logger = logging.getLogger(__name__)

R = TypeVar("R")
T = TypeVar("T")


class ActionController(ABC, Generic[R]):
    """
    Generic CRUD-with-authorization controller.

    Ordering is the same for every resource type:
    - create/update/destroy check permission before anything else and
      report PERMISSION_DENIED
    - find reports a permission failure as NOT_FOUND, so unauthorized
      callers cannot learn whether a record exists
    - query filters the listing down to readable records

    Example:
        class ChecksController(ActionController[Check]):
            resource_type = RuleType.CHECKS

            def key(self, record): return record.name
            def validate(self, record): record.validate_fields()
            async def fetch(self, name): return await self.store.get_check_by_name(name)
            ...
    """

    resource_type: RuleType

    def __init__(
        self,
        store: Any,
        policy: ResourcePolicy | None = None,
        settings: Settings | None = None,
    ):
        self.store = store
        self.policy = policy or ResourcePolicy(self.resource_type)
        self.settings = settings or get_settings()

    # =========================================================================
    # Resource description
    # =========================================================================

    @abstractmethod
    def key(self, record: R) -> str:
        """The record's identity (its name)."""
        pass

    @abstractmethod
    def validate(self, record: R) -> None:
        """Raise ValueError if the record contains invalid values."""
        pass

    def scope(self, ctx: RequestContext, name: str) -> dict[str, str]:
        """
        Organization/environment a record lives in, as keyword arguments
        for the policy. Empty means "use the scope bound to the request".
        """
        return {}

    # =========================================================================
    # Store access
    # =========================================================================

    @abstractmethod
    async def fetch_all(self) -> list[R]:
        pass

    @abstractmethod
    async def fetch(self, name: str) -> R | None:
        """Return the record, or None if it does not exist."""
        pass

    @abstractmethod
    async def persist(self, record: R) -> None:
        """Create or replace the record."""
        pass

    @abstractmethod
    async def remove(self, name: str) -> None:
        pass

    async def _call(self, ctx: RequestContext, operation: Awaitable[T]) -> T:
        """Run one store round-trip, bounded by the request deadline."""
        timeouts = [t for t in (ctx.remaining(), self.settings.store_timeout) if t is not None]
        return await asyncio.wait_for(operation, timeout=min(timeouts) if timeouts else None)

    def _internal(self, operation: str, error: Exception):
        logger.error(f"Store failure during {self.resource_type.value} {operation}: {error!r}")
        return new_error(ErrorCode.INTERNAL_ERR, error)

    # =========================================================================
    # Actions
    # =========================================================================

    async def query(self, ctx: RequestContext) -> list[R]:
        """List the records the caller may read."""
        try:
            records = await self._call(ctx, self.fetch_all())
        except Exception as e:
            raise self._internal("query", e) from e

        return [
            record for record in records or []
            if self.policy.can_read(ctx, **self.scope(ctx, self.key(record)))
        ]

    async def find(self, ctx: RequestContext, name: str) -> R:
        """Fetch one record by name."""
        if not name:
            raise new_error(ErrorCode.NOT_FOUND)

        if not self.policy.can_read(ctx, **self.scope(ctx, name)):
            raise new_error(ErrorCode.NOT_FOUND)

        try:
            record = await self._call(ctx, self.fetch(name))
        except Exception as e:
            raise self._internal("find", e) from e

        if record is None:
            raise new_error(ErrorCode.NOT_FOUND)
        return record

    async def create(self, ctx: RequestContext, record: R) -> None:
        """Create a record that does not exist yet."""
        name = self.key(record)
        if not self.policy.can_create(ctx, **self.scope(ctx, name)):
            raise new_error(ErrorCode.PERMISSION_DENIED)

        try:
            self.validate(record)
        except ValueError as e:
            raise new_error(ErrorCode.INVALID_ARGUMENT, e) from e

        try:
            existing = await self._call(ctx, self.fetch(name))
        except Exception as e:
            raise self._internal("create", e) from e

        if existing is not None:
            raise new_error(ErrorCode.ALREADY_EXISTS_ERR)

        try:
            await self._call(ctx, self.persist(record))
        except Exception as e:
            raise self._internal("create", e) from e

    async def update(self, ctx: RequestContext, record: R) -> None:
        """Replace an existing record."""
        name = self.key(record)
        if not self.policy.can_update(ctx, **self.scope(ctx, name)):
            raise new_error(ErrorCode.PERMISSION_DENIED)

        try:
            self.validate(record)
        except ValueError as e:
            raise new_error(ErrorCode.INVALID_ARGUMENT, e) from e

        try:
            existing = await self._call(ctx, self.fetch(name))
        except Exception as e:
            raise self._internal("update", e) from e

        if existing is None:
            raise new_error(ErrorCode.NOT_FOUND)

        try:
            await self._call(ctx, self.persist(record))
        except Exception as e:
            raise self._internal("update", e) from e

    async def destroy(self, ctx: RequestContext, name: str) -> None:
        """Delete an existing record."""
        if not self.policy.can_delete(ctx, **self.scope(ctx, name)):
            raise new_error(ErrorCode.PERMISSION_DENIED)

        try:
            existing = await self._call(ctx, self.fetch(name))
        except Exception as e:
            raise self._internal("destroy", e) from e

        if existing is None:
            raise new_error(ErrorCode.NOT_FOUND)

        try:
            await self._call(ctx, self.remove(name))
        except Exception as e:
            raise self._internal("destroy", e) from e
