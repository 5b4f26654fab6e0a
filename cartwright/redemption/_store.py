"""
Redemption store — typed storage protocol.

All methods return Result for explicit error handling.
Insert is insert-if-absent on (tenant, promotion_id, order_id).
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

from kungfu import Result, Ok

from cartwright._config import Clock, utc_now
from cartwright.redemption._types import (
    InsertOutcome,
    InsertState,
    Limits,
    NewRedemption,
    Redemption,
)


def new_redemption_id() -> str:
    return uuid4().hex


# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StoreError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol — Result-based
# ═══════════════════════════════════════════════════════════════════════════════


class RedemptionStore(Protocol):
    """
    Redemption store protocol.

    Example — wrapping an existing repository:

        class MongoRedemptions:
            async def insert(self, new, limits=None):
                try:
                    doc = await self.coll.insert_one(...)
                    return Ok(InsertOutcome(InsertState.CREATED, to_row(doc)))
                except DuplicateKeyError:
                    existing = await self.coll.find_one(...)
                    return Ok(InsertOutcome(InsertState.DUPLICATE, to_row(existing)))
                except Exception as e:
                    return Error(StoreError("Failed to insert", e))

            # ... other methods
    """

    async def insert(
        self,
        new: NewRedemption,
        limits: Limits | None = None,
    ) -> Result[InsertOutcome, StoreError]:
        """
        Insert unless a row exists for the key.

        With limits, counting and inserting happen in one critical section
        and the insert is refused once a limit is reached. An existing row
        for the key always wins over a refusal.
        """
        ...

    async def get(
        self,
        tenant: str,
        promotion_id: str,
        order_id: str,
    ) -> Result[Redemption | None, StoreError]:
        """Get existing row. Returns Ok(None) if not found."""
        ...

    async def count(
        self,
        tenant: str,
        promotion_id: str,
        user_id: str | None = None,
    ) -> Result[int, StoreError]:
        """Rows for the promotion, optionally only those of one user."""
        ...


def refusal(limits: Limits | None, total: int, used_by_user: int) -> InsertState | None:
    """Which limit an insert would exceed, given current counts."""
    if limits is None:
        return None
    if limits.usage_limit is not None and total >= limits.usage_limit:
        return InsertState.LIMIT_REACHED
    if limits.per_user_limit is not None and used_by_user >= limits.per_user_limit:
        return InsertState.PER_USER_LIMIT_REACHED
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Store — For Testing
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryRedemptionStore:
    """
    In-memory redemption store.

    Note: single process only; rows do not survive a restart.
    The lock makes guarded inserts atomic within the event loop.
    """

    def __init__(
        self,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] = new_redemption_id,
    ) -> None:
        self._rows: dict[tuple[str, str, str], Redemption] = {}
        self._lock = asyncio.Lock()
        self._clock = clock
        self._id_factory = id_factory

    def _count_unlocked(self, tenant: str, promotion_id: str, user_id: str | None) -> int:
        return sum(
            1 for row in self._rows.values()
            if row.tenant == tenant
            and row.promotion_id == promotion_id
            and (user_id is None or row.user_id == user_id)
        )

    async def insert(
        self,
        new: NewRedemption,
        limits: Limits | None = None,
    ) -> Result[InsertOutcome, StoreError]:
        key = (new.tenant, new.promotion_id, new.order_id)
        async with self._lock:
            existing = self._rows.get(key)
            if existing is not None:
                return Ok(InsertOutcome(InsertState.DUPLICATE, existing))

            if limits is not None and not limits.is_unbounded:
                total = self._count_unlocked(new.tenant, new.promotion_id, None)
                used = (
                    self._count_unlocked(new.tenant, new.promotion_id, new.user_id)
                    if new.user_id else 0
                )
                if (refused := refusal(limits, total, used)) is not None:
                    return Ok(InsertOutcome(refused))

            row = Redemption(
                id=self._id_factory(),
                tenant=new.tenant,
                promotion_id=new.promotion_id,
                order_id=new.order_id,
                amount=new.amount,
                currency=new.currency,
                user_id=new.user_id,
                created_at=self._clock(),
            )
            self._rows[key] = row
            return Ok(InsertOutcome(InsertState.CREATED, row))

    async def get(
        self,
        tenant: str,
        promotion_id: str,
        order_id: str,
    ) -> Result[Redemption | None, StoreError]:
        async with self._lock:
            return Ok(self._rows.get((tenant, promotion_id, order_id)))

    async def count(
        self,
        tenant: str,
        promotion_id: str,
        user_id: str | None = None,
    ) -> Result[int, StoreError]:
        async with self._lock:
            return Ok(self._count_unlocked(tenant, promotion_id, user_id))


__all__ = (
    "new_redemption_id",
    "StoreError",
    "RedemptionStore",
    "refusal",
    "MemoryRedemptionStore",
)
