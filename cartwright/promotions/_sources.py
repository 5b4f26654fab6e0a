"""
Promotion collaborators — promotion sets, order counts, usage counts.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Protocol

from kungfu import Result

from cartwright.promotions._types import Promotion

# ═══════════════════════════════════════════════════════════════════════════════
# Protocols — Users Implement These
# ═══════════════════════════════════════════════════════════════════════════════


class PromotionSource(Protocol):
    async def list_active_promotions(self, tenant: str) -> list[Promotion]:
        """Tenant promotions that are active and published (others are tolerated)."""
        ...


class OrderCounter(Protocol):
    async def count_orders(self, tenant: str, user_id: str) -> int:
        """Number of orders the user already placed with the tenant."""
        ...


class UsageCounter(Protocol):
    """
    Redemption counts for usage limits.

    Implemented by RedemptionLedger; counts are point-in-time.
    """

    async def count_total(self, promotion_id: str) -> Result[int, Any]:
        ...

    async def count_for_user(self, promotion_id: str, user_id: str) -> Result[int, Any]:
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory implementations — For Testing
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryPromotions:
    """In-memory promotion set, keyed by tenant."""

    def __init__(self, *promotions: Promotion) -> None:
        self._promotions: list[Promotion] = list(promotions)

    def add(self, promotion: Promotion) -> MemoryPromotions:
        self._promotions.append(promotion)
        return self

    async def list_active_promotions(self, tenant: str) -> list[Promotion]:
        return [
            p for p in self._promotions
            if p.tenant == tenant and p.is_active and p.is_published
        ]


class MemoryOrders:
    """In-memory order counts per (tenant, user)."""

    def __init__(self) -> None:
        self._counts: Counter[tuple[str, str]] = Counter()

    def record(self, tenant: str, user_id: str, count: int = 1) -> MemoryOrders:
        self._counts[(tenant, user_id)] += count
        return self

    async def count_orders(self, tenant: str, user_id: str) -> int:
        return self._counts[(tenant, user_id)]


__all__ = (
    "PromotionSource",
    "OrderCounter",
    "UsageCounter",
    "MemoryPromotions",
    "MemoryOrders",
)
