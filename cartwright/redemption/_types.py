"""
Redemption types — core data structures.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto

from cartwright._types import Amount


def redemption_key(tenant: str, promotion_id: str, order_id: str) -> str:
    """Uniqueness key: one redemption per (tenant, promotion, order)."""
    return f"{tenant}:{promotion_id}:{order_id}"


# ═══════════════════════════════════════════════════════════════════════════════
# Redemption — Stored Row
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Redemption:
    """
    A promotion applied to an order.

    Created once at checkout, never mutated or deleted.
    """

    id: str
    tenant: str
    promotion_id: str
    order_id: str
    amount: Amount
    currency: str
    user_id: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class NewRedemption:
    """Data for a redemption that is about to be inserted."""

    tenant: str
    promotion_id: str
    order_id: str
    amount: Amount
    currency: str
    user_id: str | None = None

    @property
    def key(self) -> str:
        return redemption_key(self.tenant, self.promotion_id, self.order_id)


@dataclass(frozen=True, slots=True)
class Limits:
    """Usage limits the store enforces on a guarded insert."""

    usage_limit: int | None = None
    per_user_limit: int | None = None

    @property
    def is_unbounded(self) -> bool:
        return self.usage_limit is None and self.per_user_limit is None


# ═══════════════════════════════════════════════════════════════════════════════
# Insert Outcome — what the store did
# ═══════════════════════════════════════════════════════════════════════════════


class InsertState(Enum):
    """
    Result of an insert attempt.

    Lifecycle:
        CREATED → new row
        DUPLICATE → row already existed for the key, returned as-is
        LIMIT_REACHED / PER_USER_LIMIT_REACHED → guarded insert refused
    """

    CREATED = auto()
    DUPLICATE = auto()
    LIMIT_REACHED = auto()
    PER_USER_LIMIT_REACHED = auto()


@dataclass(frozen=True, slots=True)
class InsertOutcome:
    state: InsertState
    redemption: Redemption | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Result Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RedeemOutcome:
    """
    Successful redemption with metadata.

    Note: duplicate=True means an earlier call already recorded this
    (promotion, order); the stored row is returned unchanged.
    """

    redemption: Redemption
    duplicate: bool


class RedemptionErrorKind(Enum):
    NOT_FOUND = "notFound"
    NOT_PUBLISHED = "notPublished"
    FIRST_ORDER_ONLY = "redeemFirstOrderOnly"
    LIMIT_REACHED = "limitReached"
    PER_USER_LIMIT_REACHED = "perUserLimitReached"
    STORE_ERROR = "storeError"


@dataclass(frozen=True, slots=True)
class RedemptionError:
    kind: RedemptionErrorKind
    message: str
    cause: Exception | None = None

    @property
    def code(self) -> str:
        return self.kind.value


__all__ = (
    "redemption_key",
    "Redemption",
    "NewRedemption",
    "Limits",
    "InsertState",
    "InsertOutcome",
    "RedeemOutcome",
    "RedemptionErrorKind",
    "RedemptionError",
)
