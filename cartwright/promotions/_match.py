"""
Promotion matching — eligibility gates over a cart.

Gates, in order:
    ACTIVE → WINDOW → SCOPE → MIN_ORDER → FIRST_ORDER → USAGE_LIMIT → PER_USER_LIMIT

A promotion failing any gate is excluded; it is never partially applied.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from enum import Enum, auto

from kungfu import Result, Ok, Error
from combinators import lift as L

from cartwright._config import as_utc
from cartwright._types import LookupFailure
from cartwright.promotions._sources import OrderCounter, UsageCounter
from cartwright.promotions._types import CartItem, CartSnapshot, ItemScope, Promotion

logger = logging.getLogger(__name__)


class Gate(Enum):
    """Eligibility gate a promotion failed."""

    ACTIVE = auto()
    WINDOW = auto()
    SCOPE = auto()
    MIN_ORDER = auto()
    FIRST_ORDER = auto()
    USAGE_LIMIT = auto()
    PER_USER_LIMIT = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Pure gates
# ═══════════════════════════════════════════════════════════════════════════════


def in_window(promotion: Promotion, now: datetime) -> bool:
    rules = promotion.rules
    now = as_utc(now)
    if rules.starts_at is not None and now < as_utc(rules.starts_at):
        return False
    if rules.ends_at is not None and now > as_utc(rules.ends_at):
        return False
    return True


def item_in_scope(item: CartItem, scope: ItemScope) -> bool:
    return scope.matches(item.item_id, item.category_id)


def cart_matches_scope(promotion: Promotion, cart: CartSnapshot) -> bool:
    """
    Service type and branch must be allowed when restricted; with an
    item/category restriction at least one line must match.

    A cart that does not state its service type or branch is not held to
    that restriction.
    """
    scope = promotion.rules.scope
    if scope.service_types and cart.service_type and cart.service_type not in scope.service_types:
        return False
    if scope.branch_ids and cart.branch_id and cart.branch_id not in scope.branch_ids:
        return False
    if scope.items.is_restricted:
        return any(item_in_scope(item, scope.items) for item in cart.items)
    return True


def min_order_ok(promotion: Promotion, cart: CartSnapshot) -> bool:
    min_order = promotion.rules.min_order
    return min_order is None or cart.subtotal >= min_order.amount


def by_priority(promotions: Iterable[Promotion]) -> list[Promotion]:
    """Highest priority first; newest first on ties."""

    def key(p: Promotion) -> tuple[int, float]:
        created = as_utc(p.created_at).timestamp() if p.created_at else float("-inf")
        return (-p.priority, -created)

    return sorted(promotions, key=key)


# ═══════════════════════════════════════════════════════════════════════════════
# Matcher
# ═══════════════════════════════════════════════════════════════════════════════


class PromotionMatcher:
    """
    Filters a tenant's promotions down to the eligible ones.

    Note: usage limits are read here and written later by the ledger;
    the two are not atomic. Concurrent checkouts may both pass the check
    (see EngineConfig.with_guarded_redemption for the hardened insert).
    """

    def __init__(
        self,
        tenant: str,
        orders: OrderCounter,
        usage: UsageCounter,
    ) -> None:
        self._tenant = tenant
        self._orders = orders
        self._usage = usage

    async def _is_first_order(self, user_id: str | None) -> Result[bool, LookupFailure]:
        if not user_id:
            return Ok(False)
        match await L.catching_async(
            lambda: self._orders.count_orders(self._tenant, user_id),
            on_error=LookupFailure.capture("order count"),
        ):
            case Ok(count):
                return Ok(count == 0)
            case Error(e):
                return Error(e)

    async def _count(self, promotion_id: str, user_id: str | None) -> Result[int, LookupFailure]:
        match await L.catching_async(
            lambda: (
                self._usage.count_total(promotion_id)
                if user_id is None
                else self._usage.count_for_user(promotion_id, user_id)
            ),
            on_error=LookupFailure.capture("redemption ledger"),
        ):
            case Ok(Ok(n)):
                return Ok(n)
            case Ok(Error(e)):
                return Error(LookupFailure(
                    source="redemption ledger",
                    message=getattr(e, "message", str(e)),
                ))
            case Error(e):
                return Error(e)

    async def _customer_gate(
        self,
        promotion: Promotion,
        user_id: str | None,
    ) -> Result[Gate | None, LookupFailure]:
        rules = promotion.rules
        if rules.first_order_only:
            match await self._is_first_order(user_id):
                case Ok(True):
                    pass
                case Ok(_):
                    return Ok(Gate.FIRST_ORDER)
                case Error(e):
                    return Error(e)

        if rules.usage_limit is not None:
            match await self._count(promotion.id, None):
                case Ok(total):
                    if total >= rules.usage_limit:
                        return Ok(Gate.USAGE_LIMIT)
                case Error(e):
                    return Error(e)

        if user_id and rules.per_user_limit is not None:
            match await self._count(promotion.id, user_id):
                case Ok(used):
                    if used >= rules.per_user_limit:
                        return Ok(Gate.PER_USER_LIMIT)
                case Error(e):
                    return Error(e)

        return Ok(None)

    async def failed_gate(
        self,
        promotion: Promotion,
        cart: CartSnapshot,
        now: datetime,
    ) -> Result[Gate | None, LookupFailure]:
        """Return the first gate the promotion fails, or None when eligible."""
        if not (promotion.is_active and promotion.is_published):
            return Ok(Gate.ACTIVE)
        if not in_window(promotion, now):
            return Ok(Gate.WINDOW)
        if not cart_matches_scope(promotion, cart):
            return Ok(Gate.SCOPE)
        if not min_order_ok(promotion, cart):
            return Ok(Gate.MIN_ORDER)
        return await self._customer_gate(promotion, cart.user_id)

    async def failed_redeem_gate(
        self,
        promotion: Promotion,
        user_id: str | None,
        now: datetime,
    ) -> Result[Gate | None, LookupFailure]:
        """
        Gates re-checked when an order is committed.

        Scope and minimum order belong to the cart and were settled at
        evaluation; publication, window, first order and limits may have
        changed since.
        """
        if not (promotion.is_active and promotion.is_published):
            return Ok(Gate.ACTIVE)
        if not in_window(promotion, now):
            return Ok(Gate.WINDOW)
        return await self._customer_gate(promotion, user_id)

    async def match(
        self,
        promotions: Iterable[Promotion],
        cart: CartSnapshot,
        now: datetime,
    ) -> Result[list[Promotion], LookupFailure]:
        """Eligible promotions in descending priority."""
        eligible: list[Promotion] = []
        for promotion in by_priority(p for p in promotions if p.tenant == self._tenant):
            match await self.failed_gate(promotion, cart, now):
                case Ok(None):
                    eligible.append(promotion)
                case Ok(gate):
                    logger.debug("Promotion %s excluded at gate %s", promotion.id, gate.name)
                case Error(e):
                    logger.warning("Promotion matching aborted: %s", e.message)
                    return Error(e)
        return Ok(eligible)


__all__ = (
    "Gate",
    "in_window",
    "item_in_scope",
    "cart_matches_scope",
    "min_order_ok",
    "by_priority",
    "PromotionMatcher",
)
