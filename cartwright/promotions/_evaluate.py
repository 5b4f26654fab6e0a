"""
Evaluation — matched promotions → advisory discounts, stacking, coupons.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from kungfu import Result, Ok, Error

from cartwright._types import Amount, LookupFailure, ZERO
from cartwright.promotions._discount import compute_discount
from cartwright.promotions._match import Gate, PromotionMatcher, in_window
from cartwright.promotions._types import (
    AppliedDiscount,
    CartSnapshot,
    Discount,
    Promotion,
    PromotionError,
    PromotionErrorKind,
    PromotionKind,
    StackingPolicy,
)


def to_applied(promotion: Promotion, discount: Discount, currency: str) -> AppliedDiscount:
    return AppliedDiscount(
        promotion_id=promotion.id,
        code=promotion.code,
        name=promotion.name,
        kind=promotion.kind,
        stacking_policy=promotion.stacking_policy,
        priority=promotion.priority,
        effect_type=promotion.effect.type,
        amount=discount.amount,
        currency=currency,
        free_delivery=discount.free_delivery,
    )


async def evaluate(
    matcher: PromotionMatcher,
    promotions: Iterable[Promotion],
    cart: CartSnapshot,
    now: datetime,
) -> Result[list[AppliedDiscount], LookupFailure]:
    """
    Advisory discount list, highest priority first.

    A promotion whose discount computes to zero or less is dropped even
    when every gate passed — it would only occupy a stacking slot.
    """
    match await matcher.match(promotions, cart, now):
        case Ok(eligible):
            pass
        case Error(e):
            return Error(e)

    applied: list[AppliedDiscount] = []
    for promotion in eligible:
        discount = compute_discount(promotion, cart)
        if discount.amount <= 0:
            continue
        applied.append(to_applied(promotion, discount, cart.currency))
    return Ok(applied)


# ═══════════════════════════════════════════════════════════════════════════════
# Stacking
# ═══════════════════════════════════════════════════════════════════════════════


def can_combine(a: AppliedDiscount, b: AppliedDiscount) -> bool:
    """
    NONE never combines. WITH_DIFFERENT refuses a partner of the same
    effect type; WITH_SAME accepts it unless the partner refuses.
    """
    if StackingPolicy.NONE in (a.stacking_policy, b.stacking_policy):
        return False
    if a.effect_type is b.effect_type:
        return StackingPolicy.WITH_DIFFERENT not in (a.stacking_policy, b.stacking_policy)
    return True


def select_stack(applied: Iterable[AppliedDiscount]) -> list[AppliedDiscount]:
    """
    Greedy selection in the given (priority) order: each discount is kept
    when it can combine with everything kept so far.
    """
    chosen: list[AppliedDiscount] = []
    for discount in applied:
        if all(can_combine(discount, kept) for kept in chosen):
            chosen.append(discount)
    return chosen


def total_discount(stack: Iterable[AppliedDiscount]) -> tuple[Amount, bool]:
    """
    Amount to subtract from the subtotal, and whether delivery is free.

    Note: free-delivery amounts are excluded; the caller zeroes the fee.
    """
    amount = ZERO
    free_delivery = False
    for discount in stack:
        if discount.free_delivery:
            free_delivery = True
        else:
            amount += discount.amount
    return amount, free_delivery


# ═══════════════════════════════════════════════════════════════════════════════
# Coupons
# ═══════════════════════════════════════════════════════════════════════════════

_GATE_ERRORS: dict[Gate, PromotionErrorKind] = {
    Gate.ACTIVE: PromotionErrorKind.INVALID_COUPON,
    Gate.WINDOW: PromotionErrorKind.INVALID_COUPON,
    Gate.SCOPE: PromotionErrorKind.NOT_APPLICABLE,
    Gate.MIN_ORDER: PromotionErrorKind.NOT_APPLICABLE,
    Gate.FIRST_ORDER: PromotionErrorKind.FIRST_ORDER_ONLY,
    Gate.USAGE_LIMIT: PromotionErrorKind.LIMIT_REACHED,
    Gate.PER_USER_LIMIT: PromotionErrorKind.PER_USER_LIMIT,
}


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def resolve_coupon(
    promotions: Iterable[Promotion],
    tenant: str,
    code: str | None,
    now: datetime,
) -> Result[Promotion, PromotionError]:
    """Find the active, published, in-window coupon promotion for a code."""
    wanted = normalize_code(code)
    if wanted:
        for promotion in promotions:
            if (
                promotion.tenant == tenant
                and promotion.kind is PromotionKind.COUPON
                and normalize_code(promotion.code) == wanted
                and promotion.is_active
                and promotion.is_published
                and in_window(promotion, now)
            ):
                return Ok(promotion)
    return Error(PromotionError(
        PromotionErrorKind.INVALID_COUPON,
        f"Coupon {wanted!r} does not resolve to an active promotion",
    ))


async def apply_coupon(
    matcher: PromotionMatcher,
    promotions: Iterable[Promotion],
    tenant: str,
    code: str | None,
    cart: CartSnapshot,
    now: datetime,
) -> Result[AppliedDiscount, PromotionError | LookupFailure]:
    """Resolve a coupon and run it through every gate and the calculator."""
    match resolve_coupon(promotions, tenant, code, now):
        case Ok(promotion):
            pass
        case Error(e):
            return Error(e)

    match await matcher.failed_gate(promotion, cart, now):
        case Ok(None):
            pass
        case Ok(gate):
            return Error(PromotionError(
                _GATE_ERRORS[gate],
                f"Coupon {promotion.code!r} is not applicable: {gate.name.lower()}",
            ))
        case Error(e):
            return Error(e)

    discount = compute_discount(promotion, cart)
    if discount.amount <= 0:
        return Error(PromotionError(
            PromotionErrorKind.NOT_APPLICABLE,
            f"Coupon {promotion.code!r} gives no discount on this cart",
        ))
    return Ok(to_applied(promotion, discount, cart.currency))


__all__ = (
    "to_applied",
    "evaluate",
    "can_combine",
    "select_stack",
    "total_discount",
    "normalize_code",
    "resolve_coupon",
    "apply_coupon",
)
