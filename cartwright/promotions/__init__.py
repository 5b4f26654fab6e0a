"""
Promotions — eligibility, discounts, stacking, coupons.

    from cartwright import promotions as PR

    matcher = PR.PromotionMatcher("acme", orders, ledger)
    result = await PR.evaluate(matcher, promotions, cart, now)

    match result:
        case Ok(applied):
            stack = PR.select_stack(applied)
            amount, free_delivery = PR.total_discount(stack)
        case Error(e):
            ...  # LookupFailure: infrastructure, not "no promotions"
"""

from cartwright.promotions._types import (
    PromotionKind,
    StackingPolicy,
    EffectType,
    ServiceType,
    ItemScope,
    Scope,
    MinOrder,
    Rules,
    Bxgy,
    Effect,
    Promotion,
    CartItem,
    CartSnapshot,
    Discount,
    AppliedDiscount,
    PromotionErrorKind,
    PromotionError,
)
from cartwright.promotions._sources import (
    PromotionSource,
    OrderCounter,
    UsageCounter,
    MemoryPromotions,
    MemoryOrders,
)
from cartwright.promotions._match import (
    Gate,
    in_window,
    item_in_scope,
    cart_matches_scope,
    min_order_ok,
    by_priority,
    PromotionMatcher,
)
from cartwright.promotions._discount import (
    bxgy_scope,
    compute_discount,
)
from cartwright.promotions._evaluate import (
    to_applied,
    evaluate,
    can_combine,
    select_stack,
    total_discount,
    normalize_code,
    resolve_coupon,
    apply_coupon,
)

__all__ = (
    # Types
    "PromotionKind",
    "StackingPolicy",
    "EffectType",
    "ServiceType",
    "ItemScope",
    "Scope",
    "MinOrder",
    "Rules",
    "Bxgy",
    "Effect",
    "Promotion",
    "CartItem",
    "CartSnapshot",
    "Discount",
    "AppliedDiscount",
    "PromotionErrorKind",
    "PromotionError",
    # Collaborators
    "PromotionSource",
    "OrderCounter",
    "UsageCounter",
    "MemoryPromotions",
    "MemoryOrders",
    # Matching
    "Gate",
    "in_window",
    "item_in_scope",
    "cart_matches_scope",
    "min_order_ok",
    "by_priority",
    "PromotionMatcher",
    # Discounts
    "bxgy_scope",
    "compute_discount",
    # Evaluation
    "to_applied",
    "evaluate",
    "can_combine",
    "select_stack",
    "total_discount",
    "normalize_code",
    "resolve_coupon",
    "apply_coupon",
)
