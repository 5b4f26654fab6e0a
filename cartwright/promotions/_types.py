"""
Promotion types — promotions, cart snapshots, discounts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from cartwright._types import Amount, TranslatedLabel, ZERO, to_amount


# ═══════════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════════


class PromotionKind(Enum):
    AUTO = "auto"
    COUPON = "coupon"


class StackingPolicy(Enum):
    """
    Whether a promotion may combine with others on the same cart.

    NONE: only ever applied alone.
    WITH_DIFFERENT: combines with promotions of another effect type.
    WITH_SAME: combines with anything that accepts it.
    """

    NONE = "none"
    WITH_DIFFERENT = "with_different"
    WITH_SAME = "with_same"


class EffectType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_DELIVERY = "free_delivery"
    BXGY = "bxgy"


class ServiceType(Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"
    DINEIN = "dinein"


# ═══════════════════════════════════════════════════════════════════════════════
# Rules
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ItemScope:
    """Item/category restriction. Empty means unrestricted."""

    item_ids: frozenset[str] = frozenset()
    category_ids: frozenset[str] = frozenset()

    @property
    def is_restricted(self) -> bool:
        return bool(self.item_ids or self.category_ids)

    def matches(self, item_id: str, category_id: str | None) -> bool:
        if not self.is_restricted:
            return True
        if item_id in self.item_ids:
            return True
        return category_id is not None and category_id in self.category_ids


@dataclass(frozen=True, slots=True)
class Scope:
    branch_ids: frozenset[str] = frozenset()
    service_types: frozenset[ServiceType] = frozenset()
    items: ItemScope = ItemScope()


@dataclass(frozen=True, slots=True)
class MinOrder:
    amount: Amount
    currency: str = "TRY"


@dataclass(frozen=True, slots=True)
class Rules:
    """
    Eligibility rules. Absent values are unbounded.

    usage_limit: total redemptions across all users.
    per_user_limit: redemptions by one user.
    """

    starts_at: datetime | None = None
    ends_at: datetime | None = None
    min_order: MinOrder | None = None
    scope: Scope = Scope()
    first_order_only: bool = False
    usage_limit: int | None = None
    per_user_limit: int | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Effect
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Bxgy:
    """Buy ``buy_qty`` get ``get_qty`` free."""

    buy_qty: int
    get_qty: int
    item_scope: ItemScope | None = None

    def __post_init__(self) -> None:
        if self.buy_qty < 1 or self.get_qty < 1:
            raise ValueError("bxgy buy_qty and get_qty must be >= 1")


@dataclass(frozen=True, slots=True)
class Effect:
    """
    What a promotion does.

    value: percentage (0-100) or fixed amount; unused for free_delivery/bxgy.
    """

    type: EffectType
    value: Amount | None = None
    bxgy: Bxgy | None = None

    def __post_init__(self) -> None:
        if self.type is EffectType.PERCENTAGE:
            pct = to_amount(self.value)
            if pct < 0 or pct > 100:
                raise ValueError(f"percentage value must be within [0, 100], got {self.value}")
        if self.type is EffectType.BXGY and self.bxgy is None:
            raise ValueError("bxgy effect requires a Bxgy rule")


# ═══════════════════════════════════════════════════════════════════════════════
# Promotion
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Promotion:
    id: str
    tenant: str
    effect: Effect
    kind: PromotionKind = PromotionKind.AUTO
    code: str | None = None
    name: TranslatedLabel = field(default_factory=lambda: TranslatedLabel())
    is_active: bool = True
    is_published: bool = False
    priority: int = 100
    stacking_policy: StackingPolicy = StackingPolicy.WITH_DIFFERENT
    rules: Rules = Rules()
    created_at: datetime | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Snapshot
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartItem:
    item_id: str
    unit_price: Amount
    quantity: int
    category_id: str | None = None


@dataclass(frozen=True, slots=True)
class CartSnapshot:
    """The cart as seen by promotion evaluation."""

    items: tuple[CartItem, ...]
    subtotal: Amount
    currency: str = "TRY"
    delivery_fee: Amount = ZERO
    service_type: ServiceType | None = None
    branch_id: str | None = None
    user_id: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Results
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Discount:
    """
    Discount computed for one promotion.

    Note: free_delivery=True means the caller zeroes the delivery fee;
    amount is informational and must not be subtracted again.
    """

    amount: Amount
    free_delivery: bool = False


@dataclass(frozen=True, slots=True)
class AppliedDiscount:
    promotion_id: str
    code: str | None
    name: TranslatedLabel
    kind: PromotionKind
    stacking_policy: StackingPolicy
    priority: int
    effect_type: EffectType
    amount: Amount
    currency: str
    free_delivery: bool = False


class PromotionErrorKind(Enum):
    """Coupon failures. Values are the user-facing message keys."""

    INVALID_COUPON = "invalidCoupon"
    NOT_APPLICABLE = "couponNotApplicable"
    FIRST_ORDER_ONLY = "redeemFirstOrderOnly"
    LIMIT_REACHED = "redeemLimitReached"
    PER_USER_LIMIT = "redeemPerUserLimit"


@dataclass(frozen=True, slots=True)
class PromotionError:
    kind: PromotionErrorKind
    message: str

    @property
    def code(self) -> str:
        return self.kind.value


__all__ = (
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
)
