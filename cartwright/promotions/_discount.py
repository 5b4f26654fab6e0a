"""
Discount calculation — one matched promotion against a cart.
"""

from __future__ import annotations

import math
from decimal import Decimal

from cartwright._types import Amount, ZERO, to_amount
from cartwright.promotions._match import item_in_scope
from cartwright.promotions._types import (
    Bxgy,
    CartItem,
    CartSnapshot,
    Discount,
    EffectType,
    ItemScope,
    Promotion,
)


def _percentage(subtotal: Amount, value: Amount | None) -> Discount:
    pct = min(Decimal(100), max(ZERO, to_amount(value)))
    return Discount(Decimal(math.floor(subtotal * pct / 100)))


def _fixed(subtotal: Amount, value: Amount | None) -> Discount:
    return Discount(min(max(ZERO, to_amount(value)), subtotal))


def _free_delivery(cart: CartSnapshot) -> Discount:
    return Discount(max(ZERO, to_amount(cart.delivery_fee)), free_delivery=True)


def bxgy_scope(promotion: Promotion, rule: Bxgy) -> ItemScope:
    """The rule's own item scope wins; otherwise the promotion's."""
    if rule.item_scope is not None and rule.item_scope.is_restricted:
        return rule.item_scope
    return promotion.rules.scope.items


def _bxgy(promotion: Promotion, rule: Bxgy, cart: CartSnapshot, subtotal: Amount) -> Discount:
    """
    Every full group of buy_qty + get_qty eligible units earns get_qty
    free units, each priced at the cheapest eligible unit. No partial credit.
    """
    scope = bxgy_scope(promotion, rule)
    eligible: list[CartItem] = [
        item for item in cart.items
        if item.quantity > 0 and item_in_scope(item, scope)
    ]
    quantity = sum(item.quantity for item in eligible)
    group = rule.buy_qty + rule.get_qty
    if not eligible or quantity < group:
        return Discount(ZERO)

    free_units = (quantity // group) * rule.get_qty
    cheapest = min(to_amount(item.unit_price) for item in eligible)
    return Discount(min(max(ZERO, cheapest * free_units), subtotal))


def compute_discount(promotion: Promotion, cart: CartSnapshot) -> Discount:
    """
    Discount for one promotion.

    percentage:    floor(subtotal * clamp(value, 0, 100) / 100)
    fixed:         min(value, subtotal)
    free_delivery: the delivery fee, flagged free_delivery
    bxgy:          free units × cheapest eligible unit, capped at subtotal
    """
    subtotal = max(ZERO, to_amount(cart.subtotal))
    effect = promotion.effect

    match effect.type:
        case EffectType.PERCENTAGE:
            return _percentage(subtotal, effect.value)
        case EffectType.FIXED:
            return _fixed(subtotal, effect.value)
        case EffectType.FREE_DELIVERY:
            return _free_delivery(cart)
        case EffectType.BXGY if effect.bxgy is not None:
            return _bxgy(promotion, effect.bxgy, cart, subtotal)
        case _:
            return Discount(ZERO)


__all__ = (
    "bxgy_scope",
    "compute_discount",
)
