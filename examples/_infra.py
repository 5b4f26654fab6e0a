"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from decimal import Decimal

from cartwright import Money
from cartwright.catalog import (
    CatalogItem,
    Dietary,
    MemoryCatalog,
    ModifierGroup,
    ModifierOption,
    PriceEntry,
    PriceKind,
    Variant,
)
from cartwright.promotions import (
    Bxgy,
    Effect,
    EffectType,
    MemoryPromotions,
    MinOrder,
    Promotion,
    PromotionKind,
    Rules,
    StackingPolicy,
)

TENANT = "demo-bistro"


def _price(kind: PriceKind, amount: str) -> PriceEntry:
    return PriceEntry(kind=kind, value=Money(Decimal(amount), "TRY"))


# Fake catalog
def seed_catalog() -> MemoryCatalog:
    pizza = CatalogItem(
        id="margherita",
        tenant=TENANT,
        code="MARG",
        name={"en": "Margherita", "tr": "Margarita"},
        variants=(
            Variant("small", name={"en": "Small"}, is_default=True,
                    prices=(_price(PriceKind.BASE, "180"),)),
            Variant("large", name={"en": "Large"}, prices=(_price(PriceKind.BASE, "260"),)),
        ),
        modifier_groups=(
            ModifierGroup(
                "toppings",
                options=(
                    ModifierOption("olives", prices=(_price(PriceKind.SURCHARGE, "15"),)),
                    ModifierOption("mushrooms", prices=(_price(PriceKind.SURCHARGE, "20"),)),
                ),
                max_select=2,
            ),
        ),
        category_ids=("pizza",),
        dietary=Dietary(vegetarian=True),
    )
    ayran = CatalogItem(
        id="ayran",
        tenant=TENANT,
        code="AYR",
        name={"en": "Ayran", "tr": "Ayran"},
        variants=(
            Variant("bottle", prices=(
                _price(PriceKind.BASE, "35"),
                _price(PriceKind.DEPOSIT, "5"),
            )),
        ),
        category_ids=("drinks",),
    )
    return MemoryCatalog().add_item(pizza).add_item(ayran)


# Fake promotions
def seed_promotions() -> MemoryPromotions:
    return MemoryPromotions(
        Promotion(
            id="lunch10",
            tenant=TENANT,
            name={"en": "Lunch 10%"},
            effect=Effect(EffectType.PERCENTAGE, Decimal(10)),
            is_published=True,
            priority=200,
            rules=Rules(min_order=MinOrder(Decimal(300))),
        ),
        Promotion(
            id="drinks-b2g1",
            tenant=TENANT,
            name={"en": "Buy 2 drinks, get 1"},
            effect=Effect(EffectType.BXGY, bxgy=Bxgy(2, 1)),
            is_published=True,
            priority=150,
            stacking_policy=StackingPolicy.WITH_SAME,
        ),
        Promotion(
            id="welcome",
            tenant=TENANT,
            kind=PromotionKind.COUPON,
            code="WELCOME50",
            name={"en": "Welcome"},
            effect=Effect(EffectType.FIXED, Decimal(50)),
            is_published=True,
            rules=Rules(first_order_only=True, usage_limit=100),
        ),
    )


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
