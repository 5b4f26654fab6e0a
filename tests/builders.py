from datetime import UTC, datetime, timedelta
from decimal import Decimal

from kungfu import Ok, Error

from cartwright import Money
from cartwright.catalog import (
    CatalogItem,
    ModifierGroup,
    ModifierOption,
    PriceEntry,
    PriceKind,
    Variant,
)
from cartwright.promotions import (
    CartItem,
    CartSnapshot,
    Effect,
    EffectType,
    Promotion,
    PromotionKind,
    Rules,
    StackingPolicy,
)

TENANT = "acme"
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
HOUR = timedelta(hours=1)


def d(value: str | int) -> Decimal:
    return Decimal(str(value))


def entry(kind: PriceKind, amount: str | int, currency: str = "TRY", **kwargs) -> PriceEntry:
    return PriceEntry(kind=kind, value=Money(d(amount), currency), **kwargs)


def variant(code: str = "regular", base: str | int | None = None, deposit: str | int | None = None, **kwargs) -> Variant:
    prices = list(kwargs.pop("prices", ()))
    if base is not None:
        prices.append(entry(PriceKind.BASE, base))
    if deposit is not None:
        prices.append(entry(PriceKind.DEPOSIT, deposit))
    return Variant(code=code, prices=tuple(prices), **kwargs)


def option(code: str, surcharge: str | int | None = None, **kwargs) -> ModifierOption:
    prices = () if surcharge is None else (entry(PriceKind.SURCHARGE, surcharge),)
    return ModifierOption(code=code, prices=prices, **kwargs)


def group(code: str, *options: ModifierOption, **kwargs) -> ModifierGroup:
    return ModifierGroup(code=code, options=options, **kwargs)


def item(
    item_id: str = "margherita",
    *variants: Variant,
    groups: tuple[ModifierGroup, ...] = (),
    tenant: str = TENANT,
    **kwargs,
) -> CatalogItem:
    return CatalogItem(
        id=item_id,
        tenant=tenant,
        code=item_id.upper(),
        name={"en": item_id.title(), "tr": item_id.title()},
        variants=variants,
        modifier_groups=groups,
        **kwargs,
    )


def promotion(
    promotion_id: str,
    effect_type: EffectType = EffectType.PERCENTAGE,
    value: str | int | None = None,
    *,
    rules: Rules = Rules(),
    tenant: str = TENANT,
    kind: PromotionKind = PromotionKind.AUTO,
    code: str | None = None,
    priority: int = 100,
    stacking: StackingPolicy = StackingPolicy.WITH_DIFFERENT,
    bxgy=None,
    **kwargs,
) -> Promotion:
    return Promotion(
        id=promotion_id,
        tenant=tenant,
        effect=Effect(effect_type, None if value is None else d(value), bxgy),
        kind=kind,
        code=code,
        name={"en": promotion_id},
        is_published=True,
        priority=priority,
        stacking_policy=stacking,
        rules=rules,
        **kwargs,
    )


def cart(*items: CartItem, subtotal: str | int | None = None, **kwargs) -> CartSnapshot:
    if subtotal is None:
        total = sum((i.unit_price * i.quantity for i in items), Decimal(0))
    else:
        total = d(subtotal)
    return CartSnapshot(items=items, subtotal=total, **kwargs)


def line(item_id: str, price: str | int, quantity: int = 1, category_id: str | None = None) -> CartItem:
    return CartItem(item_id=item_id, unit_price=d(price), quantity=quantity, category_id=category_id)


def ok(result):
    match result:
        case Ok(value):
            return value
        case Error(e):
            raise AssertionError(f"expected Ok, got Error({e!r})")


def err(result):
    match result:
        case Error(e):
            return e
        case Ok(value):
            raise AssertionError(f"expected Error, got Ok({value!r})")
