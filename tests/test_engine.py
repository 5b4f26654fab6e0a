from cartwright import Engine, EngineConfig, LookupFailure
from cartwright.catalog import CatalogItem, MemoryCatalog
from cartwright.pricing import CartLine, ModifierSelection, PricingErrorKind
from cartwright.promotions import (
    EffectType,
    MemoryOrders,
    MemoryPromotions,
    Promotion,
    PromotionKind,
    Rules,
    StackingPolicy,
)
from cartwright.redemption import MemoryRedemptionStore, RedemptionErrorKind, SQLAlchemyRedemptionStore

from builders import HOUR, NOW, TENANT, cart, d, err, group, item, line, ok, option, promotion, variant


class ExplodingCatalog:
    async def get_catalog_item(self, tenant: str, item_id: str) -> CatalogItem | None:
        raise ConnectionError("catalog unreachable")


class ExplodingPromotions:
    async def list_active_promotions(self, tenant: str) -> list[Promotion]:
        raise ConnectionError("promotions unreachable")


def _engine(catalog, orders, promotions, store=None, config: EngineConfig | None = None) -> Engine:
    return Engine(
        TENANT,
        catalog=catalog,
        price_list=catalog,
        orders=orders,
        promotions=promotions,
        store=store or MemoryRedemptionStore(),
        config=config or EngineConfig().with_clock(lambda: NOW),
    )


async def test_price_line_scenario_120(catalog: MemoryCatalog, orders, promotions) -> None:
    catalog.add_item(item("cola", variant("1l", base=100, deposit=20)))
    priced = ok(await _engine(catalog, orders, promotions).price_line(CartLine("cola")))
    assert priced.unit_price == d(120)


async def test_deposit_default_comes_from_config(catalog: MemoryCatalog, orders, promotions) -> None:
    catalog.add_item(item("cola", variant("1l", base=100, deposit=20)))
    config = EngineConfig().with_clock(lambda: NOW).with_deposit_included(False)
    engine = _engine(catalog, orders, promotions, config=config)

    assert ok(await engine.price_line(CartLine("cola"))).unit_price == d(100)
    assert ok(await engine.price_line(CartLine("cola", deposit_included=True))).unit_price == d(120)


async def test_fallback_currency_from_config(catalog: MemoryCatalog, orders, promotions) -> None:
    catalog.add_item(item("cola", variant("1l", base=3)))
    config = EngineConfig().with_clock(lambda: NOW).with_fallback_currency("eur")
    priced = ok(await _engine(catalog, orders, promotions, config=config).price_line(CartLine("cola")))
    assert priced.currency == "EUR"


async def test_unknown_item_is_menu_item_not_found(catalog: MemoryCatalog, orders, promotions) -> None:
    e = err(await _engine(catalog, orders, promotions).price_line(CartLine("ghost")))
    assert e.kind is PricingErrorKind.MENU_ITEM_NOT_FOUND
    assert e.code == "menuItemNotFound"


async def test_item_of_other_tenant_is_not_found(catalog: MemoryCatalog, orders, promotions) -> None:
    catalog.add_item(item("cola", variant("1l", base=3), tenant="other"))
    e = err(await _engine(catalog, orders, promotions).price_line(CartLine("cola")))
    assert e.kind is PricingErrorKind.MENU_ITEM_NOT_FOUND


async def test_catalog_failure_is_lookup_failure(orders, promotions) -> None:
    engine = Engine(
        TENANT,
        catalog=ExplodingCatalog(),
        price_list=MemoryCatalog(),
        orders=orders,
        promotions=promotions,
        store=MemoryRedemptionStore(),
    )
    e = err(await engine.price_line(CartLine("cola"), now=NOW))
    assert isinstance(e, LookupFailure)
    assert e.source == "catalog"


async def test_price_cart_subtotal(catalog: MemoryCatalog, orders, promotions) -> None:
    toppings = group("toppings", option("olives", 5))
    catalog.add_item(item("pizza", variant("regular", base=100), groups=(toppings,)))
    catalog.add_item(item("cola", variant("1l", base=10, deposit=2)))
    engine = _engine(catalog, orders, promotions)

    priced = ok(await engine.price_cart([
        CartLine("pizza", quantity=2, modifier_selections=(ModifierSelection("toppings", "olives"),)),
        CartLine("cola", quantity=3),
    ]))
    assert [p.line_total for p in priced.lines] == [d(210), d(36)]
    assert priced.subtotal == d(246)
    assert priced.currency == "TRY"


async def test_price_cart_aborts_on_first_error(catalog: MemoryCatalog, orders, promotions) -> None:
    catalog.add_item(item("cola", variant("1l", base=10)))
    engine = _engine(catalog, orders, promotions)
    e = err(await engine.price_cart([CartLine("cola"), CartLine("ghost"), CartLine("cola")]))
    assert e.kind is PricingErrorKind.MENU_ITEM_NOT_FOUND


async def test_evaluate_and_stack(catalog: MemoryCatalog, orders) -> None:
    promotions = MemoryPromotions(
        promotion("pct", EffectType.PERCENTAGE, 10, priority=200),
        promotion("fixed", EffectType.FIXED, 5, priority=100, stacking=StackingPolicy.WITH_SAME),
        promotion("pct2", EffectType.PERCENTAGE, 5, priority=50),
        promotion("ship", EffectType.FREE_DELIVERY, priority=10),
    )
    engine = _engine(catalog, orders, promotions)
    snapshot = cart(line("pizza", 100, 2), delivery_fee=d(15))

    applied = ok(await engine.evaluate_promotions(snapshot))
    assert [a.promotion_id for a in applied] == ["pct", "fixed", "pct2", "ship"]

    stack = engine.select_stack(applied)
    assert [a.promotion_id for a in stack] == ["pct", "fixed", "ship"]


async def test_promotion_source_failure_is_not_an_empty_list(catalog: MemoryCatalog, orders) -> None:
    engine = _engine(catalog, orders, ExplodingPromotions())
    e = err(await engine.evaluate_promotions(cart(subtotal=100)))
    assert isinstance(e, LookupFailure)
    assert e.source == "promotion source"


async def test_apply_coupon(catalog: MemoryCatalog, orders) -> None:
    promotions = MemoryPromotions(
        promotion("save", EffectType.FIXED, 25, kind=PromotionKind.COUPON, code="SAVE25"),
    )
    engine = _engine(catalog, orders, promotions)

    applied = ok(await engine.apply_coupon(" save25 ", cart(subtotal=100)))
    assert applied.amount == d(25)
    assert err(await engine.apply_coupon("WRONG", cart(subtotal=100))).code == "invalidCoupon"


async def test_usage_limit_one_end_to_end(catalog: MemoryCatalog, orders) -> None:
    promotions = MemoryPromotions(promotion("once", EffectType.FIXED, 10, rules=Rules(usage_limit=1)))
    engine = _engine(catalog, orders, promotions)

    first = ok(await engine.evaluate_promotions(cart(subtotal=50, user_id="u1")))
    assert [a.promotion_id for a in first] == ["once"]
    ok(await engine.redeem_promotion("once", "order-1", first[0].amount, "TRY", user_id="u1"))

    assert ok(await engine.evaluate_promotions(cart(subtotal=50, user_id="u2"))) == []


async def test_redeem_is_idempotent(catalog: MemoryCatalog, orders) -> None:
    engine = _engine(catalog, orders, MemoryPromotions(promotion("promo", EffectType.FIXED, 10)))
    first = ok(await engine.redeem_promotion("promo", "order-1", d(10), "TRY"))
    again = ok(await engine.redeem_promotion("promo", "order-1", d(10), "TRY"))

    assert again.duplicate
    assert again.redemption == first.redemption
    assert ok(await engine.ledger.count_total("promo")) == 1


async def test_redeem_unknown_promotion_is_not_found(catalog: MemoryCatalog, orders) -> None:
    foreign = promotion("foreign", EffectType.FIXED, 10, tenant="other")
    engine = _engine(catalog, orders, MemoryPromotions(foreign))

    for promotion_id in ("ghost", "foreign"):
        e = err(await engine.redeem_promotion(promotion_id, "order-1", d(10)))
        assert e.kind is RedemptionErrorKind.NOT_FOUND
        assert e.code == "notFound"
        assert ok(await engine.ledger.count_total(promotion_id)) == 0


async def test_redeem_unpublished_or_expired_promotion(catalog: MemoryCatalog, orders) -> None:
    promotions = MemoryPromotions(
        promotion("expired", EffectType.FIXED, 10, rules=Rules(ends_at=NOW - HOUR)),
        promotion("upcoming", EffectType.FIXED, 10, rules=Rules(starts_at=NOW + HOUR)),
        promotion("off", EffectType.FIXED, 10, is_active=False),
    )
    engine = _engine(catalog, orders, promotions)

    for promotion_id in ("expired", "upcoming", "off"):
        e = err(await engine.redeem_promotion(promotion_id, "order-1", d(10)))
        assert e.kind is RedemptionErrorKind.NOT_PUBLISHED
        assert e.code == "notPublished"
        assert ok(await engine.ledger.count_total(promotion_id)) == 0


async def test_redeem_first_order_only_by_repeat_customer(catalog: MemoryCatalog, orders) -> None:
    welcome = promotion("welcome", EffectType.FIXED, 10, rules=Rules(first_order_only=True))
    engine = _engine(catalog, orders, MemoryPromotions(welcome))
    orders.record(TENANT, "regular")

    e = err(await engine.redeem_promotion("welcome", "order-1", d(10), user_id="regular"))
    assert e.kind is RedemptionErrorKind.FIRST_ORDER_ONLY
    assert e.code == "redeemFirstOrderOnly"
    assert ok(await engine.redeem_promotion("welcome", "order-2", d(10), user_id="newcomer")).duplicate is False


async def test_guarded_redemption_uses_promotion_limits(catalog: MemoryCatalog, orders) -> None:
    promotions = MemoryPromotions(promotion("once", EffectType.FIXED, 10, rules=Rules(usage_limit=1)))
    config = EngineConfig().with_clock(lambda: NOW).with_guarded_redemption()
    engine = _engine(catalog, orders, promotions, config=config)

    ok(await engine.redeem_promotion("once", "order-1", d(10)))
    e = err(await engine.redeem_promotion("once", "order-2", d(10)))
    assert e.kind is RedemptionErrorKind.LIMIT_REACHED


async def test_unguarded_redemption_rechecks_usage_limit(catalog: MemoryCatalog, orders) -> None:
    promotions = MemoryPromotions(promotion("once", EffectType.FIXED, 10, rules=Rules(usage_limit=1)))
    engine = _engine(catalog, orders, promotions)

    ok(await engine.redeem_promotion("once", "order-1", d(10)))
    e = err(await engine.redeem_promotion("once", "order-2", d(10)))

    assert e.kind is RedemptionErrorKind.LIMIT_REACHED
    assert e.code == "limitReached"
    assert ok(await engine.ledger.count_total("once")) == 1


async def test_redeem_rechecks_per_user_limit(catalog: MemoryCatalog, orders) -> None:
    promotions = MemoryPromotions(promotion("twice", EffectType.FIXED, 10, rules=Rules(per_user_limit=2)))
    engine = _engine(catalog, orders, promotions)

    for order_id in ("order-1", "order-2"):
        ok(await engine.redeem_promotion("twice", order_id, d(10), user_id="u1"))
    e = err(await engine.redeem_promotion("twice", "order-3", d(10), user_id="u1"))

    assert e.kind is RedemptionErrorKind.PER_USER_LIMIT_REACHED
    assert ok(await engine.redeem_promotion("twice", "order-3", d(10), user_id="u2")).duplicate is False


async def test_retry_after_limit_reached_returns_stored_row(catalog: MemoryCatalog, orders) -> None:
    promotions = MemoryPromotions(promotion("once", EffectType.FIXED, 10, rules=Rules(usage_limit=1)))
    engine = _engine(catalog, orders, promotions)

    first = ok(await engine.redeem_promotion("once", "order-1", d(10)))
    retry = ok(await engine.redeem_promotion("once", "order-1", d(10)))

    assert retry.duplicate
    assert retry.redemption == first.redemption


async def test_redeem_on_sqlalchemy_store_returns_equal_rows(catalog: MemoryCatalog, orders, session_factory) -> None:
    engine = _engine(
        catalog, orders,
        MemoryPromotions(promotion("promo", EffectType.FIXED, 10)),
        store=SQLAlchemyRedemptionStore(session_factory, clock=lambda: NOW),
    )
    first = ok(await engine.redeem_promotion("promo", "order-1", d(10), "TRY"))
    again = ok(await engine.redeem_promotion("promo", "order-1", d(10), "TRY"))

    assert again.duplicate
    assert again.redemption == first.redemption
    assert again.redemption.created_at == NOW
