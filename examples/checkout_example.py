"""
Checkout Example — price a cart, pick promotions, redeem them once.

Run: python -m examples.checkout_example
"""

import logging
from decimal import Decimal

from kungfu import Ok, Error

from cartwright import Engine, EngineConfig
from cartwright.pricing import CartLine, ModifierSelection
from cartwright.promotions import CartItem, CartSnapshot, MemoryOrders, ServiceType, total_discount
from cartwright.redemption import SQLAlchemyRedemptionStore, create_database
from examples._infra import TENANT, banner, run, seed_catalog, seed_promotions


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="  [%(name)s] %(message)s")

    session_factory, db = await create_database()
    catalog = seed_catalog()
    engine = Engine(
        TENANT,
        catalog=catalog,
        price_list=catalog,
        orders=MemoryOrders(),
        promotions=seed_promotions(),
        store=SQLAlchemyRedemptionStore(session_factory),
        config=EngineConfig().with_guarded_redemption(),
    )

    # 1. Price the cart
    banner("1. Pricing")
    lines = [
        CartLine(
            "margherita",
            variant_code="Large",
            modifier_selections=(ModifierSelection("toppings", "olives"),),
        ),
        CartLine("ayran", quantity=3),
    ]
    match await engine.price_cart(lines):
        case Ok(priced):
            for p in priced.lines:
                print(f"   {p.snapshot.name.get('en')}: {p.quantity} × {p.unit_price} {p.currency}")
            print(f"   subtotal={priced.subtotal} {priced.currency}")
        case Error(e):
            print(f"   rejected: {e}")
            return

    # 2. Promotions
    banner("2. Promotions")
    cart = CartSnapshot(
        items=tuple(
            CartItem(p.catalog_item_id or "", p.unit_price, p.quantity)
            for p in priced.lines
        ),
        subtotal=priced.subtotal,
        currency=priced.currency,
        delivery_fee=Decimal(25),
        service_type=ServiceType.DELIVERY,
        user_id="guest-1",
    )
    match await engine.evaluate_promotions(cart):
        case Ok(applied):
            stack = engine.select_stack(applied)
            for a in stack:
                print(f"   {a.promotion_id}: -{a.amount}")
        case Error(e):
            print(f"   lookup failed: {e.message}")
            return

    match await engine.apply_coupon("welcome50", cart):
        case Ok(coupon):
            stack.append(coupon)
            print(f"   coupon {coupon.code}: -{coupon.amount}")
        case Error(e):
            print(f"   coupon refused: {e.message}")

    amount, free_delivery = total_discount(stack)
    print(f"   total discount={amount}, free delivery={free_delivery}")

    # 3. Redeem — retries are safe
    banner("3. Redemption")
    for attempt in (1, 2):
        for a in stack:
            match await engine.redeem_promotion(a.promotion_id, "order-1001", a.amount, a.currency, user_id="guest-1"):
                case Ok(outcome):
                    print(f"   attempt {attempt}: {a.promotion_id} duplicate={outcome.duplicate}")
                case Error(e):
                    print(f"   attempt {attempt}: {a.promotion_id} failed: {e.message}")

    await db.dispose()


if __name__ == "__main__":
    run(main)
