"""
Engine — one tenant bound to its collaborators.

Wires catalog, price list, order counter, promotion source and redemption
store into the pricing, matching and ledger components. Every operation
returns a LazyCoroResult; nothing runs until awaited.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from kungfu import Result, Ok, Error, LazyCoroResult
from combinators import lift as L

from cartwright._config import EngineConfig
from cartwright._types import Amount, LookupFailure, ZERO
from cartwright.catalog import CatalogLookup, PriceListLookup
from cartwright.pricing import (
    CartLine,
    LinePricer,
    PricedCart,
    PricedLine,
    PricingError,
    PricingErrorKind,
)
from cartwright.promotions import (
    AppliedDiscount,
    CartSnapshot,
    Gate,
    OrderCounter,
    Promotion,
    PromotionError,
    PromotionMatcher,
    PromotionSource,
)
from cartwright.promotions import apply_coupon as _apply_coupon
from cartwright.promotions import evaluate as _evaluate
from cartwright.promotions import select_stack as _select_stack
from cartwright.redemption import (
    Limits,
    RedeemOutcome,
    RedemptionError,
    RedemptionErrorKind,
    RedemptionLedger,
    RedemptionStore,
)

logger = logging.getLogger(__name__)

# Gates a redemption can fail, with the error it is reported as
_REFUSALS: dict[Gate, tuple[RedemptionErrorKind, str]] = {
    Gate.ACTIVE: (RedemptionErrorKind.NOT_PUBLISHED, "is not published"),
    Gate.WINDOW: (RedemptionErrorKind.NOT_PUBLISHED, "is outside its active window"),
    Gate.FIRST_ORDER: (RedemptionErrorKind.FIRST_ORDER_ONLY, "is for first orders only"),
    Gate.USAGE_LIMIT: (RedemptionErrorKind.LIMIT_REACHED, "reached its usage limit"),
    Gate.PER_USER_LIMIT: (RedemptionErrorKind.PER_USER_LIMIT_REACHED, "reached its per-user limit"),
}


class Engine:
    """
    Pricing and promotion engine for one tenant.

    Example:
        engine = Engine(
            "acme",
            catalog=catalog,
            price_list=catalog,
            orders=orders,
            promotions=promotions,
            store=MemoryRedemptionStore(),
            config=EngineConfig().with_guarded_redemption(),
        )

        match await engine.price_line(CartLine("margherita", variant_code="large")):
            case Ok(priced):
                ...
            case Error(e):
                ...

    Note: promotions are re-read from the source on every call; nothing
    is cached between requests.
    """

    def __init__(
        self,
        tenant: str,
        *,
        catalog: CatalogLookup,
        price_list: PriceListLookup,
        orders: OrderCounter,
        promotions: PromotionSource,
        store: RedemptionStore,
        config: EngineConfig | None = None,
    ) -> None:
        self._tenant = tenant
        self._catalog = catalog
        self._promotions = promotions
        self._config = config or EngineConfig()
        self._pricer = LinePricer(tenant, price_list)
        self._ledger = RedemptionLedger(
            tenant,
            store,
            guarded=self._config.guarded_redemption,
            fallback_currency=self._config.fallback_currency,
        )
        self._matcher = PromotionMatcher(tenant, orders, self._ledger)

    @property
    def tenant(self) -> str:
        return self._tenant

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def ledger(self) -> RedemptionLedger:
        return self._ledger

    @property
    def matcher(self) -> PromotionMatcher:
        return self._matcher

    def _now(self, now: datetime | None) -> datetime:
        return now if now is not None else self._config.clock()

    # ═══════════════════════════════════════════════════════════════════════════
    # Pricing
    # ═══════════════════════════════════════════════════════════════════════════

    async def _price(self, line: CartLine, now: datetime) -> Result[PricedLine, PricingError | LookupFailure]:
        match await L.catching_async(
            lambda: self._catalog.get_catalog_item(self._tenant, line.catalog_item_id),
            on_error=LookupFailure.capture("catalog"),
        ):
            case Ok(None):
                return Error(PricingError(
                    PricingErrorKind.MENU_ITEM_NOT_FOUND,
                    f"Item {line.catalog_item_id!r} not found for tenant {self._tenant!r}",
                ))
            case Ok(item):
                pass
            case Error(e):
                logger.warning("Catalog lookup failed for %s: %s", line.catalog_item_id, e.message)
                return Error(e)

        deposit_included = (
            line.deposit_included
            if line.deposit_included is not None
            else self._config.deposit_included_default
        )
        return await self._pricer.price(
            item,
            line,
            now=now,
            fallback_currency=self._config.fallback_currency,
            deposit_included=deposit_included,
        )

    def price_line(
        self,
        line: CartLine,
        *,
        now: datetime | None = None,
    ) -> LazyCoroResult[PricedLine, PricingError | LookupFailure]:
        """Price one cart line against the tenant catalog."""

        async def execute() -> Result[PricedLine, PricingError | LookupFailure]:
            return await self._price(line, self._now(now))

        return LazyCoroResult(execute)

    def price_cart(
        self,
        lines: Iterable[CartLine],
        *,
        now: datetime | None = None,
    ) -> LazyCoroResult[PricedCart, PricingError | LookupFailure]:
        """
        Price every line at one instant; the first failing line aborts.

        Cart currency is the first line's currency (fallback when empty).
        """

        async def execute() -> Result[PricedCart, PricingError | LookupFailure]:
            at = self._now(now)
            priced: list[PricedLine] = []
            for line in lines:
                match await self._price(line, at):
                    case Ok(p):
                        priced.append(p)
                    case Error(e):
                        return Error(e)
            currency = priced[0].currency if priced else self._config.fallback_currency
            return Ok(PricedCart(lines=tuple(priced), currency=currency))

        return LazyCoroResult(execute)

    # ═══════════════════════════════════════════════════════════════════════════
    # Promotions
    # ═══════════════════════════════════════════════════════════════════════════

    async def _load_promotions(self) -> Result[list[Promotion], LookupFailure]:
        match await L.catching_async(
            lambda: self._promotions.list_active_promotions(self._tenant),
            on_error=LookupFailure.capture("promotion source"),
        ):
            case Ok(promotions):
                return Ok(list(promotions))
            case Error(e):
                logger.warning("Promotion source failed for %s: %s", self._tenant, e.message)
                return Error(e)

    def evaluate_promotions(
        self,
        cart: CartSnapshot,
        *,
        now: datetime | None = None,
    ) -> LazyCoroResult[list[AppliedDiscount], LookupFailure]:
        """Advisory discount list for the cart, highest priority first."""

        async def execute() -> Result[list[AppliedDiscount], LookupFailure]:
            match await self._load_promotions():
                case Ok(promotions):
                    return await _evaluate(self._matcher, promotions, cart, self._now(now))
                case Error(e):
                    return Error(e)

        return LazyCoroResult(execute)

    def apply_coupon(
        self,
        code: str | None,
        cart: CartSnapshot,
        *,
        now: datetime | None = None,
    ) -> LazyCoroResult[AppliedDiscount, PromotionError | LookupFailure]:
        """Resolve a customer-entered code and price it against the cart."""

        async def execute() -> Result[AppliedDiscount, PromotionError | LookupFailure]:
            match await self._load_promotions():
                case Ok(promotions):
                    return await _apply_coupon(
                        self._matcher, promotions, self._tenant, code, cart, self._now(now),
                    )
                case Error(e):
                    return Error(e)

        return LazyCoroResult(execute)

    @staticmethod
    def select_stack(applied: Iterable[AppliedDiscount]) -> list[AppliedDiscount]:
        """Discounts that may be combined, in priority order."""
        return _select_stack(applied)

    # ═══════════════════════════════════════════════════════════════════════════
    # Redemption
    # ═══════════════════════════════════════════════════════════════════════════

    async def _find_promotion(self, promotion_id: str) -> Result[Promotion | None, LookupFailure]:
        match await self._load_promotions():
            case Ok(promotions):
                for promotion in promotions:
                    if promotion.id == promotion_id and promotion.tenant == self._tenant:
                        return Ok(promotion)
                return Ok(None)
            case Error(e):
                return Error(e)

    def redeem_promotion(
        self,
        promotion_id: str,
        order_id: str,
        amount: Amount = ZERO,
        currency: str | None = None,
        *,
        user_id: str | None = None,
        limits: Limits | None = None,
        now: datetime | None = None,
    ) -> LazyCoroResult[RedeemOutcome, RedemptionError | LookupFailure]:
        """
        Record that a promotion was applied to an order.

        Checks, in order:
            1. the promotion exists for the tenant (notFound)
            2. a row for (promotion, order) already exists → returned as duplicate
            3. active, published and in window (notPublished)
            4. first-order-only (redeemFirstOrderOnly)
            5. usage limits (limitReached / perUserLimitReached)

        Step 5 reads counts before the insert. In guarded mode the store
        enforces the same limits again inside the insert, so concurrent
        checkouts cannot both take the last use.
        """

        async def execute() -> Result[RedeemOutcome, RedemptionError | LookupFailure]:
            match await self._find_promotion(promotion_id):
                case Ok(None):
                    logger.warning("Redemption refused: promotion %s not found", promotion_id)
                    return Error(RedemptionError(
                        RedemptionErrorKind.NOT_FOUND,
                        f"Promotion {promotion_id!r} not found for tenant {self._tenant!r}",
                    ))
                case Ok(promotion):
                    pass
                case Error(e):
                    return Error(e)

            match await self._ledger.get(promotion_id, order_id):
                case Ok(None):
                    pass
                case Ok(existing):
                    logger.info("Promotion %s already redeemed on order %s", promotion_id, order_id)
                    return Ok(RedeemOutcome(existing, duplicate=True))
                case Error(e):
                    return Error(e)

            match await self._matcher.failed_redeem_gate(promotion, user_id or None, self._now(now)):
                case Ok(None):
                    pass
                case Ok(gate):
                    kind, reason = _REFUSALS[gate]
                    logger.warning("Redemption of %s on order %s refused: %s", promotion_id, order_id, reason)
                    return Error(RedemptionError(kind, f"Promotion {promotion_id} {reason}"))
                case Error(e):
                    return Error(e)

            guard = limits if limits is not None else Limits(
                usage_limit=promotion.rules.usage_limit,
                per_user_limit=promotion.rules.per_user_limit,
            )
            return await self._ledger.redeem(
                promotion_id,
                order_id,
                amount,
                currency,
                user_id=user_id,
                limits=guard,
            )

        return LazyCoroResult(execute)


__all__ = (
    "Engine",
)
