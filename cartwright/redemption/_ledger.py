"""
Redemption ledger — idempotent record of promotions applied to orders.

Key insight: redeem is an insert-if-absent. Calling it twice for the same
(promotion, order) returns the first row both times and never creates a
second one, so callers may retry freely.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error, LazyCoroResult

from cartwright._types import Amount, ZERO, normalize_currency, to_amount
from cartwright.redemption._store import RedemptionStore, StoreError
from cartwright.redemption._types import (
    InsertState,
    Limits,
    NewRedemption,
    RedeemOutcome,
    Redemption,
    RedemptionError,
    RedemptionErrorKind,
)

logger = logging.getLogger(__name__)


def _store_error(e: StoreError) -> RedemptionError:
    return RedemptionError(RedemptionErrorKind.STORE_ERROR, e.message, e.cause)


class RedemptionLedger:
    """
    Tenant-bound view over a RedemptionStore.

    Also serves as the matcher's usage counter (count_total/count_for_user).

    Note: with guarded=False, limits passed to redeem are ignored and only
    the matcher's earlier check applies. Two concurrent checkouts can then
    both redeem the last remaining use.
    """

    def __init__(
        self,
        tenant: str,
        store: RedemptionStore,
        *,
        guarded: bool = False,
        fallback_currency: str = "TRY",
    ) -> None:
        self._tenant = tenant
        self._store = store
        self._guarded = guarded
        self._fallback_currency = fallback_currency

    @property
    def tenant(self) -> str:
        return self._tenant

    def redeem(
        self,
        promotion_id: str,
        order_id: str,
        amount: Amount = ZERO,
        currency: str | None = None,
        *,
        user_id: str | None = None,
        limits: Limits | None = None,
    ) -> LazyCoroResult[RedeemOutcome, RedemptionError]:
        """
        Record that promotion_id was applied to order_id.

        Returns lazy result — awaits when needed.
        """

        async def execute() -> Result[RedeemOutcome, RedemptionError]:
            new = NewRedemption(
                tenant=self._tenant,
                promotion_id=promotion_id,
                order_id=order_id,
                amount=max(ZERO, to_amount(amount)),
                currency=normalize_currency(currency, self._fallback_currency),
                user_id=user_id or None,
            )
            guard = limits if self._guarded else None

            match await self._store.insert(new, guard):
                case Ok(outcome):
                    pass
                case Error(e):
                    logger.warning("Redemption %s failed: %s", new.key, e.message)
                    return Error(_store_error(e))

            match outcome.state:
                case InsertState.CREATED if outcome.redemption is not None:
                    logger.info(
                        "Redeemed promotion %s on order %s (%s %s)",
                        promotion_id, order_id, new.amount, new.currency,
                    )
                    return Ok(RedeemOutcome(outcome.redemption, duplicate=False))
                case InsertState.DUPLICATE if outcome.redemption is not None:
                    logger.info("Redemption %s already recorded", new.key)
                    return Ok(RedeemOutcome(outcome.redemption, duplicate=True))
                case InsertState.LIMIT_REACHED:
                    logger.warning("Redemption %s refused: usage limit reached", new.key)
                    return Error(RedemptionError(
                        RedemptionErrorKind.LIMIT_REACHED,
                        f"Promotion {promotion_id} reached its usage limit",
                    ))
                case InsertState.PER_USER_LIMIT_REACHED:
                    logger.warning("Redemption %s refused: per-user limit reached", new.key)
                    return Error(RedemptionError(
                        RedemptionErrorKind.PER_USER_LIMIT_REACHED,
                        f"User {user_id} reached the limit for promotion {promotion_id}",
                    ))
                case _:
                    return Error(RedemptionError(
                        RedemptionErrorKind.STORE_ERROR,
                        f"Store returned no row for {new.key}",
                    ))

        return LazyCoroResult(execute)

    async def get(self, promotion_id: str, order_id: str) -> Result[Redemption | None, RedemptionError]:
        match await self._store.get(self._tenant, promotion_id, order_id):
            case Ok(row):
                return Ok(row)
            case Error(e):
                return Error(_store_error(e))

    async def count_total(self, promotion_id: str) -> Result[int, RedemptionError]:
        match await self._store.count(self._tenant, promotion_id):
            case Ok(n):
                return Ok(n)
            case Error(e):
                return Error(_store_error(e))

    async def count_for_user(self, promotion_id: str, user_id: str) -> Result[int, RedemptionError]:
        match await self._store.count(self._tenant, promotion_id, user_id):
            case Ok(n):
                return Ok(n)
            case Error(e):
                return Error(_store_error(e))


__all__ = (
    "RedemptionLedger",
)
