"""
Redemption — idempotent ledger of promotions applied to orders.

    from cartwright import redemption as R

    ledger = R.RedemptionLedger("acme", R.MemoryRedemptionStore())

    match await ledger.redeem("promo_1", "order_42", Decimal("25"), "TRY", user_id="u1"):
        case Ok(outcome):
            outcome.duplicate  # True on retries
        case Error(e):
            e.kind  # LIMIT_REACHED / PER_USER_LIMIT_REACHED / STORE_ERROR

Engine.redeem_promotion adds the promotion checks on top
(NOT_FOUND / NOT_PUBLISHED / FIRST_ORDER_ONLY).

Durable storage:

    session_factory, engine = await R.create_database()
    ledger = R.RedemptionLedger("acme", R.SQLAlchemyRedemptionStore(session_factory))
"""

from cartwright.redemption._types import (
    redemption_key,
    Redemption,
    NewRedemption,
    Limits,
    InsertState,
    InsertOutcome,
    RedeemOutcome,
    RedemptionErrorKind,
    RedemptionError,
)
from cartwright.redemption._store import (
    new_redemption_id,
    StoreError,
    RedemptionStore,
    refusal,
    MemoryRedemptionStore,
)
from cartwright.redemption._sqlalchemy import (
    Base,
    RedemptionTable,
    SQLAlchemyRedemptionStore,
    create_database,
)
from cartwright.redemption._ledger import RedemptionLedger

__all__ = (
    # Types
    "redemption_key",
    "Redemption",
    "NewRedemption",
    "Limits",
    "InsertState",
    "InsertOutcome",
    "RedeemOutcome",
    "RedemptionErrorKind",
    "RedemptionError",
    # Store
    "new_redemption_id",
    "StoreError",
    "RedemptionStore",
    "refusal",
    "MemoryRedemptionStore",
    # SQLAlchemy
    "Base",
    "RedemptionTable",
    "SQLAlchemyRedemptionStore",
    "create_database",
    # Ledger
    "RedemptionLedger",
)
