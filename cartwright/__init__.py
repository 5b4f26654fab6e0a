"""
cartwright — order-line pricing and promotion engine.

    from cartwright import catalog as K      # Catalog items, price entries
    from cartwright import pricing as P      # Variants, modifiers, line pricing
    from cartwright import promotions as PR  # Matching, discounts, coupons
    from cartwright import redemption as R   # Idempotent redemption ledger

    engine = Engine("acme", catalog=..., price_list=..., orders=...,
                    promotions=..., store=R.MemoryRedemptionStore())
"""

from cartwright import catalog
from cartwright import pricing
from cartwright import promotions
from cartwright import redemption
from cartwright._config import (
    Clock,
    utc_now,
    as_utc,
    EngineConfig,
)
from cartwright._types import (
    Result,
    Ok,
    Error,
    LazyCoroResult,
    Amount,
    ZERO,
    to_amount,
    normalize_currency,
    Money,
    SUPPORTED_LOCALES,
    TranslatedLabel,
    LookupFailure,
)
from cartwright._engine import Engine

__version__ = "0.1.0"

__all__ = (
    "catalog",
    "pricing",
    "promotions",
    "redemption",
    "Clock",
    "utc_now",
    "as_utc",
    "EngineConfig",
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    "Amount",
    "ZERO",
    "to_amount",
    "normalize_currency",
    "Money",
    "SUPPORTED_LOCALES",
    "TranslatedLabel",
    "LookupFailure",
    "Engine",
)
