"""
Pricing — price entries, variants, modifier rules, priced lines.

    from cartwright import pricing as P

    amount = P.select_price(variant.prices, PriceKind.BASE, quantity=2, now=now)

    pricer = P.LinePricer("acme", catalog)
    result = await pricer.price(item, P.CartLine("margherita", variant_code="large"), now=now)

Pure pieces (select_price, resolve_variant, validate_modifiers) are plain
functions; LinePricer is async only for external price-list lookups.
"""

from cartwright.pricing._types import (
    ModifierSelection,
    CartLine,
    PricedModifier,
    PriceComponents,
    LineSnapshot,
    PricedLine,
    PricedCart,
    PricingErrorKind,
    PricingError,
)
from cartwright.pricing._select import (
    KIND_PREFERENCE,
    select_entry,
    select_price,
)
from cartwright.pricing._variant import (
    variant_matches,
    resolve_variant,
)
from cartwright.pricing._modifiers import validate_modifiers
from cartwright.pricing._line import (
    LineResult,
    build_snapshot,
    LinePricer,
)

__all__ = (
    # Types
    "ModifierSelection",
    "CartLine",
    "PricedModifier",
    "PriceComponents",
    "LineSnapshot",
    "PricedLine",
    "PricedCart",
    "PricingErrorKind",
    "PricingError",
    # Selection
    "KIND_PREFERENCE",
    "select_entry",
    "select_price",
    # Variants
    "variant_matches",
    "resolve_variant",
    # Modifiers
    "validate_modifiers",
    # Lines
    "LineResult",
    "build_snapshot",
    "LinePricer",
)
