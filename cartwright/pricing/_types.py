"""
Pricing types — cart lines in, priced lines out.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from cartwright._types import Amount, ZERO

# ═══════════════════════════════════════════════════════════════════════════════
# Input — Cart Line
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ModifierSelection:
    group_code: str
    option_code: str
    quantity: int | None = None

    @property
    def clamped_quantity(self) -> int:
        """Missing, zero or negative quantities count as 1."""
        return max(1, self.quantity or 1)


@dataclass(frozen=True, slots=True)
class CartLine:
    """
    One requested line: catalog item + variant + modifiers + quantity.

    deposit_included=None defers to EngineConfig.deposit_included_default.
    """

    catalog_item_id: str
    quantity: int = 1
    variant_code: str | None = None
    modifier_selections: tuple[ModifierSelection, ...] = ()
    deposit_included: bool | None = None

    @property
    def clamped_quantity(self) -> int:
        return max(1, self.quantity or 1)


# ═══════════════════════════════════════════════════════════════════════════════
# Output — Priced Line
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PricedModifier:
    code: str  # "<group>:<option>"
    quantity: int
    unit_price: Amount
    total: Amount


@dataclass(frozen=True, slots=True)
class PriceComponents:
    base: Amount
    deposit: Amount
    modifiers_total: Amount
    modifiers: tuple[PricedModifier, ...]
    currency: str


@dataclass(frozen=True, slots=True)
class LineSnapshot:
    """
    Catalog display data frozen at order time.

    Note: Copies, not references — historical orders keep rendering the
    same even after the catalog changes. Label mappings are read-only.
    """

    name: Mapping[str, str] = field(default_factory=dict)
    variant_name: Mapping[str, str] | None = None
    size_label: Mapping[str, str] | None = None
    image: str | None = None
    allergens: tuple[tuple[str, Mapping[str, str]], ...] = ()
    additives: tuple[tuple[str, Mapping[str, str]], ...] = ()
    vegetarian: bool | None = None
    vegan: bool | None = None
    contains_alcohol: bool | None = None
    spicy_level: int | None = None


@dataclass(frozen=True, slots=True)
class PricedLine:
    unit_price: Amount
    currency: str
    components: PriceComponents
    snapshot: LineSnapshot
    quantity: int = 1
    selected_variant_code: str | None = None
    catalog_item_id: str | None = None

    @property
    def line_total(self) -> Amount:
        return self.unit_price * self.quantity


@dataclass(frozen=True, slots=True)
class PricedCart:
    """All lines of one order, priced."""

    lines: tuple[PricedLine, ...]
    currency: str

    @property
    def subtotal(self) -> Amount:
        return sum((line.line_total for line in self.lines), ZERO)


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class PricingErrorKind(Enum):
    """Kinds of pricing errors. Values are the user-facing message keys."""

    MENU_ITEM_NOT_FOUND = "menuItemNotFound"
    VARIANT_REQUIRED = "variantRequired"
    MODIFIER_REQUIRED_MISSING = "modifierRequiredMissing"
    MODIFIER_MIN_NOT_MET = "modifierMinNotMet"
    MODIFIER_MAX_EXCEEDED = "modifierMaxExceeded"
    MODIFIER_OPTION_INVALID = "modifierOptionInvalid"
    MODIFIER_GROUP_NOT_FOUND = "modifierGroupNotFound"
    MODIFIER_OPTION_NOT_FOUND = "modifierOptionNotFound"


@dataclass(frozen=True, slots=True)
class PricingError:
    """
    A rejected line — ordinary user input problem, never retried.

    group_code / option_code point at the offending modifier, if any.
    """

    kind: PricingErrorKind
    message: str
    group_code: str | None = None
    option_code: str | None = None

    @property
    def code(self) -> str:
        return self.kind.value


__all__ = (
    "ModifierSelection",
    "CartLine",
    "PricedModifier",
    "PriceComponents",
    "LineSnapshot",
    "PricedLine",
    "PricedCart",
    "PricingErrorKind",
    "PricingError",
)
