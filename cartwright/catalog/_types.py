"""
Catalog types — what the engine reads, never writes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from cartwright._config import as_utc
from cartwright._types import Amount, Money, TranslatedLabel, ZERO


# ═══════════════════════════════════════════════════════════════════════════════
# Price Entries
# ═══════════════════════════════════════════════════════════════════════════════


class PriceKind(Enum):
    """Kind of an embedded price entry."""

    BASE = "base"
    DEPOSIT = "deposit"
    SURCHARGE = "surcharge"
    DISCOUNT = "discount"  # authored in the catalog, never selected here


class Channel(Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"
    DINEIN = "dinein"


@dataclass(frozen=True, slots=True)
class PriceEntry:
    """
    A time-bounded amount for one price kind.

    min_qty: quantity threshold (tiered pricing).
    active_from / active_to: inclusive window, open when None. Naive
    datetimes are read as UTC.
    """

    kind: PriceKind
    value: Money
    min_qty: int | None = None
    active_from: datetime | None = None
    active_to: datetime | None = None
    channels: tuple[Channel, ...] = ()

    def is_active_at(self, now: datetime) -> bool:
        now = as_utc(now)
        if self.active_from is not None and as_utc(self.active_from) > now:
            return False
        if self.active_to is not None and as_utc(self.active_to) < now:
            return False
        return True


# ═══════════════════════════════════════════════════════════════════════════════
# Variant & Modifiers
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Variant:
    """
    A purchasable size/configuration of a catalog item.

    Note: price_list_item / deposit_price_list_item reference external
    price-list records and win over embedded prices when set.
    price / deposit are legacy flat amounts, used last.
    """

    code: str
    name: TranslatedLabel = field(default_factory=lambda: TranslatedLabel())
    slug: str | None = None
    size_label: TranslatedLabel = field(default_factory=lambda: TranslatedLabel())
    is_default: bool = False
    is_active: bool = True
    prices: tuple[PriceEntry, ...] = ()
    price_list_item: str | None = None
    deposit_price_list_item: str | None = None
    price: Amount | None = None
    deposit: Amount | None = None


@dataclass(frozen=True, slots=True)
class ModifierOption:
    code: str
    name: TranslatedLabel = field(default_factory=lambda: TranslatedLabel())
    prices: tuple[PriceEntry, ...] = ()
    price_list_item: str | None = None


@dataclass(frozen=True, slots=True)
class ModifierGroup:
    """
    A named set of add-ons with cardinality rules.

    min_select defaults to 1 when required, else 0.
    max_select defaults to unbounded.
    """

    code: str
    options: tuple[ModifierOption, ...] = ()
    name: TranslatedLabel = field(default_factory=lambda: TranslatedLabel())
    is_required: bool = False
    min_select: int | None = None
    max_select: int | None = None

    @property
    def effective_min(self) -> int:
        if self.min_select is None:
            return 1 if self.is_required else 0
        return max(0, self.min_select)

    @property
    def effective_max(self) -> int | None:
        return self.max_select

    def option(self, code: str) -> ModifierOption | None:
        for opt in self.options:
            if opt.code == code:
                return opt
        return None


# ═══════════════════════════════════════════════════════════════════════════════
# Display data (frozen into line snapshots)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Image:
    url: str
    thumbnail: str | None = None


@dataclass(frozen=True, slots=True)
class LabeledCode:
    """Allergen/additive code with its localized label."""

    key: str
    value: TranslatedLabel = field(default_factory=lambda: TranslatedLabel())


@dataclass(frozen=True, slots=True)
class Dietary:
    vegetarian: bool = False
    vegan: bool = False
    contains_alcohol: bool = False
    spicy_level: int | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog Item
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CatalogItem:
    """A sellable thing, e.g. a menu item."""

    id: str
    tenant: str
    code: str
    name: TranslatedLabel = field(default_factory=lambda: TranslatedLabel())
    slug: str | None = None
    variants: tuple[Variant, ...] = ()
    modifier_groups: tuple[ModifierGroup, ...] = ()
    category_ids: tuple[str, ...] = ()
    images: tuple[Image, ...] = ()
    allergens: tuple[LabeledCode, ...] = ()
    additives: tuple[LabeledCode, ...] = ()
    dietary: Dietary | None = None
    is_active: bool = True
    is_published: bool = True
    base_price: Amount | None = None
    deposit: Amount | None = None

    @property
    def active_variants(self) -> tuple[Variant, ...]:
        return tuple(v for v in self.variants if v.is_active)

    def group(self, code: str) -> ModifierGroup | None:
        for group in self.modifier_groups:
            if group.code == code:
                return group
        return None


@dataclass(frozen=True, slots=True)
class ExternalPrice:
    """Amount and currency resolved from an external price-list record."""

    amount: Amount = ZERO
    currency: str | None = None


__all__ = (
    "PriceKind",
    "Channel",
    "PriceEntry",
    "Variant",
    "ModifierOption",
    "ModifierGroup",
    "Image",
    "LabeledCode",
    "Dietary",
    "CatalogItem",
    "ExternalPrice",
)
