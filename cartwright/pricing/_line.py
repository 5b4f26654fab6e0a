"""
Line pricing — variant + modifiers + price entries → PricedLine.

Pure with respect to its inputs plus ``now``; the only I/O is the
read-only external price-list lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType

from kungfu import Result, Ok, Error
from combinators import lift as L

from cartwright._types import Amount, ZERO, LookupFailure, normalize_currency, to_amount
from cartwright.catalog import (
    CatalogItem,
    ExternalPrice,
    PriceEntry,
    PriceKind,
    PriceListLookup,
    Variant,
)
from cartwright.pricing._modifiers import validate_modifiers
from cartwright.pricing._select import select_price
from cartwright.pricing._types import (
    CartLine,
    LineSnapshot,
    PriceComponents,
    PricedLine,
    PricedModifier,
    PricingError,
    PricingErrorKind,
)
from cartwright.pricing._variant import resolve_variant

logger = logging.getLogger(__name__)

type LineResult = Result[PricedLine, PricingError | LookupFailure]


def _first_positive(*values: Amount | None) -> Amount:
    for value in values:
        amount = to_amount(value)
        if amount > 0:
            return amount
    return ZERO


def _frozen(label: Mapping[str, str] | None) -> Mapping[str, str] | None:
    if label is None:
        return None
    return MappingProxyType(dict(label))


def build_snapshot(item: CatalogItem, variant: Variant | None) -> LineSnapshot:
    """Copy display fields so later catalog edits never reach old orders."""
    image = None
    if item.images:
        first = item.images[0]
        image = first.thumbnail or first.url or None

    dietary = item.dietary
    return LineSnapshot(
        name=_frozen(item.name) or MappingProxyType({}),
        variant_name=_frozen(variant.name) if variant is not None and variant.name else None,
        size_label=_frozen(variant.size_label) if variant is not None and variant.size_label else None,
        image=image,
        allergens=tuple((a.key, _frozen(a.value) or MappingProxyType({})) for a in item.allergens),
        additives=tuple((a.key, _frozen(a.value) or MappingProxyType({})) for a in item.additives),
        vegetarian=dietary.vegetarian if dietary else None,
        vegan=dietary.vegan if dietary else None,
        contains_alcohol=dietary.contains_alcohol if dietary else None,
        spicy_level=dietary.spicy_level if dietary else None,
    )


class LinePricer:
    """
    Turns one cart line into a priced line for a tenant.

    Example:
        pricer = LinePricer("acme", price_list)
        result = await pricer.price(item, CartLine("margherita"), now=now)

        match result:
            case Ok(priced):
                print(priced.unit_price, priced.currency)
            case Error(e):
                print(e)
    """

    def __init__(self, tenant: str, price_list: PriceListLookup) -> None:
        self._tenant = tenant
        self._price_list = price_list

    async def _external(
        self,
        ref: str,
        currency: str,
    ) -> Result[ExternalPrice, LookupFailure]:
        return await L.catching_async(
            lambda: self._price_list.get_external_price(self._tenant, ref, currency),
            on_error=LookupFailure.capture("price list"),
        )

    async def _resolve(
        self,
        ref: str | None,
        entries: tuple[PriceEntry, ...],
        kind: PriceKind,
        quantity: int,
        currency: str,
        now: datetime,
    ) -> Result[tuple[Amount, str], LookupFailure]:
        """External ref wins and may switch currency; embedded entries otherwise."""
        if ref:
            match await self._external(ref, currency):
                case Ok(external):
                    return Ok((to_amount(external.amount), normalize_currency(external.currency, currency)))
                case Error(e):
                    return Error(e)
        return Ok((select_price(entries, kind, quantity, now), currency))

    async def price(
        self,
        item: CatalogItem,
        line: CartLine,
        *,
        now: datetime,
        fallback_currency: str = "TRY",
        deposit_included: bool = True,
    ) -> LineResult:
        """
        Price one unit of the line.

        Steps:
            1. resolve variant (variantRequired)
            2. validate modifiers (first violation)
            3. base: external ref → embedded base entries → legacy flat price
            4. deposit (only when included): same chain for deposit
            5. modifiers: option unit price × clamped quantity
            6. unit_price = base + deposit + modifiers_total
            7. frozen snapshot
        """
        match resolve_variant(item.variants, line.variant_code):
            case Ok(variant):
                pass
            case Error(e):
                return Error(e)

        match validate_modifiers(item, line.modifier_selections):
            case Error(e):
                return Error(e)
            case _:
                pass

        currency = normalize_currency(None, fallback_currency)
        quantity = line.clamped_quantity
        entries = variant.prices if variant is not None else ()

        # Base
        match await self._resolve(
            variant.price_list_item if variant is not None else None,
            entries, PriceKind.BASE, quantity, currency, now,
        ):
            case Ok((base, currency)):
                pass
            case Error(e):
                return Error(e)
        if not (variant is not None and variant.price_list_item):
            base = base or _first_positive(variant.price if variant else None, item.base_price)

        # Deposit
        deposit = ZERO
        if deposit_included:
            match await self._resolve(
                variant.deposit_price_list_item if variant is not None else None,
                entries, PriceKind.DEPOSIT, quantity, currency, now,
            ):
                case Ok((deposit, currency)):
                    pass
                case Error(e):
                    return Error(e)
            if not (variant is not None and variant.deposit_price_list_item):
                deposit = deposit or _first_positive(variant.deposit if variant else None, item.deposit)

        # Modifiers
        modifiers: list[PricedModifier] = []
        for sel in line.modifier_selections:
            group = item.group(sel.group_code)
            if group is None:
                return Error(PricingError(
                    PricingErrorKind.MODIFIER_GROUP_NOT_FOUND,
                    f"Modifier group {sel.group_code!r} does not exist on item {item.id!r}",
                    group_code=sel.group_code,
                ))
            option = group.option(sel.option_code)
            if option is None:
                return Error(PricingError(
                    PricingErrorKind.MODIFIER_OPTION_NOT_FOUND,
                    f"Option {sel.option_code!r} does not exist in group {group.code!r}",
                    group_code=group.code,
                    option_code=sel.option_code,
                ))

            qty = sel.clamped_quantity
            match await self._resolve(
                option.price_list_item, option.prices, PriceKind.SURCHARGE, qty, currency, now,
            ):
                case Ok((option_unit, currency)):
                    pass
                case Error(e):
                    return Error(e)

            modifiers.append(PricedModifier(
                code=f"{group.code}:{option.code}",
                quantity=qty,
                unit_price=option_unit,
                total=option_unit * qty,
            ))

        modifiers_total = sum((m.total for m in modifiers), ZERO)
        unit_price = base + deposit + modifiers_total

        logger.debug(
            "Priced %s/%s: base=%s deposit=%s modifiers=%s %s",
            self._tenant, item.id, base, deposit, modifiers_total, currency,
        )

        return Ok(PricedLine(
            unit_price=unit_price,
            currency=currency,
            components=PriceComponents(
                base=base,
                deposit=deposit,
                modifiers_total=modifiers_total,
                modifiers=tuple(modifiers),
                currency=currency,
            ),
            snapshot=build_snapshot(item, variant),
            quantity=quantity,
            selected_variant_code=variant.code if variant is not None else None,
            catalog_item_id=item.id,
        ))


__all__ = (
    "LineResult",
    "build_snapshot",
    "LinePricer",
)
