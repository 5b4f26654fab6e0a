"""
Catalog lookups — collaborator protocols.

The engine never owns catalog persistence; callers implement these.
"""

from __future__ import annotations

from typing import Protocol

from cartwright._types import to_amount, normalize_currency
from cartwright.catalog._types import CatalogItem, ExternalPrice

# ═══════════════════════════════════════════════════════════════════════════════
# Protocols — Users Implement These
# ═══════════════════════════════════════════════════════════════════════════════


class CatalogLookup(Protocol):
    """
    Tenant-scoped catalog access.

    Example:
        class MongoCatalog:
            def __init__(self, db: AsyncDatabase) -> None:
                self.db = db

            async def get_catalog_item(self, tenant: str, item_id: str) -> CatalogItem | None:
                doc = await self.db.menuitems.find_one({"_id": item_id, "tenant": tenant})
                return to_catalog_item(doc) if doc else None
    """

    async def get_catalog_item(self, tenant: str, item_id: str) -> CatalogItem | None:
        """Return the item, or None when the tenant has no such item."""
        ...


class PriceListLookup(Protocol):
    """External price-list records referenced by variants and options."""

    async def get_external_price(
        self,
        tenant: str,
        price_list_item_id: str,
        fallback_currency: str,
    ) -> ExternalPrice:
        """
        Resolve amount + currency.

        A missing record resolves to zero in the fallback currency.
        """
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Catalog — For Testing
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCatalog:
    """
    In-memory catalog and price list.

    Note: single-process / tests only. Implements both CatalogLookup and
    PriceListLookup.
    """

    def __init__(self) -> None:
        self._items: dict[tuple[str, str], CatalogItem] = {}
        self._prices: dict[tuple[str, str], tuple[object, str | None]] = {}

    def add_item(self, item: CatalogItem) -> MemoryCatalog:
        self._items[(item.tenant, item.id)] = item
        return self

    def add_price(
        self,
        tenant: str,
        price_list_item_id: str,
        amount: object,
        currency: str | None = None,
    ) -> MemoryCatalog:
        self._prices[(tenant, price_list_item_id)] = (amount, currency)
        return self

    async def get_catalog_item(self, tenant: str, item_id: str) -> CatalogItem | None:
        return self._items.get((tenant, item_id))

    async def get_external_price(
        self,
        tenant: str,
        price_list_item_id: str,
        fallback_currency: str,
    ) -> ExternalPrice:
        record = self._prices.get((tenant, price_list_item_id))
        if record is None:
            return ExternalPrice(currency=normalize_currency(None, fallback_currency))
        amount, currency = record
        return ExternalPrice(
            amount=to_amount(amount),
            currency=normalize_currency(currency, fallback_currency),
        )


__all__ = (
    "CatalogLookup",
    "PriceListLookup",
    "MemoryCatalog",
)
