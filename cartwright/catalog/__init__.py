"""
Catalog — read-only item, variant, modifier and price-entry model.

    from cartwright import catalog as K

    item = K.CatalogItem(
        id="margherita",
        tenant="acme",
        code="margherita",
        variants=(
            K.Variant(
                code="large",
                is_default=True,
                prices=(K.PriceEntry(K.PriceKind.BASE, Money(Decimal("12.50"), "EUR")),),
            ),
        ),
    )
    catalog = K.MemoryCatalog().add_item(item)
"""

from cartwright.catalog._types import (
    PriceKind,
    Channel,
    PriceEntry,
    Variant,
    ModifierOption,
    ModifierGroup,
    Image,
    LabeledCode,
    Dietary,
    CatalogItem,
    ExternalPrice,
)
from cartwright.catalog._lookup import (
    CatalogLookup,
    PriceListLookup,
    MemoryCatalog,
)

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
    "CatalogLookup",
    "PriceListLookup",
    "MemoryCatalog",
)
