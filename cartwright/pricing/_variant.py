"""
Variant resolution — explicit code, default, or the sole active variant.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from kungfu import Result, Ok, Error

from cartwright.catalog import Variant
from cartwright.pricing._types import PricingError, PricingErrorKind


def _norm(value: object) -> str:
    return str(value or "").strip().lower()


def _label_matches(label: Mapping[str, str] | None, key: str) -> bool:
    if not label:
        return False
    return any(_norm(text) == key for text in label.values())


def variant_matches(variant: Variant, requested: str | None) -> bool:
    """
    Loose match against code, slug, and every localized name/size label.

    Note: Storefronts may submit a human label ("Large") instead of a code.
    """
    key = _norm(requested)
    if not key:
        return False
    if _norm(variant.code) == key or _norm(variant.slug) == key:
        return True
    return _label_matches(variant.name, key) or _label_matches(variant.size_label, key)


def resolve_variant(
    variants: Iterable[Variant],
    requested_code: str | None = None,
) -> Result[Variant | None, PricingError]:
    """
    Pick the variant a line is priced against.

    Order:
        1. any active variant matching requested_code
        2. the active variant flagged default
        3. the only active variant
    Several active variants with no default and no match → variantRequired.
    No active variants at all → Ok(None); the item prices from its own
    legacy fields.
    """
    active = [v for v in variants if v.is_active]

    if requested_code:
        for variant in active:
            if variant_matches(variant, requested_code):
                return Ok(variant)

    for variant in active:
        if variant.is_default:
            return Ok(variant)

    if len(active) == 1:
        return Ok(active[0])

    if len(active) > 1:
        return Error(PricingError(
            PricingErrorKind.VARIANT_REQUIRED,
            "Item has several variants and none is default; a variant code is required",
        ))

    return Ok(None)


__all__ = (
    "variant_matches",
    "resolve_variant",
)
