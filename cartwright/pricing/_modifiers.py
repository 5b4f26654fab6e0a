"""
Modifier rules — cardinality and option validity per group.
"""

from __future__ import annotations

from collections.abc import Iterable

from kungfu import Result, Ok, Error

from cartwright.catalog import CatalogItem, ModifierGroup
from cartwright.pricing._types import ModifierSelection, PricingError, PricingErrorKind


def _check_group(
    group: ModifierGroup,
    chosen: list[ModifierSelection],
) -> PricingError | None:
    count = sum(sel.clamped_quantity for sel in chosen)

    if group.is_required and count < 1:
        return PricingError(
            PricingErrorKind.MODIFIER_REQUIRED_MISSING,
            f"Modifier group {group.code!r} is required",
            group_code=group.code,
        )
    if count < group.effective_min:
        return PricingError(
            PricingErrorKind.MODIFIER_MIN_NOT_MET,
            f"Modifier group {group.code!r} needs at least {group.effective_min} selections, got {count}",
            group_code=group.code,
        )
    maximum = group.effective_max
    if maximum is not None and count > maximum:
        return PricingError(
            PricingErrorKind.MODIFIER_MAX_EXCEEDED,
            f"Modifier group {group.code!r} allows at most {maximum} selections, got {count}",
            group_code=group.code,
        )

    for sel in chosen:
        if group.option(sel.option_code) is None:
            return PricingError(
                PricingErrorKind.MODIFIER_OPTION_INVALID,
                f"Option {sel.option_code!r} is not part of modifier group {group.code!r}",
                group_code=group.code,
                option_code=sel.option_code,
            )
    return None


def validate_modifiers(
    item: CatalogItem,
    selections: Iterable[ModifierSelection],
) -> Result[None, PricingError]:
    """
    Validate selections against every modifier group of the item.

    All-or-nothing: the first violation aborts. Groups are checked in
    catalog order; selections addressed to unknown groups are left to the
    pricing stage (modifierGroupNotFound).
    """
    selections = tuple(selections)
    if not item.modifier_groups and not selections:
        return Ok(None)

    by_group: dict[str, list[ModifierSelection]] = {}
    for sel in selections:
        by_group.setdefault(sel.group_code, []).append(sel)

    for group in item.modifier_groups:
        violation = _check_group(group, by_group.get(group.code, []))
        if violation is not None:
            return Error(violation)

    return Ok(None)


__all__ = ("validate_modifiers",)
