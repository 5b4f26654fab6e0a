"""
Price entry selection — one active entry per kind at an instant.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from cartwright._config import as_utc
from cartwright._types import Amount, ZERO, to_amount
from cartwright.catalog import PriceEntry, PriceKind

# Lookup strategy: exact kind first, then fallbacks in order.
# A base entry stands in for a surcharge only when no surcharge qualifies.
KIND_PREFERENCE: dict[PriceKind, tuple[PriceKind, ...]] = {
    PriceKind.BASE: (PriceKind.BASE,),
    PriceKind.DEPOSIT: (PriceKind.DEPOSIT,),
    PriceKind.SURCHARGE: (PriceKind.SURCHARGE, PriceKind.BASE),
    PriceKind.DISCOUNT: (PriceKind.DISCOUNT,),
}


def _rank(entry: PriceEntry) -> tuple[int, float]:
    active_from = as_utc(entry.active_from).timestamp() if entry.active_from else float("-inf")
    return (entry.min_qty or 0, active_from)


def _candidates(
    entries: Iterable[PriceEntry],
    kind: PriceKind,
    quantity: int,
    now: datetime,
) -> list[PriceEntry]:
    return [
        e
        for e in entries
        if e.kind is kind and e.is_active_at(now) and (e.min_qty or 0) <= quantity
    ]


def select_entry(
    entries: Iterable[PriceEntry] | None,
    kind: PriceKind,
    quantity: int = 1,
    now: datetime | None = None,
) -> PriceEntry | None:
    """
    Pick the applicable entry for ``kind`` at ``now``.

    Rules:
        1. window contains now (open bounds are unbounded)
        2. highest min_qty not exceeding quantity
        3. most recent active_from
    Each kind in KIND_PREFERENCE is tried in turn; the first kind with any
    candidate wins.
    """
    if not entries or now is None:
        return None
    entries = tuple(entries)
    quantity = max(1, quantity)

    for candidate_kind in KIND_PREFERENCE[kind]:
        candidates = _candidates(entries, candidate_kind, quantity, now)
        if candidates:
            return max(candidates, key=_rank)
    return None


def select_price(
    entries: Iterable[PriceEntry] | None,
    kind: PriceKind,
    quantity: int = 1,
    now: datetime | None = None,
) -> Amount:
    """
    Amount of the applicable entry, or 0.

    Never raises — absence of a price is zero, callers decide whether
    zero is acceptable.
    """
    entry = select_entry(entries, kind, quantity, now)
    if entry is None:
        return ZERO
    return to_amount(entry.value.amount)


__all__ = (
    "KIND_PREFERENCE",
    "select_entry",
    "select_price",
)
