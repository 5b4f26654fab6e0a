from decimal import Decimal

from cartwright.catalog import PriceKind
from cartwright.pricing import select_entry, select_price

from builders import HOUR, NOW, d, entry


def test_no_entries_is_zero() -> None:
    assert select_price((), PriceKind.BASE, 1, NOW) == Decimal(0)
    assert select_price(None, PriceKind.BASE, 1, NOW) == Decimal(0)
    assert select_entry([entry(PriceKind.BASE, 10)], PriceKind.BASE, 1, None) is None


def test_picks_entry_of_requested_kind() -> None:
    entries = [entry(PriceKind.DEPOSIT, 5), entry(PriceKind.BASE, 42)]
    assert select_price(entries, PriceKind.BASE, 1, NOW) == d(42)
    assert select_price(entries, PriceKind.DEPOSIT, 1, NOW) == d(5)


def test_disjoint_windows_only_current_one_is_chosen() -> None:
    past = entry(PriceKind.BASE, 90, active_from=NOW - 3 * HOUR, active_to=NOW - HOUR)
    current = entry(PriceKind.BASE, 100, active_from=NOW - HOUR, active_to=NOW + HOUR)
    future = entry(PriceKind.BASE, 110, active_from=NOW + 2 * HOUR, active_to=NOW + 3 * HOUR)
    entries = [future, past, current]

    assert select_entry(entries, PriceKind.BASE, 1, NOW) is current
    assert select_price(entries, PriceKind.BASE, 1, NOW - 2 * HOUR) == d(90)
    assert select_price(entries, PriceKind.BASE, 1, NOW + HOUR + HOUR / 2) == d(0)


def test_selection_is_deterministic() -> None:
    entries = [
        entry(PriceKind.BASE, 10, active_from=NOW - HOUR),
        entry(PriceKind.BASE, 12, active_from=NOW - 2 * HOUR),
        entry(PriceKind.BASE, 8, min_qty=5),
    ]
    results = {select_price(entries, PriceKind.BASE, 1, NOW) for _ in range(20)}
    assert results == {d(10)}
    assert select_price(list(reversed(entries)), PriceKind.BASE, 1, NOW) == d(10)


def test_highest_min_qty_not_exceeding_quantity_wins() -> None:
    entries = [
        entry(PriceKind.BASE, 10),
        entry(PriceKind.BASE, 9, min_qty=3),
        entry(PriceKind.BASE, 8, min_qty=10),
    ]
    assert select_price(entries, PriceKind.BASE, 1, NOW) == d(10)
    assert select_price(entries, PriceKind.BASE, 4, NOW) == d(9)
    assert select_price(entries, PriceKind.BASE, 10, NOW) == d(8)


def test_window_bounds_are_inclusive() -> None:
    bounded = entry(PriceKind.BASE, 7, active_from=NOW, active_to=NOW)
    assert select_price([bounded], PriceKind.BASE, 1, NOW) == d(7)


def test_surcharge_falls_back_to_base_only_when_no_surcharge() -> None:
    base_only = [entry(PriceKind.BASE, 3)]
    both = [entry(PriceKind.BASE, 3), entry(PriceKind.SURCHARGE, 2)]

    assert select_price(base_only, PriceKind.SURCHARGE, 1, NOW) == d(3)
    assert select_price(both, PriceKind.SURCHARGE, 1, NOW) == d(2)
    # base never falls back to surcharge
    assert select_price([entry(PriceKind.SURCHARGE, 2)], PriceKind.BASE, 1, NOW) == d(0)


def test_discount_kind_is_never_used_for_base() -> None:
    assert select_price([entry(PriceKind.DISCOUNT, 5)], PriceKind.BASE, 1, NOW) == d(0)


def test_naive_and_aware_times_compare_as_utc() -> None:
    naive_now = NOW.replace(tzinfo=None)
    entries = [
        entry(PriceKind.BASE, 10, active_to=naive_now - HOUR),
        entry(PriceKind.BASE, 20, active_from=naive_now - HOUR),
        entry(PriceKind.BASE, 30, active_from=NOW - 2 * HOUR),
    ]
    assert select_price(entries, PriceKind.BASE, 1, NOW) == d(20)
    assert select_price(entries, PriceKind.BASE, 1, naive_now) == d(20)
