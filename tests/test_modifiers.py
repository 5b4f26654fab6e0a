import pytest

from cartwright.pricing import ModifierSelection, PricingErrorKind, validate_modifiers

from builders import err, group, item, ok, option, variant


def _pizza(*, required: bool = False, min_select: int | None = 1, max_select: int | None = 2):
    toppings = group(
        "toppings",
        option("olives", 5),
        option("cheese", 10),
        option("basil", 3),
        is_required=required,
        min_select=min_select,
        max_select=max_select,
    )
    return item("pizza", variant("regular", base=100), groups=(toppings,))


def _pick(*codes: str, quantity: int | None = None) -> tuple[ModifierSelection, ...]:
    return tuple(ModifierSelection("toppings", code, quantity) for code in codes)


@pytest.mark.parametrize("codes", [("olives",), ("olives", "cheese")])
def test_min_one_max_two_accepts_one_or_two(codes: tuple[str, ...]) -> None:
    assert ok(validate_modifiers(_pizza(), _pick(*codes))) is None


def test_min_one_max_two_rejects_three() -> None:
    e = err(validate_modifiers(_pizza(), _pick("olives", "cheese", "basil")))
    assert e.kind is PricingErrorKind.MODIFIER_MAX_EXCEEDED
    assert e.group_code == "toppings"


def test_zero_selections_in_required_group() -> None:
    e = err(validate_modifiers(_pizza(required=True), ()))
    assert e.kind is PricingErrorKind.MODIFIER_REQUIRED_MISSING


def test_zero_selections_in_optional_group_with_min() -> None:
    e = err(validate_modifiers(_pizza(required=False, min_select=1), ()))
    assert e.kind is PricingErrorKind.MODIFIER_MIN_NOT_MET


def test_optional_group_without_min_accepts_nothing() -> None:
    assert ok(validate_modifiers(_pizza(min_select=None), ())) is None


def test_required_group_defaults_min_to_one() -> None:
    pizza = _pizza(required=True, min_select=None)
    assert ok(validate_modifiers(pizza, _pick("olives"))) is None


def test_quantities_count_toward_max() -> None:
    e = err(validate_modifiers(_pizza(), _pick("olives", quantity=3)))
    assert e.kind is PricingErrorKind.MODIFIER_MAX_EXCEEDED


def test_non_positive_quantities_count_as_one() -> None:
    assert ok(validate_modifiers(_pizza(), _pick("olives", quantity=0))) is None
    assert ok(validate_modifiers(_pizza(), _pick("olives", quantity=-4))) is None


def test_unknown_option_in_known_group() -> None:
    e = err(validate_modifiers(_pizza(), _pick("pineapple")))
    assert e.kind is PricingErrorKind.MODIFIER_OPTION_INVALID
    assert e.option_code == "pineapple"


def test_unknown_group_is_left_to_pricing() -> None:
    plain = item("plain", variant("regular", base=10))
    assert ok(validate_modifiers(plain, (ModifierSelection("sauces", "bbq"),))) is None
