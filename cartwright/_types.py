"""
Core types for cartwright.

Re-exports from kungfu + money helpers and the lookup failure shared by
every module that talks to a collaborator.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TypedDict

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Amount = Decimal
"""Monetary amount in major currency units."""

ZERO: Amount = Decimal(0)


def to_amount(value: object) -> Amount:
    """
    Coerce a number-ish value into an Amount.

    Non-numeric input, NaN and infinities become zero.
    """
    if isinstance(value, Decimal):
        amount = value
    elif value is None or isinstance(value, bool):
        return ZERO
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return ZERO
    if not amount.is_finite():
        return ZERO
    return amount


def normalize_currency(code: str | None, fallback: str) -> str:
    """Upper-case currency code, falling back when blank."""
    code = (code or "").strip().upper()
    return code or fallback.strip().upper()


@dataclass(frozen=True, slots=True)
class Money:
    """An amount with its currency."""

    amount: Amount
    currency: str


# ═══════════════════════════════════════════════════════════════════════════════
# Localized labels
# ═══════════════════════════════════════════════════════════════════════════════

SUPPORTED_LOCALES = ("tr", "en", "de", "pl", "fr", "es")


class TranslatedLabel(TypedDict, total=False):
    """Fixed-key record of localized strings."""

    tr: str
    en: str
    de: str
    pl: str
    fr: str
    es: str


# ═══════════════════════════════════════════════════════════════════════════════
# Lookup Failure — collaborator errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LookupFailure:
    """
    A collaborator (catalog, price list, order counter, promotion source)
    raised instead of answering.

    Note: Never folded into a zero price or an empty promotion list.
    """

    source: str
    message: str
    cause: Exception | None = None

    @classmethod
    def capture(cls, source: str):
        """Build an ``on_error`` callback for ``catching_async``."""

        def _on_error(exc: Exception) -> LookupFailure:
            return cls(source=source, message=f"{source} lookup failed: {exc}", cause=exc)

        return _on_error


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Money
    "Amount",
    "ZERO",
    "to_amount",
    "normalize_currency",
    "Money",
    # Labels
    "SUPPORTED_LOCALES",
    "TranslatedLabel",
    # Errors
    "LookupFailure",
)
