"""
Engine configuration — behavior knobs passed explicitly.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

type Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(moment: datetime) -> datetime:
    """Naive datetimes are read as UTC, so naive and aware values compare."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """
    Engine configuration.

    Fluent builder pattern — chain methods to configure.

    Example:
        config = (
            EngineConfig()
            .with_fallback_currency("EUR")
            .with_guarded_redemption()
            .with_clock(lambda: fixed_now)
        )

    Note: Immutable — each method returns new EngineConfig.
    Nothing here is read from the environment; callers build it.
    """

    fallback_currency: str = "TRY"
    deposit_included_default: bool = True
    # Off by default: limits are checked at evaluation time only and two
    # concurrent checkouts may both redeem past the limit.
    guarded_redemption: bool = False
    clock: Clock = field(default=utc_now)

    def with_fallback_currency(self, currency: str) -> EngineConfig:
        """
        Currency used when no external price-list record fixes one.

        Example:
            .with_fallback_currency("eur")  # stored as "EUR"
        """
        code = currency.strip().upper()
        if not code:
            raise ValueError("fallback currency must not be blank")
        return EngineConfig(
            fallback_currency=code,
            deposit_included_default=self.deposit_included_default,
            guarded_redemption=self.guarded_redemption,
            clock=self.clock,
        )

    def with_deposit_included(self, included: bool = True) -> EngineConfig:
        """Whether lines that do not say otherwise include the deposit."""
        return EngineConfig(
            fallback_currency=self.fallback_currency,
            deposit_included_default=included,
            guarded_redemption=self.guarded_redemption,
            clock=self.clock,
        )

    def with_guarded_redemption(self, guarded: bool = True) -> EngineConfig:
        """
        Make the redemption insert enforce usage limits itself.

        The store counts existing redemptions and inserts in one critical
        section, refusing past ``usage_limit`` / ``per_user_limit``.
        """
        return EngineConfig(
            fallback_currency=self.fallback_currency,
            deposit_included_default=self.deposit_included_default,
            guarded_redemption=guarded,
            clock=self.clock,
        )

    def with_clock(self, clock: Clock) -> EngineConfig:
        """Set the source of "now" for windows and timestamps."""
        return EngineConfig(
            fallback_currency=self.fallback_currency,
            deposit_included_default=self.deposit_included_default,
            guarded_redemption=self.guarded_redemption,
            clock=clock,
        )


__all__ = (
    "Clock",
    "utc_now",
    "as_utc",
    "EngineConfig",
)
