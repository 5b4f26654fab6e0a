"""
SQLAlchemy integration — durable redemption store.

Usage:
    session_factory, engine = await create_database("sqlite+aiosqlite:///promo.db")
    store = SQLAlchemyRedemptionStore(session_factory)
    ledger = RedemptionLedger("acme", store)

The unique constraint on (tenant, promotion_id, order_id) is what makes
redemption idempotent across processes: a losing concurrent insert hits
IntegrityError and reads back the winner's row.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    Index,
    Numeric,
    String,
    UniqueConstraint,
    func,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kungfu import Result, Ok, Error

from cartwright._config import Clock, as_utc, utc_now
from cartwright.redemption._store import StoreError, new_redemption_id, refusal
from cartwright.redemption._types import (
    InsertOutcome,
    InsertState,
    Limits,
    NewRedemption,
    Redemption,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Base
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# Redemptions Table
# ═══════════════════════════════════════════════════════════════════════════════


class RedemptionTable(Base):
    """One row per (tenant, promotion, order). Rows are never updated."""

    __tablename__ = "promotion_redemptions"
    __table_args__ = (
        UniqueConstraint("tenant", "promotion_id", "order_id", name="uq_redemption_order"),
        Index("ix_redemption_user", "tenant", "promotion_id", "user_id"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    tenant: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    promotion_id: Mapped[str] = mapped_column(String(64), nullable=False)
    order_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TRY")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def to_redemption(self) -> Redemption:
        # SQLite drops the offset on read
        return Redemption(
            id=self.id,
            tenant=self.tenant,
            promotion_id=self.promotion_id,
            order_id=self.order_id,
            amount=Decimal(self.amount),
            currency=self.currency,
            user_id=self.user_id,
            created_at=as_utc(self.created_at),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════════════════════════════════════


def _by_key(tenant: str, promotion_id: str, order_id: str):
    return select(RedemptionTable).where(
        RedemptionTable.tenant == tenant,
        RedemptionTable.promotion_id == promotion_id,
        RedemptionTable.order_id == order_id,
    )


def _count_stmt(tenant: str, promotion_id: str, user_id: str | None):
    stmt = select(func.count()).select_from(RedemptionTable).where(
        RedemptionTable.tenant == tenant,
        RedemptionTable.promotion_id == promotion_id,
    )
    if user_id is not None:
        stmt = stmt.where(RedemptionTable.user_id == user_id)
    return stmt


class SQLAlchemyRedemptionStore:
    """
    Redemption store over an async SQLAlchemy session factory.

    Note: guarded inserts count and insert inside one transaction. That is
    atomic only under an isolation level that serializes the count, e.g.
    SERIALIZABLE on PostgreSQL or SQLite's single writer.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock = utc_now,
        id_factory: Callable[[], str] = new_redemption_id,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self._id_factory = id_factory

    async def insert(
        self,
        new: NewRedemption,
        limits: Limits | None = None,
    ) -> Result[InsertOutcome, StoreError]:
        """Insert, or return the existing row on a unique violation."""
        try:
            async with self._session_factory() as session:
                try:
                    async with session.begin():
                        existing = (await session.execute(
                            _by_key(new.tenant, new.promotion_id, new.order_id)
                        )).scalar_one_or_none()
                        if existing is not None:
                            return Ok(InsertOutcome(InsertState.DUPLICATE, existing.to_redemption()))

                        if limits is not None and not limits.is_unbounded:
                            total = (await session.execute(
                                _count_stmt(new.tenant, new.promotion_id, None)
                            )).scalar_one()
                            used = 0
                            if new.user_id:
                                used = (await session.execute(
                                    _count_stmt(new.tenant, new.promotion_id, new.user_id)
                                )).scalar_one()
                            if (refused := refusal(limits, total, used)) is not None:
                                return Ok(InsertOutcome(refused))

                        row = RedemptionTable(
                            id=self._id_factory(),
                            tenant=new.tenant,
                            promotion_id=new.promotion_id,
                            order_id=new.order_id,
                            user_id=new.user_id,
                            amount=new.amount,
                            currency=new.currency,
                            created_at=self._clock(),
                        )
                        session.add(row)
                    return Ok(InsertOutcome(InsertState.CREATED, row.to_redemption()))

                except IntegrityError:
                    # Lost the race to a concurrent insert of the same key.
                    winner = (await session.execute(
                        _by_key(new.tenant, new.promotion_id, new.order_id)
                    )).scalar_one_or_none()
                    if winner is None:
                        raise
                    return Ok(InsertOutcome(InsertState.DUPLICATE, winner.to_redemption()))

        except Exception as e:
            return Error(StoreError(f"Failed to insert redemption: {e}", e))

    async def get(
        self,
        tenant: str,
        promotion_id: str,
        order_id: str,
    ) -> Result[Redemption | None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = (await session.execute(
                    _by_key(tenant, promotion_id, order_id)
                )).scalar_one_or_none()
                return Ok(row.to_redemption() if row is not None else None)

        except Exception as e:
            return Error(StoreError(f"Failed to get redemption: {e}", e))

    async def count(
        self,
        tenant: str,
        promotion_id: str,
        user_id: str | None = None,
    ) -> Result[int, StoreError]:
        try:
            async with self._session_factory() as session:
                total = (await session.execute(
                    _count_stmt(tenant, promotion_id, user_id)
                )).scalar_one()
                return Ok(int(total))

        except Exception as e:
            return Error(StoreError(f"Failed to count redemptions: {e}", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create tables and return (session_factory, engine)."""
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = (
    "Base",
    "RedemptionTable",
    "SQLAlchemyRedemptionStore",
    "create_database",
)
