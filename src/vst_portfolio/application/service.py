"""TradeApplicationService — executes buys/sells as one database transaction.

Each attempt runs load → compute → upsert-or-delete → append and commits once.
Any exception rolls the whole attempt back, so a holding change is never
visible without its ledger row (and vice versa).

Same-key safety: the holding row is read with FOR UPDATE, and every write is a
version compare-and-swap. A lost race (e.g. two first-buys of one symbol, which
have no row to lock yet) surfaces as HoldingConflictError; the attempt is
rolled back and retried up to ``settings.TRADE_MAX_ATTEMPTS`` times.
"""

import asyncio
import logging
import random

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.vst_common.enums import TradeSide
from src.vst_common.errors import HoldingConflictError, NoSuchHoldingError
from src.vst_portfolio.application.schemas import (
    HoldingListResponse,
    HoldingResponse,
    TransactionItem,
    TransactionListResponse,
    cursor_decode,
    cursor_encode,
)
from src.vst_portfolio.domain.models import Holding
from src.vst_portfolio.domain.repository import HoldingStoreProtocol, LedgerProtocol
from src.vst_portfolio.domain.trade_engine import apply_buy, apply_sell, build_transaction
from src.vst_portfolio.infrastructure.persistence import HoldingRepository, LedgerRepository

logger = logging.getLogger(__name__)


class TradeApplicationService:
    def __init__(
        self,
        holdings: HoldingStoreProtocol | None = None,
        ledger: LedgerProtocol | None = None,
        max_attempts: int | None = None,
        retry_backoff_ms: int | None = None,
    ) -> None:
        self._holdings: HoldingStoreProtocol = holdings or HoldingRepository()
        self._ledger: LedgerProtocol = ledger or LedgerRepository()
        self._max_attempts = max_attempts or settings.TRADE_MAX_ATTEMPTS
        self._retry_backoff_ms = (
            settings.TRADE_RETRY_BACKOFF_MS if retry_backoff_ms is None else retry_backoff_ms
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def buy(
        self, db: AsyncSession, user_id: str, stock_symbol: str, quantity: int, price: float
    ) -> HoldingResponse:
        return await self._execute(db, TradeSide.BUY, user_id, stock_symbol, quantity, price)

    async def sell(
        self, db: AsyncSession, user_id: str, stock_symbol: str, quantity: int, price: float
    ) -> HoldingResponse:
        """Sell shares. A fully closed position comes back with sharesOwned=0."""
        return await self._execute(db, TradeSide.SELL, user_id, stock_symbol, quantity, price)

    async def _execute(
        self,
        db: AsyncSession,
        side: TradeSide,
        user_id: str,
        stock_symbol: str,
        quantity: int,
        price: float,
    ) -> HoldingResponse:
        attempt = 0
        while True:
            attempt += 1
            try:
                holding = await self._apply(db, side, user_id, stock_symbol, quantity, price)
                await db.commit()
            except HoldingConflictError:
                await db.rollback()
                if attempt >= self._max_attempts:
                    logger.error(
                        "Trade gave up after %d attempts: user=%s side=%s symbol=%s",
                        attempt, user_id, side.value, stock_symbol,
                    )
                    raise
                logger.warning(
                    "Holding conflict, retrying (%d/%d): user=%s side=%s symbol=%s",
                    attempt, self._max_attempts, user_id, side.value, stock_symbol,
                )
                await self._backoff(attempt)
                continue
            except Exception:
                await db.rollback()
                raise

            logger.info(
                "Trade executed: user=%s side=%s symbol=%s qty=%d price=%s -> shares=%d avg=%s",
                user_id, side.value, stock_symbol, quantity, price,
                holding.shares_owned, holding.average_price,
            )
            return HoldingResponse.from_domain(holding)

    async def _apply(
        self,
        db: AsyncSession,
        side: TradeSide,
        user_id: str,
        stock_symbol: str,
        quantity: int,
        price: float,
    ) -> Holding:
        existing = await self._holdings.find(db, user_id, stock_symbol, for_update=True)

        if side is TradeSide.BUY:
            updated = apply_buy(existing, user_id, stock_symbol, quantity, price)
            result = await self._holdings.upsert(db, updated)
        else:
            updated = apply_sell(existing, stock_symbol, quantity)
            if updated.shares_owned == 0:
                # Position closed: drop the row, report shares=0 at the old average
                await self._holdings.delete(db, updated)
                result = updated
            else:
                result = await self._holdings.upsert(db, updated)

        await self._ledger.append(
            db, build_transaction(user_id, stock_symbol, side, quantity, price)
        )
        return result

    async def _backoff(self, attempt: int) -> None:
        if self._retry_backoff_ms <= 0:
            return
        delay_ms = self._retry_backoff_ms * attempt * random.uniform(0.5, 1.5)
        await asyncio.sleep(delay_ms / 1000)

    # ------------------------------------------------------------------
    # Queries (read-only, no explicit transaction)
    # ------------------------------------------------------------------

    async def list_holdings(self, db: AsyncSession, user_id: str) -> HoldingListResponse:
        holdings = await self._holdings.list_by_user(db, user_id)
        return HoldingListResponse(
            items=[HoldingResponse.from_domain(h) for h in holdings],
            total=len(holdings),
        )

    async def get_holding(
        self, db: AsyncSession, user_id: str, stock_symbol: str
    ) -> HoldingResponse:
        holding = await self._holdings.find(db, user_id, stock_symbol)
        if holding is None:
            raise NoSuchHoldingError(stock_symbol)
        return HoldingResponse.from_domain(holding)

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        stock_symbol: str | None,
        cursor: str | None,
        limit: int,
    ) -> TransactionListResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        rows = await self._ledger.list_by_user(db, user_id, stock_symbol, cursor_id, limit + 1)
        has_more = len(rows) > limit
        page = rows[:limit]

        next_cursor = cursor_encode(page[-1].id) if has_more and page and page[-1].id else None
        return TransactionListResponse(
            items=[TransactionItem.from_domain(tx) for tx in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
