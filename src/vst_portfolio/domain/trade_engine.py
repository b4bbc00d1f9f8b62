"""Holding arithmetic for buys and sells — pure functions, no I/O.

Cost basis is a weighted average that moves only on accumulation:

    new_avg = (old_shares * old_avg + qty * price) / (old_shares + qty)

A sell reduces shares and leaves the average untouched. A holding that
reaches zero shares is deleted by the caller, never stored, so a later buy
starts from an empty position instead of averaging against a stale zero row.
"""

import math

from src.vst_common.enums import TradeSide
from src.vst_common.errors import (
    InsufficientSharesError,
    InvalidInputError,
    NoSuchHoldingError,
)
from src.vst_portfolio.domain.models import Holding, Transaction

# shares_owned and quantity are INTEGER columns
MAX_SHARES = 2**31 - 1


def apply_buy(
    existing: Holding | None,
    user_id: str,
    stock_symbol: str,
    quantity: int,
    price: float,
) -> Holding:
    """Return the holding after buying ``quantity`` at ``price``.

    ``existing`` is not mutated. The returned holding keeps its id and version
    so the store can compare-and-swap; a new position has ``id=None``.
    """
    if existing is None:
        existing = Holding(
            user_id=user_id,
            stock_symbol=stock_symbol,
            shares_owned=0,
            average_price=0.0,
        )

    new_shares = existing.shares_owned + quantity
    if new_shares > MAX_SHARES:
        raise InvalidInputError(
            f"holding of {stock_symbol} would exceed {MAX_SHARES} shares"
        )
    total_cost = existing.shares_owned * existing.average_price + quantity * price
    average_price = total_cost / new_shares
    if not math.isfinite(average_price):
        raise InvalidInputError(f"average price of {stock_symbol} is out of range")
    return Holding(
        id=existing.id,
        user_id=existing.user_id,
        stock_symbol=existing.stock_symbol,
        shares_owned=new_shares,
        average_price=average_price,
        version=existing.version,
        created_at=existing.created_at,
        updated_at=existing.updated_at,
    )


def apply_sell(existing: Holding | None, stock_symbol: str, quantity: int) -> Holding:
    """Return the holding after selling ``quantity``.

    Raises NoSuchHoldingError when nothing is held and InsufficientSharesError
    when fewer than ``quantity`` shares are owned. ``shares_owned == 0`` in the
    result means the position is closed and the row must be deleted.
    """
    if existing is None:
        raise NoSuchHoldingError(stock_symbol)
    if existing.shares_owned < quantity:
        raise InsufficientSharesError(stock_symbol, existing.shares_owned, quantity)

    return Holding(
        id=existing.id,
        user_id=existing.user_id,
        stock_symbol=existing.stock_symbol,
        shares_owned=existing.shares_owned - quantity,
        average_price=existing.average_price,
        version=existing.version,
        created_at=existing.created_at,
        updated_at=existing.updated_at,
    )


def build_transaction(
    user_id: str, stock_symbol: str, side: TradeSide, quantity: int, price: float
) -> Transaction:
    """Ledger record for one executed trade, quantity and price exactly as requested."""
    return Transaction(
        user_id=user_id,
        stock_symbol=stock_symbol,
        side=side.value,
        quantity=quantity,
        price=price,
    )
