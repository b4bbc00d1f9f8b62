"""Pydantic schemas and cursor utilities for the portfolio API."""

import base64
import json
import math

from pydantic import Field, field_validator

from src.vst_common.schemas import CamelModel
from src.vst_portfolio.domain.models import Holding, Transaction
from src.vst_portfolio.domain.trade_engine import MAX_SHARES

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None


def normalize_symbol(value: str) -> str:
    return value.strip().upper()


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class TradeRequest(CamelModel):
    stock_symbol: str = Field(..., min_length=1, max_length=16, description="Ticker, e.g. AAPL")
    quantity: int = Field(..., ge=1, le=MAX_SHARES, description="Whole shares")
    price: float = Field(..., ge=0, description="Price per share supplied by the caller")

    @field_validator("stock_symbol")
    @classmethod
    def symbol_not_blank(cls, v: str) -> str:
        symbol = normalize_symbol(v)
        if not symbol:
            raise ValueError("stockSymbol must not be blank")
        return symbol

    @field_validator("price")
    @classmethod
    def price_is_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("price must be a finite number")
        return v


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class HoldingResponse(CamelModel):
    id: int | None
    stock_symbol: str
    shares_owned: int
    average_price: float

    @classmethod
    def from_domain(cls, holding: Holding) -> "HoldingResponse":
        return cls(
            id=holding.id,
            stock_symbol=holding.stock_symbol,
            shares_owned=holding.shares_owned,
            average_price=holding.average_price,
        )


class HoldingListResponse(CamelModel):
    items: list[HoldingResponse]
    total: int


class TransactionItem(CamelModel):
    id: int
    stock_symbol: str
    side: str
    quantity: int
    price: float
    timestamp: str  # ISO8601 string

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionItem":
        return cls(
            id=tx.id or 0,
            stock_symbol=tx.stock_symbol,
            side=tx.side,
            quantity=tx.quantity,
            price=tx.price,
            timestamp=tx.executed_at.isoformat() if tx.executed_at else "",
        )


class TransactionListResponse(CamelModel):
    items: list[TransactionItem]
    next_cursor: str | None
    has_more: bool
