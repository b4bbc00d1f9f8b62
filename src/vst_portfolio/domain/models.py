"""Domain models for vst_portfolio — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Holding:
    user_id: str
    stock_symbol: str
    shares_owned: int
    average_price: float       # weighted-average cost per share, moves on buys only
    id: int | None = None      # None until the row is first inserted
    version: int = 0           # compare-and-swap token for update/delete
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None


@dataclass(frozen=True)
class Transaction:
    """One executed trade. Frozen: ledger rows are never mutated."""

    user_id: str
    stock_symbol: str
    side: str                  # TradeSide value
    quantity: int
    price: float               # per share, at execution
    id: int | None = None      # BIGSERIAL, assigned on append
    executed_at: datetime | None = None
