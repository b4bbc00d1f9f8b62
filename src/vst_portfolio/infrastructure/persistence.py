"""HoldingRepository / LedgerRepository — PostgreSQL implementations.

Holdings are written with compare-and-swap on the ``version`` column:
an UPDATE or DELETE that matches 0 rows means another trade changed the row
first, and HoldingConflictError is raised so the service can roll back and
retry. Inserting a brand-new holding uses ON CONFLICT DO NOTHING for the same
reason (two first-buys racing on one symbol).

Transaction ownership: the CALLER (application service) commits or rolls back.
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.vst_common.errors import HoldingConflictError, InternalError
from src.vst_portfolio.domain.models import Holding, Transaction

# ---------------------------------------------------------------------------
# SQL: holdings
# ---------------------------------------------------------------------------

_HOLDING_COLUMNS = """
    id, user_id, stock_symbol, shares_owned, average_price,
    version, created_at, updated_at
"""

_FIND_HOLDING_SQL = text(f"""
    SELECT {_HOLDING_COLUMNS}
    FROM holdings
    WHERE user_id = :user_id AND stock_symbol = :stock_symbol
""")

_FIND_HOLDING_FOR_UPDATE_SQL = text(f"""
    SELECT {_HOLDING_COLUMNS}
    FROM holdings
    WHERE user_id = :user_id AND stock_symbol = :stock_symbol
    FOR UPDATE
""")

_INSERT_HOLDING_SQL = text(f"""
    INSERT INTO holdings (user_id, stock_symbol, shares_owned, average_price)
    VALUES (:user_id, :stock_symbol, :shares_owned, :average_price)
    ON CONFLICT (user_id, stock_symbol) DO NOTHING
    RETURNING {_HOLDING_COLUMNS}
""")

_UPDATE_HOLDING_SQL = text(f"""
    UPDATE holdings
    SET shares_owned  = :shares_owned,
        average_price = :average_price,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :id AND version = :version
    RETURNING {_HOLDING_COLUMNS}
""")

_DELETE_HOLDING_SQL = text("""
    DELETE FROM holdings
    WHERE id = :id AND version = :version
    RETURNING id
""")

_LIST_HOLDINGS_SQL = text(f"""
    SELECT {_HOLDING_COLUMNS}
    FROM holdings
    WHERE user_id = :user_id
    ORDER BY stock_symbol
""")

# ---------------------------------------------------------------------------
# SQL: transactions (append-only)
# ---------------------------------------------------------------------------

_INSERT_TRANSACTION_SQL = text("""
    INSERT INTO transactions (user_id, stock_symbol, side, quantity, price)
    VALUES (:user_id, :stock_symbol, :side, :quantity, :price)
    RETURNING id, user_id, stock_symbol, side, quantity, price, executed_at
""")

_LIST_TRANSACTIONS_SQL = text("""
    SELECT id, user_id, stock_symbol, side, quantity, price, executed_at
    FROM transactions
    WHERE user_id = :user_id
      AND (CAST(:stock_symbol AS TEXT) IS NULL OR stock_symbol = CAST(:stock_symbol AS TEXT))
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_holding(row: object) -> Holding:
    return Holding(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        stock_symbol=row.stock_symbol,  # type: ignore[attr-defined]
        shares_owned=row.shares_owned,  # type: ignore[attr-defined]
        average_price=float(row.average_price),  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_transaction(row: object) -> Transaction:
    return Transaction(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        stock_symbol=row.stock_symbol,  # type: ignore[attr-defined]
        side=row.side,  # type: ignore[attr-defined]
        quantity=row.quantity,  # type: ignore[attr-defined]
        price=float(row.price),  # type: ignore[attr-defined]
        executed_at=row.executed_at,  # type: ignore[attr-defined]
    )


class HoldingRepository:
    """Keyed store for (user_id, stock_symbol) -> Holding. No arithmetic here."""

    async def find(
        self,
        db: AsyncSession,
        user_id: str,
        stock_symbol: str,
        for_update: bool = False,
    ) -> Holding | None:
        sql = _FIND_HOLDING_FOR_UPDATE_SQL if for_update else _FIND_HOLDING_SQL
        result = await db.execute(sql, {"user_id": user_id, "stock_symbol": stock_symbol})
        row = result.fetchone()
        return _row_to_holding(row) if row else None

    async def upsert(self, db: AsyncSession, holding: Holding) -> Holding:
        if holding.shares_owned <= 0:
            raise InternalError(
                f"Refusing to persist empty holding {holding.stock_symbol}; delete it instead"
            )
        params = {
            "user_id": holding.user_id,
            "stock_symbol": holding.stock_symbol,
            "shares_owned": holding.shares_owned,
            "average_price": holding.average_price,
        }
        if holding.is_persisted:
            result = await db.execute(
                _UPDATE_HOLDING_SQL,
                {**params, "id": holding.id, "version": holding.version},
            )
        else:
            result = await db.execute(_INSERT_HOLDING_SQL, params)
        row = result.fetchone()
        if row is None:
            raise HoldingConflictError(holding.stock_symbol)
        return _row_to_holding(row)

    async def delete(self, db: AsyncSession, holding: Holding) -> None:
        result = await db.execute(
            _DELETE_HOLDING_SQL, {"id": holding.id, "version": holding.version}
        )
        if result.fetchone() is None:
            raise HoldingConflictError(holding.stock_symbol)

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Holding]:
        result = await db.execute(_LIST_HOLDINGS_SQL, {"user_id": user_id})
        return [_row_to_holding(row) for row in result.fetchall()]


class LedgerRepository:
    """Append-only trade history: insert and read, nothing else."""

    async def append(self, db: AsyncSession, transaction: Transaction) -> Transaction:
        result = await db.execute(
            _INSERT_TRANSACTION_SQL,
            {
                "user_id": transaction.user_id,
                "stock_symbol": transaction.stock_symbol,
                "side": transaction.side,
                "quantity": transaction.quantity,
                "price": transaction.price,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows")
        return _row_to_transaction(row)

    async def list_by_user(
        self,
        db: AsyncSession,
        user_id: str,
        stock_symbol: str | None,
        cursor_id: int | None,
        limit: int,
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_TRANSACTIONS_SQL,
            {
                "user_id": user_id,
                "stock_symbol": stock_symbol,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_transaction(row) for row in result.fetchall()]
