"""Repository Protocols — dependency inversion for testability.

Unit tests inject a mock (or an in-memory fake) that conforms to these
Protocols. The infrastructure layer provides the PostgreSQL implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.vst_portfolio.domain.models import Holding, Transaction


class HoldingStoreProtocol(Protocol):
    async def find(
        self,
        db: AsyncSession,
        user_id: str,
        stock_symbol: str,
        for_update: bool = False,
    ) -> Holding | None: ...

    async def upsert(self, db: AsyncSession, holding: Holding) -> Holding: ...

    async def delete(self, db: AsyncSession, holding: Holding) -> None: ...

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Holding]: ...


class LedgerProtocol(Protocol):
    async def append(self, db: AsyncSession, transaction: Transaction) -> Transaction: ...

    async def list_by_user(
        self,
        db: AsyncSession,
        user_id: str,
        stock_symbol: str | None,
        cursor_id: int | None,
        limit: int,
    ) -> list[Transaction]: ...
