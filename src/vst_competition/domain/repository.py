"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.vst_competition.domain.models import Competition, Participant


class CompetitionRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, competition_id: int) -> Competition | None: ...

    async def list_all(self, db: AsyncSession) -> list[Competition]: ...

    async def create(self, db: AsyncSession, competition: Competition) -> Competition: ...

    async def add_participant(self, db: AsyncSession, participant: Participant) -> Participant: ...
