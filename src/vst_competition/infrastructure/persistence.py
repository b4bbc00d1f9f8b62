"""CompetitionRepository — ORM implementation of CompetitionRepositoryProtocol.

Writes only flush; the application service commits.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.vst_competition.domain.models import Competition, Participant
from src.vst_competition.infrastructure.db_models import CompetitionORM, ParticipantORM

# competitions.id is BIGSERIAL
_MAX_ID = 2**63 - 1


def _orm_to_competition(row: CompetitionORM) -> Competition:
    return Competition(
        id=row.id,
        name=row.name,
        description=row.description,
        start_date=row.start_date,
        end_date=row.end_date,
        starting_balance=row.starting_balance,
        created_at=row.created_at,
    )


def _orm_to_participant(row: ParticipantORM) -> Participant:
    return Participant(
        id=row.id,
        competition_id=row.competition_id,
        user_id=row.user_id,
        portfolio_value=row.portfolio_value,
        joined_at=row.joined_at,
    )


class CompetitionRepository:
    async def get_by_id(self, db: AsyncSession, competition_id: int) -> Competition | None:
        if not 0 < competition_id <= _MAX_ID:
            return None
        row = await db.get(CompetitionORM, competition_id)
        return _orm_to_competition(row) if row else None

    async def list_all(self, db: AsyncSession) -> list[Competition]:
        result = await db.execute(
            select(CompetitionORM).order_by(CompetitionORM.start_date.desc(), CompetitionORM.id.desc())
        )
        return [_orm_to_competition(row) for row in result.scalars().all()]

    async def create(self, db: AsyncSession, competition: Competition) -> Competition:
        row = CompetitionORM(
            name=competition.name,
            description=competition.description,
            start_date=competition.start_date,
            end_date=competition.end_date,
            starting_balance=competition.starting_balance,
        )
        db.add(row)
        await db.flush()
        await db.refresh(row)
        return _orm_to_competition(row)

    async def add_participant(self, db: AsyncSession, participant: Participant) -> Participant:
        row = ParticipantORM(
            competition_id=participant.competition_id,
            user_id=participant.user_id,
            portfolio_value=participant.portfolio_value,
        )
        db.add(row)
        await db.flush()
        await db.refresh(row)
        return _orm_to_participant(row)
