"""CompetitionApplicationService — enrollment plus competition listing/creation.

join() and create_competition() commit on success and roll back on any error.
list_competitions() is read-only and runs without an explicit transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.vst_common.errors import NoSuchCompetitionError
from src.vst_competition.application.schemas import (
    CompetitionListResponse,
    CompetitionResponse,
    CreateCompetitionRequest,
    ParticipantResponse,
)
from src.vst_competition.domain.models import Competition, Participant
from src.vst_competition.domain.repository import CompetitionRepositoryProtocol
from src.vst_competition.infrastructure.persistence import CompetitionRepository

logger = logging.getLogger(__name__)


class CompetitionApplicationService:
    def __init__(self, repo: CompetitionRepositoryProtocol | None = None) -> None:
        self._repo: CompetitionRepositoryProtocol = repo or CompetitionRepository()

    async def join(
        self, db: AsyncSession, competition_id: int, user_id: str, username: str
    ) -> ParticipantResponse:
        """Enroll a user, seeding the tracked value with the starting balance.

        Repeat joins are not de-duplicated: each call adds a participant row.
        """
        try:
            competition = await self._repo.get_by_id(db, competition_id)
            if competition is None:
                raise NoSuchCompetitionError(competition_id)
            participant = await self._repo.add_participant(
                db,
                Participant(
                    competition_id=competition_id,
                    user_id=user_id,
                    portfolio_value=competition.starting_balance,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "User joined competition: user=%s competition=%s participant=%s value=%s",
            user_id, competition_id, participant.id, participant.portfolio_value,
        )
        return ParticipantResponse.from_domain(participant, competition, username)

    async def list_competitions(self, db: AsyncSession) -> CompetitionListResponse:
        competitions = await self._repo.list_all(db)
        return CompetitionListResponse(
            items=[CompetitionResponse.from_domain(c) for c in competitions],
            total=len(competitions),
        )

    async def create_competition(
        self, db: AsyncSession, req: CreateCompetitionRequest
    ) -> CompetitionResponse:
        try:
            competition = await self._repo.create(
                db,
                Competition(
                    name=req.name,
                    description=req.description,
                    start_date=req.start_date,
                    end_date=req.end_date,
                    starting_balance=req.starting_balance,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Competition created: id=%s name=%s", competition.id, competition.name)
        return CompetitionResponse.from_domain(competition)
