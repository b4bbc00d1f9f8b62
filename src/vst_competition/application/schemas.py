"""Pydantic schemas for the competitions API."""

import math
from datetime import datetime

from pydantic import Field, field_validator, model_validator

from src.vst_common.schemas import CamelModel
from src.vst_competition.domain.models import Competition, Participant


class CreateCompetitionRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=128)
    description: str | None = Field(None, max_length=2000)
    start_date: datetime
    end_date: datetime
    starting_balance: float = Field(..., ge=0)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        name = v.strip()
        if not name:
            raise ValueError("name must not be blank")
        return name

    @field_validator("starting_balance")
    @classmethod
    def balance_is_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("startingBalance must be a finite number")
        return v

    @model_validator(mode="after")
    def end_not_before_start(self) -> "CreateCompetitionRequest":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class CompetitionResponse(CamelModel):
    id: int
    name: str
    description: str | None
    start_date: str
    end_date: str
    starting_balance: float

    @classmethod
    def from_domain(cls, c: Competition) -> "CompetitionResponse":
        return cls(
            id=c.id or 0,
            name=c.name,
            description=c.description,
            start_date=c.start_date.isoformat(),
            end_date=c.end_date.isoformat(),
            starting_balance=c.starting_balance,
        )


class CompetitionListResponse(CamelModel):
    items: list[CompetitionResponse]
    total: int


class ParticipantResponse(CamelModel):
    """Safe enrollment projection: display username only, never email or credentials."""

    id: int
    competition_id: int
    competition_name: str
    username: str
    portfolio_value: float

    @classmethod
    def from_domain(
        cls, participant: Participant, competition: Competition, username: str
    ) -> "ParticipantResponse":
        return cls(
            id=participant.id or 0,
            competition_id=participant.competition_id,
            competition_name=competition.name,
            username=username,
            portfolio_value=participant.portfolio_value,
        )
