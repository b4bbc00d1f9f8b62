"""Domain models for vst_competition — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Competition:
    name: str
    description: str | None
    start_date: datetime
    end_date: datetime
    starting_balance: float
    id: int | None = None      # BIGSERIAL, assigned on insert
    created_at: datetime | None = None


@dataclass
class Participant:
    """A user's enrollment in one competition, referenced by ids only."""

    competition_id: int
    user_id: str
    portfolio_value: float     # seeded from Competition.starting_balance
    id: int | None = None
    joined_at: datetime | None = None
