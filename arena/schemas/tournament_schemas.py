from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime

from arena.models.enums import MatchType, TournamentStatus

class PrizePool(BaseModel):
    winner: float = Field(0, ge=0)
    runner_up: float = Field(0, ge=0)
    third_place: float = Field(0, ge=0)

    @property
    def total(self) -> float:
        return self.winner + self.runner_up + self.third_place

class Schedule(BaseModel):
    registration_start: Optional[datetime] = None
    registration_end: Optional[datetime] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_ordering(self):
        if self.registration_start and self.registration_end and self.registration_end < self.registration_start:
            raise ValueError("Registration end must be after registration start")
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must be after start date")
        return self

class TournamentBase(BaseModel):
    title: str = Field(min_length=3, max_length=120)
    game_name: str = Field(min_length=1)
    description: Optional[str] = None
    match_type: MatchType = MatchType.SOLO
    joining_fee: float = Field(0, ge=0)
    max_participants: int = Field(ge=2)

class TournamentCreate(TournamentBase):
    slug: Optional[str] = None  # generated from the title when omitted
    prize_pool: PrizePool = Field(default_factory=PrizePool)
    schedule: Schedule = Field(default_factory=Schedule)

class TournamentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=120)
    slug: Optional[str] = None
    game_name: Optional[str] = None
    description: Optional[str] = None
    match_type: Optional[MatchType] = None
    joining_fee: Optional[float] = Field(None, ge=0)
    max_participants: Optional[int] = Field(None, ge=2)
    prize_pool: Optional[PrizePool] = None
    schedule: Optional[Schedule] = None

class TournamentStatusUpdate(BaseModel):
    status: TournamentStatus

class TournamentRead(TournamentBase):
    id: int
    slug: str
    status: TournamentStatus
    current_participants: int
    prize_winner: float
    prize_runner_up: float
    prize_third_place: float
    prize_total: float
    registration_start: Optional[datetime] = None
    registration_end: Optional[datetime] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
