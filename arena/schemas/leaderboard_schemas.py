from pydantic import BaseModel, Field
from typing import Optional, Any

class LeaderboardStats(BaseModel):
    score: int = Field(0, ge=0)
    kills: int = Field(0, ge=0)
    deaths: int = Field(0, ge=0)
    assists: int = Field(0, ge=0)
    headshots: int = Field(0, ge=0)
    matches_played: int = Field(0, ge=0)
    wins: int = Field(0, ge=0)
    average_damage: float = Field(0, ge=0)
    survival_time: int = Field(0, ge=0)

class LeaderboardEntryCreate(LeaderboardStats):
    tournament_id: int
    user_id: str
    team_id: Optional[str] = None
    admin_notes: Optional[str] = None

class LeaderboardEntryUpdate(BaseModel):
    team_id: Optional[str] = None
    score: Optional[int] = Field(None, ge=0)
    kills: Optional[int] = Field(None, ge=0)
    deaths: Optional[int] = Field(None, ge=0)
    assists: Optional[int] = Field(None, ge=0)
    headshots: Optional[int] = Field(None, ge=0)
    matches_played: Optional[int] = Field(None, ge=0)
    wins: Optional[int] = Field(None, ge=0)
    average_damage: Optional[float] = Field(None, ge=0)
    survival_time: Optional[int] = Field(None, ge=0)
    admin_notes: Optional[str] = None

class DisqualificationUpdate(BaseModel):
    is_disqualified: bool
    reason: Optional[str] = None

class PrizeDistribution(BaseModel):
    # Validated by the service so that malformed input surfaces as InvalidAmount
    amount: Any

class LeaderboardEntryRead(LeaderboardEntryCreate):
    id: int
    kd_ratio: float
    rank_position: Optional[int] = None
    is_disqualified: bool
    disqualification_reason: Optional[str] = None
    prize_won: float
    prize_distributed: bool

    class Config:
        from_attributes = True

class QualifiedRank(BaseModel):
    entry_id: int
    user_id: str
    raw_rank: int
    qualified_rank: int

class LeaderboardSummary(BaseModel):
    total: int
    disqualified: int
    prize_distributed: int
    total_prize: float
