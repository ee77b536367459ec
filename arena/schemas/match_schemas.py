from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime

from arena.models.enums import MatchStatus

class MatchBase(BaseModel):
    tournament_id: int
    match_name: str = Field(min_length=1)
    round_name: str = "Group Stage"
    match_number: Optional[int] = Field(None, ge=1)
    scheduled_time: Optional[datetime] = None
    team_a_id: Optional[str] = None
    team_b_id: Optional[str] = None
    stream_url: Optional[str] = None
    admin_notes: Optional[str] = None

class MatchCreate(MatchBase):
    room_id: Optional[str] = None
    room_password: Optional[str] = None

class MatchUpdate(BaseModel):
    # Identity fields; only editable while the match is still scheduled
    tournament_id: Optional[int] = None
    team_a_id: Optional[str] = None
    team_b_id: Optional[str] = None
    # Descriptive fields; editable in any status
    match_name: Optional[str] = None
    round_name: Optional[str] = None
    match_number: Optional[int] = Field(None, ge=1)
    scheduled_time: Optional[datetime] = None
    stream_url: Optional[str] = None
    admin_notes: Optional[str] = None

class MatchStatusUpdate(BaseModel):
    status: MatchStatus

class RoomCredentials(BaseModel):
    room_id: Optional[str] = None
    room_password: Optional[str] = None

class MatchResult(BaseModel):
    winner: Optional[str] = None
    runner_up: Optional[str] = None
    scores: Dict[str, float] = Field(default_factory=dict)

class MatchRead(MatchBase):
    id: int
    status: MatchStatus
    room_id: Optional[str] = None
    room_password: Optional[str] = None
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    match_result: Optional[MatchResult] = None

    class Config:
        from_attributes = True
