from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime

from arena.models.enums import PaymentStatus

class EnrollmentCreate(BaseModel):
    in_game_nickname: str = Field(min_length=1, max_length=50)
    game_uid: str = Field(min_length=1, max_length=50)
    mobile_number: Optional[str] = None
    address: Optional[str] = None
    transaction_id: str = Field(min_length=1, description="Payer-supplied proof of payment")

class EnrollmentApprove(BaseModel):
    # Optional admin-chosen team id; generated from the tournament slug otherwise
    team_id: Optional[str] = Field(None, min_length=1, max_length=20)

class EnrollmentReject(BaseModel):
    reason: str = Field("Payment verification failed", min_length=1)

class EnrollmentRead(EnrollmentCreate):
    id: int
    tournament_id: int
    user_id: str
    payment_status: PaymentStatus
    team_id: Optional[str] = None
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class EnrollmentStats(BaseModel):
    total: int
    by_status: Dict[PaymentStatus, int]
