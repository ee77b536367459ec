from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from arena.models.enums import NotificationType

class NotificationBase(BaseModel):
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    related_tournament_id: Optional[int] = None

class NotificationCreate(NotificationBase):
    user_id: str

class TournamentBroadcast(NotificationBase):
    related_tournament_id: int

class NotificationRead(NotificationBase):
    id: int
    user_id: str
    read_status: bool
    created_at: datetime

    class Config:
        from_attributes = True
