from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean
from arena.core.database import Base
from arena.models.enums import NotificationType, db_enum
import datetime

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    type = Column(db_enum(NotificationType), default=NotificationType.INFO, nullable=False)
    related_tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=True)
    read_status = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
