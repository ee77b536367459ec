import datetime

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, JSON
from sqlalchemy.orm import relationship

from arena.core.database import Base
from arena.models.enums import MatchStatus, db_enum

class Match(Base):
    __tablename__ = "tournament_matches"

    id = Column(Integer, primary_key=True, index=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=False, index=True)
    match_name = Column(String, nullable=False)
    round_name = Column(String, default="Group Stage", nullable=False)
    match_number = Column(Integer, nullable=True)
    scheduled_time = Column(DateTime, nullable=True)

    # Team identifiers as assigned on enrollment approval, e.g. "PUB451"
    team_a_id = Column(String, nullable=True)
    team_b_id = Column(String, nullable=True)

    room_id = Column(String, nullable=True)
    room_password = Column(String, nullable=True)

    status = Column(db_enum(MatchStatus), default=MatchStatus.SCHEDULED, nullable=False)
    actual_start_time = Column(DateTime, nullable=True)
    actual_end_time = Column(DateTime, nullable=True)

    # {"winner": "PUB451", "runner_up": "PUB120", "scores": {"PUB451": 42, ...}}
    match_result = Column(JSON, nullable=True)

    stream_url = Column(String, nullable=True)
    admin_notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    tournament = relationship("Tournament", back_populates="matches")
