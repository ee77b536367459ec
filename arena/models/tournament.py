import datetime

from sqlalchemy import Column, Integer, String, Float, DateTime, Text
from sqlalchemy.orm import relationship

from arena.core.database import Base
from arena.models.enums import MatchType, TournamentStatus, db_enum

class Tournament(Base):
    __tablename__ = "tournaments"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    game_name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    match_type = Column(db_enum(MatchType), default=MatchType.SOLO, nullable=False)
    joining_fee = Column(Float, default=0, nullable=False)
    max_participants = Column(Integer, nullable=False)
    current_participants = Column(Integer, default=0, nullable=False)
    status = Column(db_enum(TournamentStatus), default=TournamentStatus.UPCOMING, nullable=False)

    # Prize pool; prize_total is always derived from the three tiers
    prize_winner = Column(Float, default=0, nullable=False)
    prize_runner_up = Column(Float, default=0, nullable=False)
    prize_third_place = Column(Float, default=0, nullable=False)
    prize_total = Column(Float, default=0, nullable=False)

    registration_start = Column(DateTime, nullable=True)
    registration_end = Column(DateTime, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)

    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    enrollments = relationship("Enrollment", back_populates="tournament")
    matches = relationship("Match", back_populates="tournament")
    leaderboard_entries = relationship("LeaderboardEntry", back_populates="tournament")

    @property
    def is_full(self) -> bool:
        return self.current_participants >= self.max_participants
