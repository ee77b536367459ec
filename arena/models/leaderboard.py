from sqlalchemy import Column, Integer, String, Float, ForeignKey, Boolean, Text
from sqlalchemy.orm import relationship

from arena.core.database import Base

class LeaderboardEntry(Base):
    __tablename__ = "tournament_leaderboard"

    id = Column(Integer, primary_key=True, index=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    team_id = Column(String, nullable=True)

    score = Column(Integer, default=0, nullable=False)
    kills = Column(Integer, default=0, nullable=False)
    deaths = Column(Integer, default=0, nullable=False)
    assists = Column(Integer, default=0, nullable=False)
    headshots = Column(Integer, default=0, nullable=False)
    matches_played = Column(Integer, default=0, nullable=False)
    wins = Column(Integer, default=0, nullable=False)
    average_damage = Column(Float, default=0, nullable=False)
    survival_time = Column(Integer, default=0, nullable=False)  # seconds
    kd_ratio = Column(Float, default=0, nullable=False)

    rank_position = Column(Integer, nullable=True)  # null until the first recalculation

    is_disqualified = Column(Boolean, default=False, nullable=False)
    disqualification_reason = Column(String, nullable=True)

    prize_won = Column(Float, default=0, nullable=False)
    prize_distributed = Column(Boolean, default=False, nullable=False)

    admin_notes = Column(Text, nullable=True)

    tournament = relationship("Tournament", back_populates="leaderboard_entries")
