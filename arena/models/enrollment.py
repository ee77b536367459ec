import datetime

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from arena.core.database import Base
from arena.models.enums import PaymentStatus, db_enum

class Enrollment(Base):
    __tablename__ = "tournament_enrollments"
    __table_args__ = (
        UniqueConstraint("tournament_id", "user_id", name="uq_enrollment_tournament_user"),
        UniqueConstraint("tournament_id", "team_id", name="uq_enrollment_tournament_team"),
    )

    id = Column(Integer, primary_key=True, index=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)

    in_game_nickname = Column(String, nullable=False)
    game_uid = Column(String, nullable=False)
    mobile_number = Column(String, nullable=True)
    address = Column(Text, nullable=True)

    transaction_id = Column(String, nullable=False)
    payment_status = Column(db_enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    team_id = Column(String, nullable=True)  # set only on approval

    verified_at = Column(DateTime, nullable=True)
    verified_by = Column(String, nullable=True)
    rejection_reason = Column(String, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    rejected_by = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    tournament = relationship("Tournament", back_populates="enrollments")
