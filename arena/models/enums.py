from enum import Enum
from sqlalchemy import Enum as SAEnum

class MatchType(str, Enum):
    SOLO = "solo"
    DUO = "duo"
    SQUAD = "squad"

class TournamentStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"

class MatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    MATCH = "match"
    TOURNAMENT = "tournament"


def db_enum(enum_cls):
    """Column type storing the enum's value ("pending"), not its name ("PENDING")."""
    return SAEnum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        validate_strings=True,
        length=20,
    )
