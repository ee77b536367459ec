from arena.core.database import Base

# Import all models here to ensure they are registered with Base
from .tournament import Tournament
from .enrollment import Enrollment
from .match import Match
from .leaderboard import LeaderboardEntry
from .notification import Notification

# Tables are created by arena.core.database.init_db(), called on app startup
# and by the test fixtures against their own engine.
