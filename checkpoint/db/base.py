"""Database base class and model imports."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here for Alembic to detect them
from checkpoint.db.models.team import Team  # noqa: F401, E402
from checkpoint.db.models.participant import Participant  # noqa: F401, E402
from checkpoint.db.models.attendance_record import AttendanceRecord  # noqa: F401, E402
from checkpoint.db.models.redemption_session import RedemptionSession  # noqa: F401, E402
from checkpoint.db.models.redemption import Redemption  # noqa: F401, E402
