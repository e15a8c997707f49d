"""Team model."""
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from checkpoint.db.base import Base


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_name = Column(String(200), nullable=False)
    team_code = Column(String(50), unique=True, nullable=False, index=True)
    table_number = Column(String(20), nullable=True)

    # Relationships
    participants = relationship("Participant", back_populates="team")
