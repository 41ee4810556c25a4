# teamtemp/models/team.py
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Uuid, func

from teamtemp.db.base_class import Base

class Team(Base):
    __tablename__ = "teams"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    slug = Column(String(60), unique=True, index=True, nullable=False)
    admin_token = Column(String(64), unique=True, index=True, nullable=False)  # capacidad secreta
    admin_email = Column(String, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

class TeamSettings(Base):
    __tablename__ = "team_settings"

    team_id = Column(Uuid, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True)
    cadence = Column(String(10), nullable=False, default="biweekly")  # weekly|biweekly|monthly
    scale_max = Column(Integer, nullable=False, default=3)            # escala para rondas NUEVAS
    min_responses_to_show = Column(Integer, nullable=False, default=4)
    allow_free_text = Column(Boolean, nullable=False, default=True)
