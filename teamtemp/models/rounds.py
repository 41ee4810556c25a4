# teamtemp/models/rounds.py
import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, Uuid, func, text

from teamtemp.db.base_class import Base

class Round(Base):
    __tablename__ = "rounds"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    team_id = Column(Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    question_set_id = Column(Uuid, ForeignKey("question_set.id", ondelete="SET NULL"), nullable=True)
    token = Column(String(32), unique=True, index=True, nullable=False)  # secreto del link de respuesta
    status = Column(String(10), nullable=False, server_default=text("'open'"), index=True)  # open | closed
    # copia de team_settings.scale_max al crear la ronda; no cambia después
    scale_max = Column(Integer, nullable=False)
    opens_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    closes_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

class RoundQuestion(Base):
    __tablename__ = "round_questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    round_id = Column(Uuid, ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(Uuid, ForeignKey("question_bank.id"), nullable=False, index=True)
    kind = Column(String(10), nullable=False)  # fixed | rotating
    position = Column(Integer, nullable=False)
    question_text = Column(Text, nullable=False, server_default=text("''"))
