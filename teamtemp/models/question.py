# teamtemp/models/question.py
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Text, Uuid, func

from teamtemp.db.base_class import Base

class Question(Base):
    __tablename__ = "question_bank"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    team_id = Column(Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    category = Column(String(40), nullable=False, default="general")
    # nunca se borra: las rondas históricas siguen apuntando a ella
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

class QuestionSet(Base):
    __tablename__ = "question_set"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    team_id = Column(Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    is_default = Column(Boolean, nullable=False, default=True)

class QuestionSetItem(Base):
    __tablename__ = "question_set_item"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    question_set_id = Column(Uuid, ForeignKey("question_set.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(Uuid, ForeignKey("question_bank.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    kind = Column(String(20), nullable=False)  # fixed | rotating_pool
