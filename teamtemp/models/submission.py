# teamtemp/models/submission.py
import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, Uuid, func

from teamtemp.db.base_class import Base

class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    round_id = Column(Uuid, ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False, index=True)
    client_hash = Column(String, nullable=True)  # reservado para deduplicar; hoy no se usa
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

class Answer(Base):
    __tablename__ = "answers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    submission_id = Column(Uuid, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    round_question_id = Column(Uuid, ForeignKey("round_questions.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(Integer, nullable=False)  # 1..round.scale_max

class FreeText(Base):
    __tablename__ = "free_text"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    submission_id = Column(Uuid, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
