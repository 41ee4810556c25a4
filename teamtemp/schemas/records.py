# teamtemp/schemas/records.py
"""
Registros planos que intercambian el núcleo y los backends de almacenamiento.
Los modelos ORM se convierten con model_validate(row) (from_attributes).
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

Cadence = Literal["weekly", "biweekly", "monthly"]
ItemKind = Literal["fixed", "rotating_pool"]
RoundQuestionKind = Literal["fixed", "rotating"]
RoundStatus = Literal["open", "closed"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class Team(Record):
    id: UUID = Field(default_factory=uuid.uuid4)
    name: str
    slug: str
    admin_token: str
    admin_email: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class TeamSettings(Record):
    team_id: UUID
    cadence: Cadence = "biweekly"
    scale_max: int = 3
    min_responses_to_show: int = 4
    allow_free_text: bool = True


class Question(Record):
    id: UUID = Field(default_factory=uuid.uuid4)
    team_id: UUID
    text: str
    category: str = "general"
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)


class QuestionSet(Record):
    id: UUID = Field(default_factory=uuid.uuid4)
    team_id: UUID
    is_default: bool = True


class QuestionSetItem(Record):
    id: UUID = Field(default_factory=uuid.uuid4)
    question_set_id: UUID
    question_id: UUID
    position: int
    kind: ItemKind


class Round(Record):
    id: UUID = Field(default_factory=uuid.uuid4)
    team_id: UUID
    question_set_id: Optional[UUID] = None
    token: str
    status: RoundStatus = "open"
    scale_max: int
    opens_at: datetime = Field(default_factory=utcnow)
    closes_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)


class RoundQuestion(Record):
    id: UUID = Field(default_factory=uuid.uuid4)
    round_id: UUID
    question_id: UUID
    kind: RoundQuestionKind
    position: int
    # Copia del texto al crear la ronda: editar la pregunta no reescribe el histórico
    question_text: str = ""


class Submission(Record):
    id: UUID = Field(default_factory=uuid.uuid4)
    round_id: UUID
    client_hash: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Answer(Record):
    id: UUID = Field(default_factory=uuid.uuid4)
    submission_id: UUID
    round_question_id: UUID
    value: int


class FreeText(Record):
    id: UUID = Field(default_factory=uuid.uuid4)
    submission_id: UUID
    text: str
    created_at: datetime = Field(default_factory=utcnow)
