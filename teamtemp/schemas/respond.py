# teamtemp/schemas/respond.py
from __future__ import annotations

from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


# ---------- Entradas ----------

class AnswerIn(BaseModel):
    round_question_id: UUID
    value: int  # se valida contra el scale_max de la ronda, no aquí


class RespondIn(BaseModel):
    answers: List[AnswerIn] = Field(min_length=1)
    free_text: Optional[str] = Field(default=None, max_length=2000)
    client_hash: Optional[str] = None


# ---------- Salidas ----------

class RoundQuestionOut(BaseModel):
    id: UUID
    question_text: str
    kind: Literal["fixed", "rotating"]
    position: int


class RespondSettingsOut(BaseModel):
    scale_max: int
    scale_labels: List[str]
    allow_free_text: bool


class RespondRoundOut(BaseModel):
    id: Optional[UUID] = None
    status: Literal["open", "closed"]


class RespondPageOut(BaseModel):
    round: RespondRoundOut
    settings: Optional[RespondSettingsOut] = None
    questions: List[RoundQuestionOut] = Field(default_factory=list)


class RespondOut(BaseModel):
    ok: bool = True
    response_count: int
