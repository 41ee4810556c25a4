# teamtemp/schemas/insights.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


# Contrato que consumen dashboard, retro y analytics: no cambiar campos
class QuestionAggregate(BaseModel):
    question_id: UUID
    question_text: str
    round_id: UUID
    round_created_at: datetime
    scale_max: int
    avg: float
    spread: float
    count: int
    values: List[int] = Field(default_factory=list)


class QuestionDelta(BaseModel):
    question_id: UUID
    question_text: str
    delta: float  # fracción normalizada, 2 decimales
    direction: Literal["up", "down"]


class TopMovers(BaseModel):
    increases: List[QuestionDelta] = Field(default_factory=list)
    decreases: List[QuestionDelta] = Field(default_factory=list)


class Celebration(BaseModel):
    question_id: UUID
    question_text: str
    reason: str


class Drop(BaseModel):
    question_id: UUID
    question_text: str
    norm_delta: float


class SpreadItem(BaseModel):
    question_id: UUID
    question_text: str
    norm_spread: float


class Signal(BaseModel):
    question_id: UUID
    question_text: str
    reason: str


class TrendReport(BaseModel):
    deltas: List[QuestionDelta] = Field(default_factory=list)
    celebration: Optional[Celebration] = None
    drops: List[Drop] = Field(default_factory=list)
    high_spread: List[SpreadItem] = Field(default_factory=list)
    signals_worth_discussing: List[Signal] = Field(default_factory=list)
