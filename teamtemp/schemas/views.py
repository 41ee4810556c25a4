# teamtemp/schemas/views.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from teamtemp.schemas.insights import Celebration, Drop, QuestionDelta, Signal, SpreadItem


# ---- dashboard ----

class DataPoint(BaseModel):
    round_id: UUID
    round_created_at: datetime
    scale_max: int
    avg: float
    norm_avg: float
    spread: float
    norm_spread: float
    count: int
    values: List[int] = Field(default_factory=list)
    distribution: List[int] = Field(default_factory=list)  # conteos 1..scale_max de ESTA ronda


class QuestionCard(BaseModel):
    question_id: UUID
    question_text: str
    is_rotating: bool
    mixed_signals: bool = False  # última ronda con dispersión normalizada alta
    scale_labels: List[str] = Field(default_factory=list)  # etiquetas de la última ronda
    data_points: List[DataPoint] = Field(default_factory=list)


class DashboardOut(BaseModel):
    team_name: str
    team_slug: str
    scale_max: int
    has_enough_data: bool
    min_responses: int
    question_cards: List[QuestionCard] = Field(default_factory=list)
    increases: List[QuestionDelta] = Field(default_factory=list)
    decreases: List[QuestionDelta] = Field(default_factory=list)
    last_round_id: Optional[UUID] = None


# ---- retro ----

class RoundScore(BaseModel):
    question_id: UUID
    question_text: str
    avg: float
    scale_max: int
    delta: Optional[float] = None  # normalizada vs. ronda anterior


class FreeTextOut(BaseModel):
    text: str
    created_at: datetime


class RetroOut(BaseModel):
    team_name: str
    round_id: UUID
    round_created_at: datetime
    enough_responses: bool
    min_responses: int
    response_count: int
    check_in_question: Optional[str] = None
    previous_round_id: Optional[UUID] = None
    scale_max: Optional[int] = None
    scale_changed: bool = False
    round_scores: List[RoundScore] = Field(default_factory=list)
    celebration: Optional[Celebration] = None
    drops: List[Drop] = Field(default_factory=list)
    high_spread: List[SpreadItem] = Field(default_factory=list)
    signals_worth_discussing: List[Signal] = Field(default_factory=list)
    questions_to_ask: List[str] = Field(default_factory=list)
    experiments: List[str] = Field(default_factory=list)
    free_texts: List[FreeTextOut] = Field(default_factory=list)


# ---- analytics ----

class AnalyticsRound(BaseModel):
    round_id: UUID
    round_date: datetime
    scale_max: int
    avg: float
    norm_avg: float
    spread: float
    norm_spread: float
    count: int
    distribution: List[int] = Field(default_factory=list)


class QuestionAnalytics(BaseModel):
    question_id: UUID
    question_text: str
    rounds: List[AnalyticsRound] = Field(default_factory=list)


class AnalyticsOut(BaseModel):
    current_scale_max: int
    questions: List[QuestionAnalytics] = Field(default_factory=list)


# ---- admin ----

class QuestionBrief(BaseModel):
    id: UUID
    text: str
    category: str
    is_active: bool


class SetItemOut(BaseModel):
    id: UUID
    question_id: UUID
    kind: Literal["fixed", "rotating_pool"]
    position: int
    question: Optional[QuestionBrief] = None


class RoundSummaryRow(BaseModel):
    question_text: str
    avg: float
    count: int


class AdminRoundOut(BaseModel):
    id: UUID
    token: str
    status: Literal["open", "closed"]
    scale_max: int
    opens_at: datetime
    closes_at: Optional[datetime] = None
    created_at: datetime
    response_count: int
    summary: List[RoundSummaryRow] = Field(default_factory=list)


class TeamBrief(BaseModel):
    name: str
    slug: str


class SettingsOut(BaseModel):
    cadence: Literal["weekly", "biweekly", "monthly"]
    scale_max: int
    min_responses_to_show: int
    allow_free_text: bool


class AdminLoadOut(BaseModel):
    team: TeamBrief
    settings: SettingsOut
    fixed_items: List[SetItemOut] = Field(default_factory=list)
    rotating_items: List[SetItemOut] = Field(default_factory=list)
    rounds: List[AdminRoundOut] = Field(default_factory=list)


class CommentOut(BaseModel):
    text: str
    created_at: datetime
    round_id: UUID
    round_date: datetime
