# teamtemp/schemas/admin.py
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


# ---------- Equipos ----------

class TeamCreateIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    admin_email: Optional[str] = Field(default=None, max_length=254)


class TeamCreateOut(BaseModel):
    slug: str
    admin_link: str
    admin_token: str


class RecoverIn(BaseModel):
    email: str = Field(min_length=3, max_length=254)


class OkOut(BaseModel):
    ok: bool = True


# ---------- Admin ----------

class SettingsUpdateIn(BaseModel):
    """Todas opcionales: solo se actualiza lo que llega."""
    cadence: Optional[Literal["weekly", "biweekly", "monthly"]] = None
    scale_max: Optional[int] = None
    min_responses_to_show: Optional[int] = None
    allow_free_text: Optional[bool] = None


class QuestionCreateIn(BaseModel):
    text: str = Field(min_length=1, max_length=500)
    category: str = Field(default="general", max_length=40)
    kind: Literal["fixed", "rotating_pool"] = "fixed"


class QuestionDeleteIn(BaseModel):
    item_id: Optional[UUID] = None
    question_id: Optional[UUID] = None

    @model_validator(mode="after")
    def al_menos_uno(self):
        if self.item_id is None and self.question_id is None:
            raise ValueError("item_id or question_id is required")
        return self


class ItemKindIn(BaseModel):
    kind: Literal["fixed", "rotating_pool"]


class QuestionOut(BaseModel):
    id: UUID
    text: str
    category: str
    is_active: bool


class RoundOut(BaseModel):
    id: UUID
    token: str
    status: Literal["open", "closed"]
    scale_max: int
    opens_at: datetime
    closes_at: Optional[datetime] = None
    created_at: datetime


# ---------- Super admin ----------

class TeamOverviewOut(BaseModel):
    id: UUID
    name: str
    slug: str
    admin_token: str
    created_at: datetime
    round_count: int
    submission_count: int
    last_round_date: Optional[datetime] = None
