# teamtemp/services/teams.py
from __future__ import annotations

import re
import secrets
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from teamtemp.core.config import settings as app_settings
from teamtemp.core.errors import InvalidAnswer, NotFound
from teamtemp.core.logging import get_logger
from teamtemp.schemas.records import (
    Question,
    QuestionSet,
    QuestionSetItem,
    Team,
    TeamSettings,
    utcnow,
)
from teamtemp.services.normalizer import SUPPORTED_SCALES
from teamtemp.storage.base import StorageAccessor

logger = get_logger(__name__)

ADMIN_TOKEN_BYTES = 18  # 24 caracteres url-safe
MAX_SLUG_LEN = 50
CADENCES = ("weekly", "biweekly", "monthly")

# (texto, categoría, tipo)
DEFAULT_QUESTIONS: list[tuple[str, str, str]] = [
    ("Workload feels sustainable.", "workload", "fixed"),
    ("I get enough focus time to do good work.", "focus", "fixed"),
    ("It's clear what matters most right now.", "clarity", "fixed"),
    ("I understand why we're doing what we're doing.", "purpose", "fixed"),
    ("I feel comfortable raising concerns in this team.", "safety", "rotating_pool"),
    ("Decisions are made at a reasonable pace.", "pace", "rotating_pool"),
    ("I know who to ask when I'm stuck.", "collaboration", "rotating_pool"),
    ("Meetings feel worthwhile.", "meetings", "rotating_pool"),
    ("I get useful feedback on my work.", "feedback", "rotating_pool"),
    ("I have enough energy at the end of the week.", "energy", "rotating_pool"),
]


def generate_slug(name: str) -> str:
    slug = name.lower().strip()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug).strip("-")
    return slug[:MAX_SLUG_LEN] or "team"


def ensure_unique_slug(store: StorageAccessor, base_slug: str) -> str:
    slug, counter = base_slug, 2
    while store.get_team_by_slug(slug) is not None:
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


def admin_link(team: Team) -> str:
    return f"/admin/{team.admin_token}"


def create_team(
    store: StorageAccessor,
    name: str,
    admin_email: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> Team:
    """Alta de equipo: configuración por defecto, banco de 10 preguntas y set por defecto."""
    name = name.strip()
    if not name:
        raise InvalidAnswer("Team name is required")

    ts = now or utcnow()
    team = Team(
        name=name,
        slug=ensure_unique_slug(store, generate_slug(name)),
        admin_token=secrets.token_urlsafe(ADMIN_TOKEN_BYTES),
        admin_email=(admin_email or "").strip().lower() or None,
        created_at=ts,
    )
    team_settings = TeamSettings(
        team_id=team.id,
        cadence="biweekly",
        scale_max=app_settings.DEFAULT_SCALE_MAX,
        min_responses_to_show=app_settings.DEFAULT_MIN_RESPONSES,
        allow_free_text=True,
    )
    qset = QuestionSet(team_id=team.id, is_default=True)

    questions, items = [], []
    for idx, (text, category, kind) in enumerate(DEFAULT_QUESTIONS):
        # created_at escalonado para que el banco conserve este orden
        q = Question(team_id=team.id, text=text, category=category, created_at=ts + timedelta(milliseconds=idx))
        questions.append(q)
        items.append(QuestionSetItem(question_set_id=qset.id, question_id=q.id, position=idx + 1, kind=kind))

    store.add_team(team, team_settings, qset, questions, items)
    logger.info("team created", extra={"extra_data": {"team_id": team.id, "slug": team.slug}})
    return team


def get_team_by_slug(store: StorageAccessor, slug: str) -> Team:
    team = store.get_team_by_slug(slug)
    if not team:
        raise NotFound("Team not found")
    return team


def get_settings(store: StorageAccessor, team_id: UUID) -> TeamSettings:
    return store.get_settings(team_id) or TeamSettings(
        team_id=team_id,
        scale_max=app_settings.DEFAULT_SCALE_MAX,
        min_responses_to_show=app_settings.DEFAULT_MIN_RESPONSES,
    )


def update_settings(store: StorageAccessor, team_id: UUID, **changes) -> TeamSettings:
    """
    Actualiza solo las claves recibidas (None = sin cambio).
    Cambiar scale_max afecta a las rondas NUEVAS; las existentes conservan la suya.
    """
    changes = {k: v for k, v in changes.items() if v is not None}
    if "cadence" in changes and changes["cadence"] not in CADENCES:
        raise InvalidAnswer(f"cadence must be one of {', '.join(CADENCES)}")
    if "scale_max" in changes and changes["scale_max"] not in SUPPORTED_SCALES:
        raise InvalidAnswer(f"scale_max must be one of {', '.join(map(str, SUPPORTED_SCALES))}")
    if "min_responses_to_show" in changes and changes["min_responses_to_show"] < 1:
        raise InvalidAnswer("min_responses_to_show must be at least 1")

    current = get_settings(store, team_id)
    updated = current.model_copy(update=changes)
    store.save_settings(updated)
    logger.info("team settings updated", extra={"extra_data": {"team_id": team_id, "changes": changes}})
    return updated


def find_team_for_recovery(store: StorageAccessor, email: str) -> Optional[Team]:
    """
    Busca el equipo del email. El resultado nunca se expone al cliente; el
    envío del link de admin queda fuera de este servicio.
    """
    team = store.get_team_by_email(email)
    logger.info("admin link recovery requested", extra={"extra_data": {"matched": team is not None}})
    return team


def teams_overview(store: StorageAccessor) -> list[dict]:
    """Resumen de todos los equipos para el panel /super."""
    out = []
    for t in store.list_teams():
        rounds = store.list_rounds(t.id)
        closed = [r for r in rounds if r.status == "closed"]
        out.append({
            "id": t.id,
            "name": t.name,
            "slug": t.slug,
            "admin_token": t.admin_token,
            "created_at": t.created_at,
            "round_count": len(rounds),
            "submission_count": sum(store.count_submissions(r.id) for r in rounds),
            "last_round_date": closed[0].created_at if closed else None,
        })
    return out
