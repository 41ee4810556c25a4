# teamtemp/services/composer.py
"""
Ciclo de vida de rondas: composición (fijas + una rotativa) y cierre.

La rotación no guarda estado propio: se deduce de las preguntas rotativas
usadas en las últimas rondas del equipo, así que agregar o quitar preguntas
del pool nunca deja un contador desincronizado.
"""
from __future__ import annotations

import secrets
from datetime import datetime
from typing import Iterable, Optional, Sequence
from uuid import UUID

from teamtemp.core.errors import InvalidState, NoDefaultQuestionSet, NotFound
from teamtemp.core.logging import get_logger
from teamtemp.schemas.records import QuestionSetItem, Round, RoundQuestion, utcnow
from teamtemp.services.teams import get_settings
from teamtemp.storage.base import StorageAccessor

logger = get_logger(__name__)

ROUND_TOKEN_BYTES = 9  # 12 caracteres url-safe


def new_round_token() -> str:
    return secrets.token_urlsafe(ROUND_TOKEN_BYTES)


def pick_rotating_item(
    pool: Sequence[QuestionSetItem],
    recently_used: Iterable[UUID],
) -> Optional[QuestionSetItem]:
    """
    Primer item del pool (orden de position) que no salió en las rondas
    recientes; si todos salieron, vuelve al primero.
    """
    if not pool:
        return None
    used = set(recently_used)
    for item in pool:
        if item.question_id not in used:
            return item
    return pool[0]


def recent_rotating_question_ids(store: StorageAccessor, team_id: UUID, window: int) -> set[UUID]:
    """Preguntas rotativas de las últimas `window` rondas (abiertas o cerradas)."""
    used: set[UUID] = set()
    if window <= 0:
        return used
    for r in store.list_rounds(team_id, limit=window):
        used.update(
            rq.question_id for rq in store.list_round_questions(r.id) if rq.kind == "rotating"
        )
    return used


def compose_round(store: StorageAccessor, team_id: UUID, *, now: Optional[datetime] = None) -> Round:
    """
    Crea una ronda abierta a partir del set por defecto del equipo.
    - Fijas: todas, en orden, posiciones 1..k.
    - Rotativa: una del pool, en la posición k+1.
    - scale_max: copia del valor actual de team_settings.
    """
    qset = store.get_default_question_set(team_id)
    if not qset:
        raise NoDefaultQuestionSet(team_id)

    items = store.list_question_set_items(qset.id)
    fixed = [i for i in items if i.kind == "fixed"]
    pool = [i for i in items if i.kind == "rotating_pool"]

    pick = pick_rotating_item(pool, recent_rotating_question_ids(store, team_id, len(pool)))

    scale_max = get_settings(store, team_id).scale_max

    ts = now or utcnow()
    round_ = Round(
        team_id=team_id,
        question_set_id=qset.id,
        token=new_round_token(),
        status="open",
        scale_max=scale_max,
        opens_at=ts,
        closes_at=None,
        created_at=ts,
    )

    def _text(question_id: UUID) -> str:
        q = store.get_question(question_id)
        return q.text if q else ""

    round_questions = [
        RoundQuestion(
            round_id=round_.id,
            question_id=item.question_id,
            kind="fixed",
            position=idx,
            question_text=_text(item.question_id),
        )
        for idx, item in enumerate(fixed, start=1)
    ]
    if pick is not None:
        round_questions.append(RoundQuestion(
            round_id=round_.id,
            question_id=pick.question_id,
            kind="rotating",
            position=len(fixed) + 1,
            question_text=_text(pick.question_id),
        ))

    store.add_round(round_, round_questions)
    logger.info(
        "round composed",
        extra={"extra_data": {
            "team_id": team_id,
            "round_id": round_.id,
            "scale_max": scale_max,
            "fixed": len(fixed),
            "rotating_question_id": pick.question_id if pick else None,
        }},
    )
    return round_


def close_round(store: StorageAccessor, round_id: UUID, *, now: Optional[datetime] = None) -> Round:
    """open -> closed. Cerrar es irreversible; cerrar dos veces es InvalidState."""
    round_ = store.get_round(round_id)
    if not round_:
        raise NotFound(f"Round {round_id} not found")
    if round_.status == "closed":
        raise InvalidState("Round is already closed")

    closed = round_.model_copy(update={"status": "closed", "closes_at": now or utcnow()})
    store.save_round(closed)
    logger.info("round closed", extra={"extra_data": {"team_id": closed.team_id, "round_id": closed.id}})
    return closed
