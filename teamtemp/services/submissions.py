# teamtemp/services/submissions.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from teamtemp.core.errors import InvalidAnswer, InvalidState, NotFound
from teamtemp.core.logging import get_logger
from teamtemp.schemas.records import Answer, FreeText, Submission, utcnow
from teamtemp.schemas.respond import AnswerIn
from teamtemp.storage.base import StorageAccessor

logger = get_logger(__name__)


def _reject(round_id: UUID, detail: str) -> InvalidAnswer:
    logger.warning("submission rejected", extra={"extra_data": {"round_id": round_id, "reason": detail}})
    return InvalidAnswer(detail)


def record_submission(
    store: StorageAccessor,
    round_id: UUID,
    answers: Sequence[AnswerIn],
    free_text: Optional[str] = None,
    client_hash: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> Submission:
    """
    Guarda la respuesta completa de una persona en una ronda abierta.

    Cada valor debe estar en 1..scale_max de LA RONDA (no de la configuración
    actual del equipo). Submission, respuestas y texto libre se escriben juntos.
    """
    round_ = store.get_round(round_id)
    if not round_:
        raise NotFound(f"Round {round_id} not found")
    if round_.status != "open":
        raise InvalidState("This round is no longer open")
    if not answers:
        raise _reject(round_id, "At least one answer is required")

    valid_rq_ids = {rq.id for rq in store.list_round_questions(round_id)}
    seen: set[UUID] = set()
    for a in answers:
        if a.round_question_id not in valid_rq_ids:
            raise _reject(round_id, f"Question {a.round_question_id} is not part of this round")
        if a.round_question_id in seen:
            raise _reject(round_id, f"Question {a.round_question_id} answered twice")
        if not 1 <= a.value <= round_.scale_max:
            raise _reject(round_id, f"Value {a.value} is outside 1..{round_.scale_max}")
        seen.add(a.round_question_id)

    ts = now or utcnow()
    submission = Submission(round_id=round_id, client_hash=client_hash, created_at=ts)
    rows = [
        Answer(submission_id=submission.id, round_question_id=a.round_question_id, value=a.value)
        for a in answers
    ]

    ft = None
    text = (free_text or "").strip()
    if text:
        settings = store.get_settings(round_.team_id)
        if settings is None or settings.allow_free_text:
            ft = FreeText(submission_id=submission.id, text=text, created_at=ts)
        else:
            logger.info("free text dropped (disabled for team)", extra={"extra_data": {"round_id": round_id}})

    store.add_submission(submission, rows, ft)
    logger.info(
        "submission recorded",
        extra={"extra_data": {"round_id": round_id, "answers": len(rows), "free_text": ft is not None}},
    )
    return submission
