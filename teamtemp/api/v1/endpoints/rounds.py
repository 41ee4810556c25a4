# teamtemp/api/v1/endpoints/rounds.py
"""Página pública de respuesta: se accede solo con el token de la ronda."""
from fastapi import APIRouter, Depends, status

from teamtemp.api.deps.storage import get_store
from teamtemp.core.errors import NotFound
from teamtemp.schemas.respond import (
    RespondIn,
    RespondOut,
    RespondPageOut,
    RespondRoundOut,
    RespondSettingsOut,
    RoundQuestionOut,
)
from teamtemp.services.normalizer import scale_labels
from teamtemp.services.submissions import record_submission
from teamtemp.services.teams import get_settings
from teamtemp.storage.base import StorageAccessor

router = APIRouter(prefix="/rounds", tags=["rounds"])


def _round_or_404(store: StorageAccessor, token: str):
    round_ = store.get_round_by_token(token)
    if not round_:
        raise NotFound("Round not found")
    return round_


@router.get("/{token}", response_model=RespondPageOut)
def respond_page(token: str, store: StorageAccessor = Depends(get_store)):
    round_ = _round_or_404(store, token)
    if round_.status != "open":
        return RespondPageOut(round=RespondRoundOut(id=round_.id, status=round_.status))

    team_settings = get_settings(store, round_.team_id)
    questions = [
        RoundQuestionOut(id=rq.id, question_text=rq.question_text, kind=rq.kind, position=rq.position)
        for rq in store.list_round_questions(round_.id)
    ]
    # La escala es la de la ronda, aunque el equipo la haya cambiado después
    return RespondPageOut(
        round=RespondRoundOut(id=round_.id, status=round_.status),
        settings=RespondSettingsOut(
            scale_max=round_.scale_max,
            scale_labels=scale_labels(round_.scale_max),
            allow_free_text=team_settings.allow_free_text,
        ),
        questions=questions,
    )


@router.post("/{token}/responses", response_model=RespondOut, status_code=status.HTTP_201_CREATED)
def submit_responses(token: str, payload: RespondIn, store: StorageAccessor = Depends(get_store)):
    round_ = _round_or_404(store, token)
    record_submission(store, round_.id, payload.answers, payload.free_text, payload.client_hash)
    return RespondOut(ok=True, response_count=store.count_submissions(round_.id))
