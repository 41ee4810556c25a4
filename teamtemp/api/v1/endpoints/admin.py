# teamtemp/api/v1/endpoints/admin.py
"""
Endpoints de administración del equipo. El equipo sale del token de admin
(Authorization: Bearer ...), nunca de la URL.
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from teamtemp.api.deps.auth import get_admin_team
from teamtemp.api.deps.storage import get_store
from teamtemp.core.errors import NotFound
from teamtemp.schemas.admin import (
    ItemKindIn,
    OkOut,
    QuestionCreateIn,
    QuestionDeleteIn,
    QuestionOut,
    RoundOut,
    SettingsUpdateIn,
)
from teamtemp.schemas.records import Team
from teamtemp.schemas.views import AdminLoadOut, AnalyticsOut, CommentOut, SetItemOut, SettingsOut
from teamtemp.services import questions as question_service
from teamtemp.services.composer import close_round, compose_round
from teamtemp.services.exports import XLSX_MEDIA_TYPE, build_team_workbook, stream_round_stats_csv
from teamtemp.services.teams import get_settings, update_settings
from teamtemp.services.views import build_admin_load, build_analytics, list_comments
from teamtemp.storage.base import StorageAccessor

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/load", response_model=AdminLoadOut)
def load(team: Team = Depends(get_admin_team), store: StorageAccessor = Depends(get_store)):
    return build_admin_load(store, team)


# -------------------- settings -------------------- #

@router.get("/settings", response_model=SettingsOut)
def read_settings(team: Team = Depends(get_admin_team), store: StorageAccessor = Depends(get_store)):
    return SettingsOut.model_validate(get_settings(store, team.id), from_attributes=True)


@router.put("/settings", response_model=SettingsOut)
def write_settings(
    payload: SettingsUpdateIn,
    team: Team = Depends(get_admin_team),
    store: StorageAccessor = Depends(get_store),
):
    updated = update_settings(store, team.id, **payload.model_dump())
    return SettingsOut.model_validate(updated, from_attributes=True)


# -------------------- preguntas -------------------- #

@router.post("/questions", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
def add_question(
    payload: QuestionCreateIn,
    team: Team = Depends(get_admin_team),
    store: StorageAccessor = Depends(get_store),
):
    q = question_service.add_question(store, team.id, payload.text, payload.category, payload.kind)
    return QuestionOut.model_validate(q, from_attributes=True)


@router.delete("/questions", response_model=OkOut)
def delete_question(
    payload: QuestionDeleteIn,
    team: Team = Depends(get_admin_team),
    store: StorageAccessor = Depends(get_store),
):
    if payload.item_id:
        question_service.remove_from_set(store, team.id, payload.item_id)
    if payload.question_id:
        question_service.deactivate_question(store, team.id, payload.question_id)
    return OkOut()


@router.patch("/questions/items/{item_id}", response_model=SetItemOut)
def change_item_kind(
    item_id: UUID,
    payload: ItemKindIn,
    team: Team = Depends(get_admin_team),
    store: StorageAccessor = Depends(get_store),
):
    item = question_service.set_item_kind(store, team.id, item_id, payload.kind)
    return SetItemOut(id=item.id, question_id=item.question_id, kind=item.kind, position=item.position)


# -------------------- rondas -------------------- #

@router.post("/rounds", response_model=RoundOut, status_code=status.HTTP_201_CREATED)
def create_round(team: Team = Depends(get_admin_team), store: StorageAccessor = Depends(get_store)):
    return RoundOut.model_validate(compose_round(store, team.id), from_attributes=True)


@router.post("/rounds/{round_id}/close", response_model=RoundOut)
def close(round_id: UUID, team: Team = Depends(get_admin_team), store: StorageAccessor = Depends(get_store)):
    round_ = store.get_round(round_id)
    if not round_ or round_.team_id != team.id:
        raise NotFound("Round not found")
    return RoundOut.model_validate(close_round(store, round_id), from_attributes=True)


# -------------------- lecturas -------------------- #

@router.get("/comments", response_model=List[CommentOut])
def comments(team: Team = Depends(get_admin_team), store: StorageAccessor = Depends(get_store)):
    return list_comments(store, team)


@router.get("/analytics", response_model=AnalyticsOut)
def analytics(team: Team = Depends(get_admin_team), store: StorageAccessor = Depends(get_store)):
    return build_analytics(store, team)


# -------------------- exportaciones -------------------- #

@router.get("/exports/round-stats.csv")
def export_round_stats_csv(team: Team = Depends(get_admin_team), store: StorageAccessor = Depends(get_store)):
    filename = f"round-stats_{team.slug}.csv"
    return StreamingResponse(stream_round_stats_csv(store, team), media_type="text/csv",
                             headers={"Content-Disposition": f'attachment; filename="{filename}"'})


@router.get("/exports/team.xlsx")
def export_team_xlsx(team: Team = Depends(get_admin_team), store: StorageAccessor = Depends(get_store)):
    filename = f"teamtemp_{team.slug}.xlsx"
    return StreamingResponse(iter([build_team_workbook(store, team)]),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'})
