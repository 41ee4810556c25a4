# teamtemp/api/v1/endpoints/teams.py
from uuid import UUID

from fastapi import APIRouter, Depends, status

from teamtemp.api.deps.storage import get_store
from teamtemp.schemas.admin import OkOut, RecoverIn, TeamCreateIn, TeamCreateOut
from teamtemp.schemas.views import DashboardOut, RetroOut
from teamtemp.services import teams as team_service
from teamtemp.services.views import build_dashboard, build_retro
from teamtemp.storage.base import StorageAccessor

router = APIRouter(prefix="/teams", tags=["teams"])


@router.post("", response_model=TeamCreateOut, status_code=status.HTTP_201_CREATED)
def create_team(payload: TeamCreateIn, store: StorageAccessor = Depends(get_store)):
    team = team_service.create_team(store, payload.name, payload.admin_email)
    return TeamCreateOut(slug=team.slug, admin_link=team_service.admin_link(team), admin_token=team.admin_token)


@router.post("/recover", response_model=OkOut)
def recover_admin_link(payload: RecoverIn, store: StorageAccessor = Depends(get_store)):
    # Misma respuesta exista o no el email
    team_service.find_team_for_recovery(store, payload.email.strip().lower())
    return OkOut()


@router.get("/{slug}/dashboard", response_model=DashboardOut)
def dashboard(slug: str, store: StorageAccessor = Depends(get_store)):
    team = team_service.get_team_by_slug(store, slug)
    return build_dashboard(store, team)


@router.get("/{slug}/retro/{round_id}", response_model=RetroOut)
def retro(slug: str, round_id: UUID, store: StorageAccessor = Depends(get_store)):
    team = team_service.get_team_by_slug(store, slug)
    return build_retro(store, team, round_id)
