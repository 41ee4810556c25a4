# teamtemp/api/v1/endpoints/super_admin.py
from typing import List

from fastapi import APIRouter, Depends

from teamtemp.api.deps.auth import require_super_admin
from teamtemp.api.deps.storage import get_store
from teamtemp.schemas.admin import TeamOverviewOut
from teamtemp.services.teams import teams_overview
from teamtemp.storage.base import StorageAccessor

router = APIRouter(prefix="/super", tags=["super"], dependencies=[Depends(require_super_admin)])


@router.get("/teams", response_model=List[TeamOverviewOut])
def list_teams(store: StorageAccessor = Depends(get_store)):
    return teams_overview(store)
