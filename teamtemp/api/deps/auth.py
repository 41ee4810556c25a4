# teamtemp/api/deps/auth.py
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from teamtemp.api.deps.storage import get_store
from teamtemp.core.config import settings
from teamtemp.core.errors import Unauthorized
from teamtemp.schemas.records import Team
from teamtemp.storage.base import StorageAccessor

# auto_error=False: el 401 lo decidimos aquí para devolver {"detail": ...}
bearer_scheme = HTTPBearer(auto_error=False)


def _bearer_token(creds: HTTPAuthorizationCredentials | None) -> str:
    if not creds or not creds.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return creds.credentials


def get_admin_team(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    store: StorageAccessor = Depends(get_store),
) -> Team:
    """El token de admin del equipo es opaco: se busca tal cual."""
    team = store.get_team_by_admin_token(_bearer_token(creds))
    if not team:
        raise Unauthorized("Invalid admin token")
    return team


def require_super_admin(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> None:
    token = _bearer_token(creds)
    if not settings.SUPER_ADMIN_TOKEN or not secrets.compare_digest(token, settings.SUPER_ADMIN_TOKEN):
        raise Unauthorized("Invalid super admin token")
