# teamtemp/api/v1/endpoints/health.py
from fastapi import APIRouter, HTTPException

from teamtemp.core.config import settings

router = APIRouter(tags=["health"])

@router.get("/healthz")
def healthz():
    return {"status": "ok"}

# health rápido de DB
@router.get("/healthz/db")
def healthz_db():
    if settings.STORAGE_BACKEND != "sql":
        return {"db": "skipped", "storage": settings.STORAGE_BACKEND}

    from teamtemp.db.session import check_db_connection

    if not check_db_connection():
        raise HTTPException(status_code=503, detail="Database unavailable")
    return {"db": "ok"}
