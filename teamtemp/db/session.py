# teamtemp/db/session.py
from functools import lru_cache

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from teamtemp.core.config import settings
from teamtemp.core.logging import get_logger, mask_url

logger = get_logger(__name__)


@lru_cache
def get_engine() -> Engine:
    # Lazy: con STORAGE_BACKEND=json no hace falta URL de BD
    db_url = settings.db_url
    logger.info("database engine created", extra={"extra_data": {"url": mask_url(db_url)}})
    if db_url.startswith("sqlite"):
        return create_engine(db_url, connect_args={"check_same_thread": False})
    return create_engine(
        db_url,
        pool_size=5,              # 5 conexiones concurrentes
        max_overflow=10,          # Hasta 15 total en picos
        pool_timeout=30,          # 30s para obtener conexión
        pool_recycle=1800,        # Recicla cada 30 min
        pool_pre_ping=True,       # Verifica que la conexión esté viva
        echo=False,
    )


@lru_cache
def get_sessionmaker() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db():
    """Dependency para FastAPI"""
    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> bool:
    """Verifica que la conexión funcione"""
    try:
        with get_engine().connect() as conn:
            row = conn.execute(text("SELECT 1")).fetchone()
            return bool(row and row[0] == 1)
    except Exception:
        logger.exception("database connection check failed")
        return False
