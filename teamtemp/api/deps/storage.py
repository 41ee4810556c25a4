# teamtemp/api/deps/storage.py
from typing import Iterator

from teamtemp.core.config import settings
from teamtemp.storage.base import StorageAccessor
from teamtemp.storage.memory import JsonFileStorage
from teamtemp.storage.sql import SqlStorage


def get_store() -> Iterator[StorageAccessor]:
    """
    Dependency para FastAPI: SqlStorage sobre la sesión de get_db,
    o el archivo JSON local si STORAGE_BACKEND=json.
    """
    if settings.STORAGE_BACKEND == "json":
        yield JsonFileStorage(settings.JSON_STORE_PATH)
        return

    from teamtemp.db.session import get_db

    for db in get_db():
        yield SqlStorage(db)
