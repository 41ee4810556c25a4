# teamtemp/core/logging.py
"""
Logs JSON de una línea. Cada registro lleva el contexto del request en curso
(request_id, método, ruta) y las URLs con credenciales salen enmascaradas.
"""
import json
import logging
import re
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

_URL_CREDENTIALS = re.compile(r"://([^:/@\s]+):([^@\s]+)@")

# contexto del request actual; vacío fuera de un request (scripts, alembic)
_request_context: ContextVar[dict] = ContextVar("teamtemp_request_context", default={})


def mask_url(u: str) -> str:
    """Enmascara la contraseña en la URL para logs seguros"""
    return _URL_CREDENTIALS.sub(r"://\1:***@", u)


def _masked(value):
    if isinstance(value, str):
        return mask_url(value)
    if isinstance(value, dict):
        return {k: _masked(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_masked(v) for v in value]
    return value


def bind_request(method: str, path: str, request_id: str | None = None):
    """Fija el contexto del request; devuelve el token para `reset_request`."""
    return _request_context.set({
        "request_id": request_id or uuid.uuid4().hex[:12],
        "method": method,
        "path": path,
    })


def reset_request(token) -> None:
    _request_context.reset(token)


def current_request_id() -> str | None:
    return _request_context.get().get("request_id")


class JSONFormatter(logging.Formatter):
    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": mask_url(record.getMessage()),
        }
        ctx = _request_context.get()
        if ctx:
            entry["request"] = ctx
        data = getattr(record, "extra_data", None)
        if data is not None:
            entry["data"] = _masked(data)
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = mask_url(self.formatException(record.exc_info))
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(debug: bool = False):
    """Se llama una vez al arrancar la app o un script."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    root.handlers = [handler]

    # el engine de SQLAlchemy repite cada query en INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
