# alembic/env.py
from __future__ import annotations

import os
from pathlib import Path
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import create_engine, pool

# --- Carga .env (raíz del repo) ---
ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(ROOT_DIR / ".env")

# --- Limpia variables de entorno de PG que estorban y asegura UTF-8 ---
for var in ("PGSERVICE", "PGSERVICEFILE", "PGSYSCONFDIR", "PGAPPNAME", "PGOPTIONS", "PGPASSFILE"):
    os.environ.pop(var, None)
os.environ.setdefault("PGCLIENTENCODING", "UTF8")

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

# --- URL de conexión ---
# DATABASE_URL / SQLALCHEMY_DATABASE_URI del entorno; fallback a sqlalchemy.url en alembic.ini
db_url = (
    os.getenv("DATABASE_URL")
    or os.getenv("SQLALCHEMY_DATABASE_URI")
    or config.get_main_option("sqlalchemy.url")
)

if not db_url:
    raise RuntimeError(
        "No se encontró URL de BD. Define DATABASE_URL en .env "
        "o sqlalchemy.url en alembic.ini"
    )

# Fuerza sslmode=require cuando es Supabase y no está presente
if ("supabase.co" in db_url or "supabase.com" in db_url) and "sslmode=" not in db_url:
    sep = "&" if "?" in db_url else "?"
    db_url = f"{db_url}{sep}sslmode=require"

context.config.set_main_option("sqlalchemy.url", db_url)

# --- Metadata de modelos para autogenerate ---
from teamtemp.core.logging import get_logger, mask_url  # noqa: E402
from teamtemp.db.base import Base  # noqa: E402

target_metadata = Base.metadata

get_logger("alembic.env").info("migrations target", extra={"extra_data": {"url": mask_url(db_url)}})


# --- Offline / Online runners ---
def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    # Para Supabase, NullPool es suficiente en migraciones
    engine = create_engine(db_url, poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
