# teamtemp/core/config.py
from __future__ import annotations
from pathlib import Path
from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[2]  # .../package
ENV_FILE = ROOT_DIR / ".env"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # App
    APP_NAME: str = "TeamTemp API"
    ENV: str = "dev"
    DEBUG: bool = False

    # CORS (coma separada: CORS_ORIGINS=https://teamtemp.example.com)
    CORS_ORIGINS: str = ""

    # Storage: "sql" usa DATABASE_URL, "json" usa un archivo local (desarrollo)
    STORAGE_BACKEND: Literal["sql", "json"] = "sql"
    JSON_STORE_PATH: str = str(ROOT_DIR / "data" / "db.json")

    # DB URLs (acepta cualquiera de las dos)
    DATABASE_URL: str | None = None
    SQLALCHEMY_DATABASE_URI: str | None = None

    # Token para /super/*; vacío deshabilita el panel
    SUPER_ADMIN_TOKEN: str = ""

    # Ventanas de agregación
    DASHBOARD_ROUNDS: int = 8
    ANALYTICS_ROUNDS: int = 20

    # Valores por defecto de equipos nuevos
    DEFAULT_SCALE_MAX: int = 3
    DEFAULT_MIN_RESPONSES: int = 4

    @property
    def cors_list(self) -> list[str]:
        if not self.CORS_ORIGINS:
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def db_url(self) -> str:
        """
        URL unificada para SQLAlchemy. Acepta DATABASE_URL o SQLALCHEMY_DATABASE_URI.
        Fuerza sslmode=require para Supabase si faltara.
        """
        url = (self.DATABASE_URL or self.SQLALCHEMY_DATABASE_URI or "").strip()
        if not url:
            raise ValueError("Define DATABASE_URL o SQLALCHEMY_DATABASE_URI en variables de entorno.")
        if ("supabase.co" in url or "supabase.com" in url) and "sslmode=" not in url:
            sep = "&" if "?" in url else "?"
            url = f"{url}{sep}sslmode=require"
        return url

@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
