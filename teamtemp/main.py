# teamtemp/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from teamtemp.api.v1.endpoints import admin, health, rounds, super_admin, teams
from teamtemp.core.config import settings
from teamtemp.core.errors import TeamTempError
from teamtemp.core.logging import bind_request, reset_request, setup_logging

API_V1_PREFIX = "/api/v1"

setup_logging(settings.DEBUG)

app = FastAPI(
    title=settings.APP_NAME,
    description="API de TeamTemp: pulsos de equipo anónimos y señales para la retro",
    version="1.0.0",
)

# CORS (en prod: restringe orígenes con CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    # request_id del cliente si lo manda; si no, uno nuevo
    token = bind_request(request.method, request.url.path, request.headers.get("x-request-id"))
    try:
        response = await call_next(request)
    finally:
        reset_request(token)
    return response


@app.exception_handler(TeamTempError)
async def domain_error_handler(request: Request, exc: TeamTempError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Routers versionados
app.include_router(health.router,      prefix=API_V1_PREFIX)
app.include_router(teams.router,       prefix=API_V1_PREFIX)
app.include_router(rounds.router,      prefix=API_V1_PREFIX)
app.include_router(admin.router,       prefix=API_V1_PREFIX)
app.include_router(super_admin.router, prefix=API_V1_PREFIX)


@app.get("/")
def root():
    return {
        "message": "TeamTemp API",
        "version": "1.0.0",
        "docs": "/docs",
        "api_v1": API_V1_PREFIX,
        "storage": settings.STORAGE_BACKEND,
    }
