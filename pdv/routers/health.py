"""Liveness/readiness do PDV."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from pdv.core.config import settings
from pdv.core.logging import app_logger
from pdv.infra.db import health_check

router = APIRouter(tags=["health"])


@router.get("/")
def root():
    return {
        "name": settings.APP_NAME,
        "env": settings.ENV,
        "docs": "/docs",
        "healthz": "/healthz",
        "readyz": "/readyz",
    }


@router.get("/healthz")
def healthz():
    return {"status": "ok"}


@router.get("/readyz")
def readyz():
    """Readiness check with database connectivity."""
    try:
        return {"status": "ready", "database": health_check()}
    except Exception as exc:
        app_logger.error("Readiness check failed", exc=exc)
        return JSONResponse(status_code=503, content={"status": "not ready", "error": str(exc)})
