"""
main.py — FastAPI Application Entrypoint

Purpose:
- Initialize application services (logging, config).
- Register API routers.
- Define root-level health/status endpoints.
- Provide `app` object used by ASGI server (uvicorn / hypercorn).

This file should stay clean: no business logic here.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dcf_engine.core.config import settings
from dcf_engine.core.logging import configure_logging
from dcf_engine.api.v1 import models

# -----------------------------------------------------------------------------
# App Initialization
# -----------------------------------------------------------------------------

configure_logging(settings.LOG_LEVEL)

app = FastAPI(
    title=settings.APP_NAME,
    description="Three-statement projection and DCF valuation engine",
    version="0.1.0",
)

# -----------------------------------------------------------------------------
# CORS
# -----------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------------------------------------------------------
# Router Registration
# -----------------------------------------------------------------------------

app.include_router(models.router, prefix="/api/v1")

# -----------------------------------------------------------------------------
# Health Check
# -----------------------------------------------------------------------------

@app.get("/")
def root():
    return {"status": "ok", "message": f"{settings.APP_NAME} running"}
