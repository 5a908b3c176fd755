"""FastAPI application entry point."""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from termserve.api import codesystems, valuesets
from termserve.core import config
from termserve.core.logging import get_logger, setup_logging
from termserve.persistence.db import init_db

logger = get_logger(__name__)

# ------------------------------------------------------------------
# App creation
# ------------------------------------------------------------------
app = FastAPI(
    title="Terminology Service API",
    description="CodeSystem $lookup / $validate-code and ValueSet $validate-code / $expand",
    version="1.0.0",
)

# CORS: allow everything for local dev (restrict for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------------
# Startup: logging + DB schema
# ------------------------------------------------------------------
@app.on_event("startup")
def on_startup():
    setup_logging(config.LOG_LEVEL)
    init_db()
    logger.info("Terminology store ready at %s", config.DATABASE_PATH)


@app.get("/health")
def health():
    return {"status": "ok"}


# ------------------------------------------------------------------
# Routers
# ------------------------------------------------------------------
app.include_router(codesystems.router)
app.include_router(valuesets.router)
