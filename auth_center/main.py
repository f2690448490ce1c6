from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from auth_center.api.routers.admin import router as admin_router
from auth_center.api.routers.auth import router as auth_router
from auth_center.infrastructure.db.engine import get_engine, init_schema
from auth_center.shared.config import get_settings
from auth_center.shared.logging import configure_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    settings = get_settings()
    if settings.auto_migrate and settings.postgres_dsn:
        init_schema(get_engine(settings.postgres_dsn))
        logger.info("main: schema_ready")
    yield


configure_logging(get_settings().log_level)

app = FastAPI(title="Auth Center", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth_router)
app.include_router(admin_router)


@app.get("/health")
def health():
    return {"status": "ok", "environment": get_settings().environment}
