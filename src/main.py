from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from src.api.router import api_router
from src.config import get_settings
from src.db.database import init_db
from src.scheduler.runner import start_scheduler

settings = get_settings()
scheduler: Optional[object] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global scheduler
    logger.info("Starting up...")
    await init_db()

    if not settings.cron_secret:
        logger.warning("CRON_SECRET is not set, trigger endpoints are unauthenticated")
    if not settings.vapid_private_key:
        logger.warning("VAPID_PRIVATE_KEY is not set, push delivery will fail")
    if not settings.vapid_public_key:
        logger.warning("VAPID_PUBLIC_KEY is not set, browsers cannot subscribe")

    # Only when no external scheduler calls /api/cron/master
    if settings.scheduler_enabled:
        scheduler = start_scheduler()

    yield

    if scheduler:
        scheduler.shutdown()
        scheduler = None
    logger.info("Shutting down...")


# Disable interactive docs in production
docs_url = None if settings.is_production else "/docs"
redoc_url = None if settings.is_production else "/redoc"

app = FastAPI(
    title="Fleet Alerts API",
    description="Document expiry alerts and Web Push delivery",
    version="0.1.0",
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url,
)

# Configure CORS origins
default_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
if settings.cors_origins:
    cors_origins = [origin.strip() for origin in settings.cors_origins.split(",")]
else:
    cors_origins = default_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization", "X-User-Id"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
