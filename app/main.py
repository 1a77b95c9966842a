"""SiteSignal Backend — FastAPI application with scheduled score refresh.

Starts the API server and the background recalculation scheduler.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.config import get_settings
from app.models.database import init_db
from app.routers import (
    accounts_router, assessments_router, catalog_router,
    metric_sets_router, scores_router, standard_metric_sets_router,
)
from app.services.recalculation import scheduled_recalculation_job

# ─── LOGGING ─────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-25s | %(levelname)-7s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("sitesignal")

# ─── SCHEDULER ───────────────────────────────────────────────────────────────

scheduler = AsyncIOScheduler()


# ─── APP LIFECYCLE ───────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    settings = get_settings()

    logger.info("Initializing database...")
    await init_db()
    logger.info("Database ready")

    if settings.scheduler_enabled:
        scheduler.add_job(
            scheduled_recalculation_job,
            trigger=IntervalTrigger(hours=settings.recalc_interval_hours),
            id="scheduled_recalculation",
            name="Scheduled assessment score refresh",
            replace_existing=True,
        )
        scheduler.start()
        logger.info(f"Scheduler started — refreshing scores every {settings.recalc_interval_hours} hours")

    yield

    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


# ─── APP ─────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="SiteSignal API",
    description=(
        "Commercial real-estate site assessment API. "
        "Scores candidate sites against configurable target metrics "
        "and tracks assessment completion."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(accounts_router, prefix="/api/v1")
app.include_router(metric_sets_router, prefix="/api/v1")
app.include_router(standard_metric_sets_router, prefix="/api/v1")
app.include_router(assessments_router, prefix="/api/v1")
app.include_router(catalog_router, prefix="/api/v1")
app.include_router(scores_router, prefix="/api/v1")


# ─── HEALTH CHECK ────────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    db = get_settings().database_url
    return {
        "status": "ok",
        "service": "sitesignal-api",
        "version": "1.0.0",
        "db_type": "postgres" if "postgres" in db else "sqlite",
        "scheduler_running": scheduler.running,
    }


@app.get("/")
async def root():
    return {
        "name": "SiteSignal API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }
