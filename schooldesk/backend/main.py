# schooldesk/backend/main.py
from fastapi import FastAPI
from contextlib import asynccontextmanager
import redis.asyncio as redis
import asyncpg
from apscheduler.schedulers.asyncio import AsyncIOScheduler as Scheduler
import logging

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from fastapi.middleware.cors import CORSMiddleware

from .config.config import settings
from .logging.logging_config import setup_logging
from .api import auth, students, teachers, classes, terms, grades, attendance, documents, dashboard, imports
from .db.db_client import init_connection
from .db.stores.academics import AcademicTermsStore
from .tasks.cron import activate_current_term_task
from .api.utilities.limiter import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Creates the shared PostgreSQL and Redis pools and the term rollover job
    on startup, and releases them on shutdown.
    """
    setup_logging()
    logger.info("Starting SchoolDesk API...")

    app.state.postgres_pool = None
    app.state.redis_pool = None
    app.state.scheduler = None

    try:
        postgres_pool = await asyncpg.create_pool(
            dsn=settings.DATABASE_URL,
            min_size=settings.DB_POOL_MIN_SIZE,
            max_size=settings.DB_POOL_MAX_SIZE,
            init=init_connection,
        )
        redis_pool = redis.ConnectionPool.from_url(
            settings.APPLICATION_REDIS_URL, decode_responses=True
        )

        app.state.postgres_pool = postgres_pool
        app.state.redis_pool = redis_pool
        logger.info("PostgreSQL and Redis connection pools created.")

        terms_store = AcademicTermsStore(postgres_pool)
        scheduler = Scheduler()
        scheduler.add_job(
            activate_current_term_task, "interval",
            minutes=settings.TERM_ROLLOVER_INTERVAL_MINUTES,
            args=[terms_store], id="activate_current_term",
        )
        scheduler.start()
        app.state.scheduler = scheduler
        logger.info("Scheduled jobs started.")

        # Align the active term right away instead of waiting for the first interval.
        await activate_current_term_task(terms_store)

    except Exception as e:
        logger.error(f"Startup failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down SchoolDesk API...")
    if app.state.scheduler:
        app.state.scheduler.shutdown()
        logger.info("Scheduler stopped.")
    if app.state.postgres_pool:
        await app.state.postgres_pool.close()
        logger.info("PostgreSQL connection pool closed.")
    if app.state.redis_pool:
        await app.state.redis_pool.disconnect()
        logger.info("Redis connection pool closed.")


app = FastAPI(
    title="SchoolDesk API",
    description="School administration: students, teachers, attendance, grades and documents.",
    version="1.0.0",
    lifespan=lifespan
)

app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")
app.include_router(students.router, prefix="/api/v1")
app.include_router(teachers.router, prefix="/api/v1")
app.include_router(classes.router, prefix="/api/v1")
app.include_router(terms.router, prefix="/api/v1")
app.include_router(grades.router, prefix="/api/v1")
app.include_router(attendance.router, prefix="/api/v1")
app.include_router(documents.templates_router, prefix="/api/v1")
app.include_router(documents.router, prefix="/api/v1")
app.include_router(imports.router, prefix="/api/v1")

@app.get("/health", tags=["System"])
def health_check():
    """Liveness probe."""
    return {"status": "ok", "message": "SchoolDesk API is running."}
