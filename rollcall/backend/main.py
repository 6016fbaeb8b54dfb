# rollcall/backend/main.py
from fastapi import FastAPI
from contextlib import asynccontextmanager
import redis.asyncio as redis
import asyncpg
from apscheduler.schedulers.asyncio import AsyncIOScheduler as Scheduler
from datetime import datetime
import logging

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from fastapi.middleware.cors import CORSMiddleware

from .config.config import settings
from .logging.logging_config import setup_logging
from .api import auth, admins, rollcall, timetable, students, fields, reports

from .db.redis_client import RedisClient
from .db.db_client import AsyncPostgresClient
from .tasks.cron import refresh_snapshot_task

from .api.utilities.limiter import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Creates the connection pools and the snapshot job on startup and
    releases them on shutdown.
    """
    setup_logging()
    app.state.limiter = limiter

    logger.info("Starting the rollcall API...")

    try:
        postgres_pool = await asyncpg.create_pool(
            dsn=settings.DATABASE_URL, min_size=2, max_size=10
        )
        redis_pool = redis.ConnectionPool.from_url(
            settings.APPLICATION_REDIS_URL, decode_responses=True
        )

        app.state.postgres_pool = postgres_pool
        app.state.redis_pool = redis_pool
        logger.info("PostgreSQL and Redis connection pools created.")

        db_client = AsyncPostgresClient(pool=postgres_pool)
        redis_client = RedisClient(pool=redis_pool)

        scheduler = Scheduler()
        scheduler.add_job(
            refresh_snapshot_task, "interval", minutes=settings.SNAPSHOT_REFRESH_MINUTES,
            args=[redis_client, db_client], id="refresh_snapshot", next_run_time=datetime.now()
        )
        scheduler.start()

        app.state.scheduler = scheduler
        logger.info("Snapshot refresh job scheduled.")

    except Exception as e:
        logger.error(f"Startup failed: {e}", exc_info=True)
        app.state.postgres_pool = None
        app.state.redis_pool = None
        app.state.scheduler = None

    yield

    logger.info("Shutting down the rollcall API...")
    if getattr(app.state, "scheduler", None):
        app.state.scheduler.shutdown()
        logger.info("Scheduler stopped.")
    if getattr(app.state, "postgres_pool", None):
        await app.state.postgres_pool.close()
        logger.info("PostgreSQL connection pool closed.")
    if getattr(app.state, "redis_pool", None):
        await app.state.redis_pool.disconnect()
        logger.info("Redis connection pool closed.")


app = FastAPI(
    title="Rollcall API",
    description="Class attendance taking and absentee reporting for administrators",
    version="1.0.0",
    lifespan=lifespan
)

app.state.limiter = limiter

origins = [
   "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(admins.router, prefix="/api/v1")
app.include_router(rollcall.router, prefix="/api/v1")
app.include_router(timetable.router, prefix="/api/v1")
app.include_router(students.router, prefix="/api/v1")
app.include_router(fields.router, prefix="/api/v1")
app.include_router(reports.router, prefix="/api/v1")

@app.get("/health", tags=["System"])
def health_check():
    """Liveness check."""
    return {"status": "ok", "message": "Rollcall API is running."}
