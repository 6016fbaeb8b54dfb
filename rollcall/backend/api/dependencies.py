# rollcall/backend/api/dependencies.py
from fastapi import Request, Depends
import redis.asyncio as redis
import asyncpg

from ..db.redis_client import RedisClient
from ..db.db_client import AsyncPostgresClient
from ..services.rollcall_service import RollcallService
from ..services.timetable_service import TimetableService
from ..services.roster_service import RosterService
from ..services.report_service import ReportService
from ..services.admin_service import AdminService


def get_redis_pool(request: Request) -> redis.ConnectionPool:
    """
    Provides the Redis connection pool created at startup.
    """
    return request.app.state.redis_pool

def get_postgres_pool(request: Request) -> asyncpg.Pool:
    """
    Provides the PostgreSQL connection pool created at startup.
    """
    return request.app.state.postgres_pool


def get_rollcall_service(
    redis_pool: redis.ConnectionPool = Depends(get_redis_pool),
    postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)
) -> RollcallService:
    """
    Builds a fresh RollcallService for every request.

    The clients are cheap wrappers around the shared pools created in the
    lifespan handler, so nothing is connected or torn down per request.
    """
    redis_client = RedisClient(pool=redis_pool)
    db_client = AsyncPostgresClient(pool=postgres_pool)
    return RollcallService(redis_client=redis_client, db_client=db_client)


def get_timetable_service(postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)) -> TimetableService:
    return TimetableService(db_client=AsyncPostgresClient(pool=postgres_pool))


def get_roster_service(postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)) -> RosterService:
    return RosterService(db_client=AsyncPostgresClient(pool=postgres_pool))


def get_report_service(postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)) -> ReportService:
    return ReportService(db_client=AsyncPostgresClient(pool=postgres_pool))


def get_admin_service(
    redis_pool: redis.ConnectionPool = Depends(get_redis_pool),
    postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)
) -> AdminService:
    redis_client = RedisClient(pool=redis_pool)
    db_client = AsyncPostgresClient(pool=postgres_pool)
    return AdminService(redis_client=redis_client, db_client=db_client)
