import logging

from ..db.redis_client import RedisClient
from ..db.db_client import AsyncPostgresClient
from ..models.redis_models import TimetableSnapshotRedis, RosterSnapshotRedis
from ..modules.clock import local_now
from ..config.config import settings

logger = logging.getLogger(__name__)


async def refresh_snapshot_task(redis_client: RedisClient, db_client: AsyncPostgresClient):
    """
    Copies the timetable and the roster from PostgreSQL into Redis so session
    derivation can keep working while the database is unreachable.
    The timetable and the roster are refreshed independently.
    """
    logger.info("Running refresh_snapshot_task...")
    taken_at = local_now()

    try:
        entries = await db_client.get_timetable()
        await redis_client.save_timetable_snapshot(
            TimetableSnapshotRedis(entries=entries, taken_at=taken_at), ttl=settings.SNAPSHOT_TTL_SECONDS
        )
        logger.info(f"Timetable snapshot refreshed with {len(entries)} entries.")
    except Exception as e:
        logger.error(f"Failed to refresh the timetable snapshot: {e}", exc_info=True)

    try:
        students = await db_client.get_students()
        await redis_client.save_roster_snapshot(
            RosterSnapshotRedis(students=students, taken_at=taken_at), ttl=settings.SNAPSHOT_TTL_SECONDS
        )
        logger.info(f"Roster snapshot refreshed with {len(students)} students.")
    except Exception as e:
        logger.error(f"Failed to refresh the roster snapshot: {e}", exc_info=True)
