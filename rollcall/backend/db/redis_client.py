import logging
from typing import Optional
import redis.asyncio as redis

from ..models.redis_models import AdminSessionRedis, TimetableSnapshotRedis, RosterSnapshotRedis

logger = logging.getLogger(__name__)

TIMETABLE_SNAPSHOT_KEY = "snapshot:timetable"
ROSTER_SNAPSHOT_KEY = "snapshot:roster"


class RedisClient:
    """
    Redis client for admin sessions and the timetable/roster snapshots.
    """

    def __init__(self, pool: redis.ConnectionPool):
        self._redis = redis.Redis(connection_pool=pool, decode_responses=True)

    # ===== Admin Session Management =====

    async def save_admin_session(self, session: AdminSessionRedis, ttl: int):
        """Stores the admin session with a TTL."""
        key = f"admins:{session.user_data.id}"
        await self._redis.set(key, session.model_dump_json(), ex=ttl)

    async def get_admin_session(self, admin_id: str) -> Optional[AdminSessionRedis]:
        key = f"admins:{admin_id}"
        session_json = await self._redis.get(key)
        return AdminSessionRedis.model_validate_json(session_json) if session_json else None

    async def delete_admin_session(self, admin_id: str) -> int:
        key = f"admins:{admin_id}"
        return await self._redis.delete(key)

    # ===== Last-known-good snapshots =====

    async def save_timetable_snapshot(self, snapshot: TimetableSnapshotRedis, ttl: int):
        await self._redis.set(TIMETABLE_SNAPSHOT_KEY, snapshot.model_dump_json(), ex=ttl)

    async def get_timetable_snapshot(self) -> Optional[TimetableSnapshotRedis]:
        snapshot_json = await self._redis.get(TIMETABLE_SNAPSHOT_KEY)
        return TimetableSnapshotRedis.model_validate_json(snapshot_json) if snapshot_json else None

    async def save_roster_snapshot(self, snapshot: RosterSnapshotRedis, ttl: int):
        await self._redis.set(ROSTER_SNAPSHOT_KEY, snapshot.model_dump_json(), ex=ttl)

    async def get_roster_snapshot(self) -> Optional[RosterSnapshotRedis]:
        snapshot_json = await self._redis.get(ROSTER_SNAPSHOT_KEY)
        return RosterSnapshotRedis.model_validate_json(snapshot_json) if snapshot_json else None
