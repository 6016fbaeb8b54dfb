import pytest
from unittest.mock import AsyncMock

from rollcall.backend.tasks.cron import refresh_snapshot_task
from rollcall.backend.config.config import settings
from rollcall.backend.models.db_models import Student, TimetableEntry
from rollcall.backend.models.redis_models import TimetableSnapshotRedis, RosterSnapshotRedis

ENTRY = TimetableEntry(id="tt-1", day="Monday", time_slot="08:00 - 10:00", course="DB",
                       field="CS", level="Level 200", room="101", lecturer="Dr. Codd")
STUDENT = Student(id="s1", name="Jane Doe", matricule="CS001", field="CS", level="Level 200",
                  parent_name="Mr. Doe", parent_phone="+237600000001")


@pytest.mark.asyncio
async def test_refresh_snapshot_copies_timetable_and_roster():
    mock_redis_client = AsyncMock()
    mock_db_client = AsyncMock()
    mock_db_client.get_timetable.return_value = [ENTRY]
    mock_db_client.get_students.return_value = [STUDENT]

    await refresh_snapshot_task(mock_redis_client, mock_db_client)

    timetable_snapshot = mock_redis_client.save_timetable_snapshot.call_args[0][0]
    assert isinstance(timetable_snapshot, TimetableSnapshotRedis)
    assert timetable_snapshot.entries == [ENTRY]
    assert mock_redis_client.save_timetable_snapshot.call_args.kwargs["ttl"] == settings.SNAPSHOT_TTL_SECONDS

    roster_snapshot = mock_redis_client.save_roster_snapshot.call_args[0][0]
    assert isinstance(roster_snapshot, RosterSnapshotRedis)
    assert roster_snapshot.students == [STUDENT]


@pytest.mark.asyncio
async def test_timetable_failure_does_not_block_roster_refresh():
    mock_redis_client = AsyncMock()
    mock_db_client = AsyncMock()
    mock_db_client.get_timetable.side_effect = ConnectionError("db down")
    mock_db_client.get_students.return_value = [STUDENT]

    await refresh_snapshot_task(mock_redis_client, mock_db_client)

    mock_redis_client.save_timetable_snapshot.assert_not_called()
    mock_redis_client.save_roster_snapshot.assert_awaited_once()


@pytest.mark.asyncio
async def test_database_down_keeps_previous_snapshots():
    mock_redis_client = AsyncMock()
    mock_db_client = AsyncMock()
    mock_db_client.get_timetable.side_effect = ConnectionError("db down")
    mock_db_client.get_students.side_effect = ConnectionError("db down")

    await refresh_snapshot_task(mock_redis_client, mock_db_client)

    mock_redis_client.save_timetable_snapshot.assert_not_called()
    mock_redis_client.save_roster_snapshot.assert_not_called()
