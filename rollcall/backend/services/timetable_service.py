import logging
from typing import List, Optional
from uuid import uuid4

from ..db.db_client import AsyncPostgresClient, affected_rows
from ..models.db_models import TimetableEntry
from ..modules.conflict_checker import check_timetable_conflict
from .errors import ServiceError, NotFoundError, TimetableConflictError

logger = logging.getLogger(__name__)


class TimetableService:
    """
    Manages the weekly timetable. Every add and update is checked for room
    and field double-booking against the entries already stored.
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def list_entries(self, field: Optional[str] = None) -> List[TimetableEntry]:
        try:
            return await self.db_client.get_timetable(field)
        except Exception as e:
            logger.error("Error reading the timetable.", exc_info=True)
            raise ServiceError("A server error occurred while reading the timetable.") from e

    async def _ensure_no_conflict(self, candidate: TimetableEntry, exclude_id: Optional[str] = None):
        existing = await self.list_entries()
        conflict = check_timetable_conflict(candidate, existing, exclude_id=exclude_id)
        if conflict:
            logger.info(f"Rejected timetable change for '{candidate.course}': {conflict}")
            raise TimetableConflictError(conflict)

    async def add_entry(self, day: str, time_slot: str, course: str, field: str, level: str, room: str, lecturer: str) -> TimetableEntry:
        entry = TimetableEntry(
            id=str(uuid4()), day=day, time_slot=time_slot, course=course,
            field=field, level=level, room=room, lecturer=lecturer
        )
        await self._ensure_no_conflict(entry)
        try:
            await self.db_client.add_timetable_entry(entry)
            logger.info(f"Timetable entry {entry.id} added: {entry.course} ({entry.field}) {entry.day} {entry.time_slot} in {entry.room}.")
            return entry
        except Exception as e:
            logger.error(f"Error adding timetable entry for '{course}'.", exc_info=True)
            raise ServiceError("A server error occurred while adding the timetable entry.") from e

    async def update_entry(self, entry_id: str, day: str, time_slot: str, course: str, field: str, level: str, room: str, lecturer: str) -> TimetableEntry:
        try:
            current = await self.db_client.get_timetable_entry(entry_id)
        except Exception as e:
            logger.error(f"Error reading timetable entry {entry_id}.", exc_info=True)
            raise ServiceError("A server error occurred while reading the timetable entry.") from e
        if current is None:
            raise NotFoundError("Timetable entry not found.")

        entry = TimetableEntry(
            id=entry_id, day=day, time_slot=time_slot, course=course,
            field=field, level=level, room=room, lecturer=lecturer
        )
        await self._ensure_no_conflict(entry, exclude_id=entry_id)
        try:
            result = await self.db_client.update_timetable_entry(entry)
        except Exception as e:
            logger.error(f"Error updating timetable entry {entry_id}.", exc_info=True)
            raise ServiceError("A server error occurred while updating the timetable entry.") from e
        if affected_rows(result) == 0:
            raise NotFoundError("Timetable entry not found.")
        logger.info(f"Timetable entry {entry_id} updated.")
        return entry

    async def delete_entry(self, entry_id: str):
        try:
            result = await self.db_client.delete_timetable_entry(entry_id)
        except Exception as e:
            logger.error(f"Error deleting timetable entry {entry_id}.", exc_info=True)
            raise ServiceError("A server error occurred while deleting the timetable entry.") from e
        if affected_rows(result) == 0:
            raise NotFoundError("Timetable entry not found.")
        logger.info(f"Timetable entry {entry_id} deleted.")
