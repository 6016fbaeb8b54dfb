# rollcall/backend/modules/conflict_checker.py

from typing import Iterable, Optional, Protocol

from ..models.db_models import TimetableEntry


class SlotBooking(Protocol):
    day: str
    time_slot: str
    course: str
    field: str
    room: str


def find_room_conflict(candidate: SlotBooking, existing: Iterable[TimetableEntry], exclude_id: Optional[str] = None) -> Optional[TimetableEntry]:
    """Returns another entry holding the same room at the same day and time, regardless of field."""
    for entry in existing:
        if entry.id == exclude_id:
            continue
        if entry.day == candidate.day and entry.time_slot == candidate.time_slot and entry.room == candidate.room:
            return entry
    return None


def find_field_conflict(candidate: SlotBooking, existing: Iterable[TimetableEntry], exclude_id: Optional[str] = None) -> Optional[TimetableEntry]:
    """
    Returns another entry giving the same field a different course at the same day and time.
    The same course in the same slot is allowed (common courses, or re-saving an edit).
    """
    for entry in existing:
        if entry.id == exclude_id:
            continue
        if (entry.day == candidate.day and entry.time_slot == candidate.time_slot
                and entry.field == candidate.field and entry.course != candidate.course):
            return entry
    return None


def check_timetable_conflict(candidate: SlotBooking, existing: Iterable[TimetableEntry], exclude_id: Optional[str] = None) -> Optional[str]:
    """
    Checks a timetable entry about to be saved against the current timetable.

    Args:
        candidate: The entry being created or edited.
        existing: Every entry currently in the timetable.
        exclude_id: Id of the entry being edited, left out of the comparison.

    Returns:
        A human-readable reason when the save must be rejected, otherwise None.
    """
    existing = list(existing)

    room_conflict = find_room_conflict(candidate, existing, exclude_id)
    if room_conflict:
        return (
            f"Room conflict: {candidate.room} is already occupied at {candidate.day} {candidate.time_slot} "
            f"by {room_conflict.course} ({room_conflict.field})"
        )

    field_conflict = find_field_conflict(candidate, existing, exclude_id)
    if field_conflict:
        return (
            f"Field conflict: {candidate.field} already has a different class ({field_conflict.course}) "
            f"at {candidate.day} {candidate.time_slot}. Only common courses can share time slots."
        )

    return None
