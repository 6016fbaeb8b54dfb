# rollcall/backend/modules/session_deriver.py

import logging
import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from ..models.db_models import Student, TimetableEntry
from ..models.rollcall_models import Session

logger = logging.getLogger(__name__)

# Indexed by datetime.weekday(); independent of the process locale.
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# A session becomes visible this many minutes before it starts and stays
# visible up to and including its end minute.
VISIBILITY_LEAD_MINUTES = 30

TIME_SLOT_SEPARATOR = " - "
_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_WHITESPACE_RE = re.compile(r"\s+")


def _clock_to_minutes(clock: str) -> Optional[int]:
    """Converts 'HH:MM' into minutes since midnight, or None if it is not a valid wall time."""
    match = _CLOCK_RE.match(clock)
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def parse_time_slot(time_slot: str) -> Optional[Tuple[int, int]]:
    """
    Parses a 'HH:MM - HH:MM' slot into (start_minutes, end_minutes).

    Returns None when the slot does not contain exactly one ' - ' separator or
    when either side is not a valid 24-hour time.
    """
    if not isinstance(time_slot, str):
        return None
    parts = time_slot.split(TIME_SLOT_SEPARATOR)
    if len(parts) != 2:
        return None
    start = _clock_to_minutes(parts[0].strip())
    end = _clock_to_minutes(parts[1].strip())
    if start is None or end is None:
        return None
    return start, end


def format_time_slot(start_minutes: int, end_minutes: int) -> str:
    """(480, 600) -> '08:00 - 10:00'."""
    return (f"{start_minutes // 60:02d}:{start_minutes % 60:02d}{TIME_SLOT_SEPARATOR}"
            f"{end_minutes // 60:02d}:{end_minutes % 60:02d}")


def course_code_from_title(course_title: str) -> str:
    """'Database Systems' -> 'DS'."""
    return "".join(word[0] for word in course_title.split()).upper()


def build_session_id(field: str, level: str, day: str, time_slot: str) -> str:
    """Joins the slot identity with hyphens, turning every whitespace run into a hyphen."""
    return _WHITESPACE_RE.sub("-", f"{field}-{level}-{day}-{time_slot}")


def weekday_name(moment: datetime) -> str:
    return WEEKDAY_NAMES[moment.weekday()]


def is_within_window(current_minutes: int, start_minutes: int, end_minutes: int) -> bool:
    return start_minutes - VISIBILITY_LEAD_MINUTES <= current_minutes <= end_minutes


def _group_roster(students: Iterable[Student]) -> Dict[Tuple[str, str], List[Student]]:
    roster: Dict[Tuple[str, str], List[Student]] = {}
    for student in students:
        roster.setdefault((student.field, student.level), []).append(student)
    return roster


def derive_sessions(timetable: List[TimetableEntry], students: List[Student], now: datetime) -> List[Session]:
    """
    Builds the sessions attendance can be taken for at the given moment.

    Args:
        timetable: The full list of weekly timetable entries.
        students: The full roster.
        now: The current local wall-clock time.

    Returns:
        One Session per entry scheduled today whose window
        [start - 30 min, end] contains the current minute, in timetable order.
        Entries with a malformed time slot are skipped.
    """
    today = weekday_name(now)
    current_minutes = now.hour * 60 + now.minute
    roster = _group_roster(students)

    sessions: List[Session] = []
    for entry in timetable:
        if entry.day != today:
            continue

        slot = parse_time_slot(entry.time_slot)
        if slot is None:
            logger.debug(f"Skipping timetable entry {entry.id}: malformed time slot '{entry.time_slot}'.")
            continue
        start_minutes, end_minutes = slot

        if not is_within_window(current_minutes, start_minutes, end_minutes):
            continue

        start_time, end_time = (part.strip() for part in entry.time_slot.split(TIME_SLOT_SEPARATOR))
        sessions.append(Session(
            id=build_session_id(entry.field, entry.level, entry.day, entry.time_slot),
            course_title=entry.course,
            course_code=course_code_from_title(entry.course),
            field_name=entry.field,
            level=entry.level,
            room=entry.room,
            start_time=start_time,
            end_time=end_time,
            day=entry.day,
            lecturer=entry.lecturer,
            students=list(roster.get((entry.field, entry.level), [])),
        ))

    logger.info(f"Derived {len(sessions)} session(s) for {today} at {now:%H:%M}.")
    return sessions
