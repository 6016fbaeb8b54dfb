from pydantic import BaseModel, Field, field_validator

from ...models.db_models import Weekday
from ...modules.session_deriver import parse_time_slot, format_time_slot


class TimetableEntryRequest(BaseModel):
    """Request model for creating or replacing a timetable entry."""
    day: Weekday = Field(..., description="Monday to Friday.")
    time_slot: str = Field(..., description="24-hour wall time range, e.g. '08:00 - 10:00'.")
    course: str = Field(..., min_length=1)
    field: str = Field(..., min_length=1)
    level: str = Field(..., min_length=1)
    room: str = Field(..., min_length=1)
    lecturer: str = Field(..., min_length=1)

    @field_validator("course", "field", "level", "room", "lecturer")
    def strip_and_require(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Must not be blank.")
        return v

    @field_validator("time_slot")
    def enforce_time_slot_format(cls, v: str) -> str:
        """
        The slot must be 'HH:MM - HH:MM' with exactly one ' - ' separator and
        must end after it starts. Stored zero-padded so equal slots compare equal.
        """
        slot = parse_time_slot(v)
        if slot is None:
            raise ValueError("Invalid format. Must be 'HH:MM - HH:MM'.")
        start, end = slot
        if end <= start:
            raise ValueError("The end time must be after the start time.")
        return format_time_slot(start, end)
