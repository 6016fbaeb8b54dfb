from pydantic import BaseModel, Field
import datetime as dt
from typing import List, Literal, Optional

from ...models.rollcall_models import SessionInfo, StudentMark


class AttendanceSubmitRequest(BaseModel):
    """A single student's attendance, upserted on (session_id, student_id, date)."""
    session_id: str = Field(..., min_length=1)
    student_id: str = Field(..., min_length=1)
    is_present: bool
    timestamp: dt.datetime
    course_title: str = ""
    course_code: str = ""
    field_name: str = ""
    level: str = ""
    room: str = ""
    lecturer: str = ""
    date: Optional[dt.date] = Field(None, description="Attendance date. Defaults to the local date of the timestamp.")


class AttendanceSubmitResponse(BaseModel):
    success: bool
    action: Literal["inserted", "updated"]


class SessionAttendanceRequest(BaseModel):
    """The session as the client saw it, plus one mark per student."""
    session: SessionInfo
    marks: List[StudentMark] = []


class CompletedSessionsResponse(BaseModel):
    date: dt.date
    session_ids: List[str]
