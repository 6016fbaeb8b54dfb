from pydantic import BaseModel, Field
from typing import List, Optional
from .db_models import Student


class SessionInfo(BaseModel):
    """The descriptive part of a session, as echoed back by the client on submission."""
    course_title: str
    course_code: str = Field(..., description="Upper-case initials of the course title")
    field_name: str
    level: str
    room: str
    start_time: str
    end_time: str
    day: str
    lecturer: str

    @property
    def time_slot(self) -> str:
        return f"{self.start_time} - {self.end_time}"


class Session(SessionInfo):
    """
    A timetable entry instantiated for today and joined with its roster.
    Derived on every request and never persisted.
    """
    id: str = Field(..., description="Deterministic id built from field, level, day and time slot")
    students: List[Student] = []


class StudentMark(BaseModel):
    student_id: str
    is_present: bool


class AbsenteeNotice(BaseModel):
    """Parent contact details and the prepared SMS for one absent student."""
    student_id: str
    student_name: str
    matricule: str
    parent_name: str
    parent_phone: str
    parent_email: Optional[str] = None
    sms_message: str


class SessionAttendanceResult(BaseModel):
    session_id: str
    saved: int
    failed: int
    completed: bool
    message: str
    absentees: List[AbsenteeNotice] = []


class StudentImportRow(BaseModel):
    """One row of a bulk roster import."""
    name: str
    matricule: str
    field: str
    level: str
    parent_name: str
    parent_phone: str
    parent_email: Optional[str] = None


class SkippedImportRow(BaseModel):
    matricule: str
    reason: str


class StudentImportResult(BaseModel):
    imported: int
    skipped: List[SkippedImportRow] = []
