# rollcall/backend/models/db_models.py

from pydantic import BaseModel, Field as PydanticField
from datetime import datetime, date
from typing import List, Literal, Optional

Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]

DEFAULT_LEVELS = ["Level 100", "Level 200"]


class Student(BaseModel):
    """
    Represents a student on the roster, mapping to the 'Students' table.
    """
    id: str = PydanticField(..., description="Primary key of the student")
    name: str
    matricule: str = PydanticField(..., description="Unique student identification code")
    field: str = PydanticField(..., description="Academic field the student belongs to, e.g. 'Computer Science'")
    level: str = PydanticField(..., description="Cohort marker, e.g. 'Level 200'")
    parent_name: str
    parent_phone: str
    parent_email: Optional[str] = None
    photo: Optional[str] = None


class Field(BaseModel):
    """
    Represents an academic field (department/program), mapping to the 'Fields' table.
    """
    id: str
    name: str
    code: str = PydanticField(..., description="Short unique upper-case code, e.g. 'CS'")
    description: Optional[str] = None
    levels: List[str] = PydanticField(default_factory=lambda: list(DEFAULT_LEVELS))
    total_students: int = 0


class TimetableEntry(BaseModel):
    """
    One weekly class slot, mapping to the 'TimetableEntries' table.
    """
    id: str
    day: Weekday
    time_slot: str = PydanticField(..., description="Wall time range in 'HH:MM - HH:MM' format (24-hour)")
    course: str
    field: str
    level: str
    room: str
    lecturer: str


class AttendanceRecord(BaseModel):
    """
    A single student's presence for one session on one date, mapping to the
    'Attendance' table. (session_id, student_id, attendance_date) is unique.
    """
    session_id: str
    student_id: str
    is_present: bool
    timestamp: datetime
    attendance_date: date
    course_title: str = ""
    course_code: str = ""
    field_name: str = ""
    level: str = ""
    room: str = ""
    lecturer: str = ""


class SessionCompletion(BaseModel):
    """
    Marks a derived session as done for a date, mapping to the 'SessionCompletions' table.
    """
    session_id: str
    session_date: date
    completed_by: Optional[str] = None
    completed_at: datetime


class AdminUser(BaseModel):
    """
    An administrator account, mapping to the 'AdminUsers' table.
    The password hash is deliberately not part of this model.
    """
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    department: str
    role: str = PydanticField("admin", description="Can be admin, lecturer or discipline_master")
    employee_id: str
    created_at: datetime


# --- Read models produced by the reporting queries ---

class AbsenteeRecord(BaseModel):
    id: str
    student_name: str
    matricule: str
    field_name: str
    level: str
    course_title: str
    course_code: str
    parent_name: str
    parent_phone: str
    parent_email: Optional[str] = None
    date: datetime
    session_id: str
    time_slot: str


class FieldStats(BaseModel):
    field_name: str
    total_students: int
    present_today: int
    absent_today: int
    attendance_rate: float


class TopAbsenteeField(BaseModel):
    field_name: str
    total_students: int
    absentee_count: int
    absentee_rate: float


class DashboardStats(BaseModel):
    total_students: int
    total_fields: int
    today_absentees: int
    weekly_absentees: int
    monthly_absentees: int
    field_stats: List[FieldStats] = []
    top_absentee_fields: List[TopAbsenteeField] = []


class FieldAttendanceSummary(BaseModel):
    field_name: str
    total_students: int
    present_count: int
    absent_count: int
    attendance_rate: float


class AbsentSession(BaseModel):
    course: str
    date: date
    course_code: str
    duration: int
    time_slot: str


class StudentAbsenteeHours(BaseModel):
    student_id: str
    student_name: str
    matricule: str
    field: str
    level: str
    total_absent_hours: int
    absent_sessions: List[AbsentSession] = []
