from pydantic import BaseModel, Field
from datetime import datetime
from typing import List
from uuid import UUID
from .db_models import AdminUser, Student, TimetableEntry


class AdminSessionRedis(BaseModel):
    """
    Represents an administrator's login session stored in Redis.
    """
    user_data: AdminUser = Field(..., description="The admin account as read from the database at login.")
    session_id: UUID = Field(..., description="Unique ID for this specific session.")
    session_start_time: datetime = Field(..., description="The time this session began.")
    session_end_time: datetime = Field(..., description="The time this session will expire.")


class TimetableSnapshotRedis(BaseModel):
    """
    Last-known-good copy of the timetable, served when the database cannot be read.
    """
    entries: List[TimetableEntry] = []
    taken_at: datetime


class RosterSnapshotRedis(BaseModel):
    """
    Last-known-good copy of the student roster, served when the database cannot be read.
    """
    students: List[Student] = []
    taken_at: datetime
