import logging
from typing import List, Optional, Set, Awaitable, Callable, TypeVar
from datetime import datetime, date

# --- Required clients and models ---
from ..db.redis_client import RedisClient
from ..db.db_client import AsyncPostgresClient
from ..models.db_models import Student, TimetableEntry, AttendanceRecord, SessionCompletion, AdminUser
from ..models.rollcall_models import Session, SessionInfo, StudentMark, AbsenteeNotice, SessionAttendanceResult
from ..modules.session_deriver import derive_sessions, build_session_id
from ..modules.notifications import build_parent_sms
from ..modules.clock import to_local_naive
from .errors import ServiceError, DataUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RollcallService:
    """
    Service layer for the attendance-taking flow: which sessions are open
    right now, and recording who was present in them.
    """
    def __init__(self, redis_client: RedisClient, db_client: AsyncPostgresClient):
        self.redis_client = redis_client
        self.db_client = db_client

    async def _load_with_snapshot(self, what: str, from_db: Callable[[], Awaitable[T]], from_snapshot: Callable[[], Awaitable[Optional[T]]]) -> T:
        try:
            return await from_db()
        except Exception as e:
            logger.error(f"Database error while loading the {what}. Falling back to the Redis snapshot.", exc_info=True)
            try:
                cached = await from_snapshot()
            except Exception:
                logger.error(f"Redis error while reading the {what} snapshot.", exc_info=True)
                cached = None
            if cached is None:
                raise DataUnavailableError(f"The {what} is currently unavailable. Please try again later.") from e
            logger.warning(f"Serving the {what} from the Redis snapshot.")
            return cached

    async def _load_timetable(self) -> List[TimetableEntry]:
        async def from_snapshot():
            snapshot = await self.redis_client.get_timetable_snapshot()
            return snapshot.entries if snapshot else None
        return await self._load_with_snapshot("timetable", self.db_client.get_timetable, from_snapshot)

    async def _load_roster(self) -> List[Student]:
        async def from_snapshot():
            snapshot = await self.redis_client.get_roster_snapshot()
            return snapshot.students if snapshot else None
        return await self._load_with_snapshot("student roster", self.db_client.get_students, from_snapshot)

    async def get_current_sessions(self, now: datetime, field: Optional[str] = None) -> List[Session]:
        """
        Returns the sessions open for attendance at `now` (local wall-clock time),
        minus those already completed today. `field` narrows the result to
        sessions whose field name contains it.
        """
        timetable = await self._load_timetable()
        students = await self._load_roster()
        sessions = derive_sessions(timetable, students, now)

        try:
            completed = await self.db_client.get_completed_session_ids(now.date())
        except Exception:
            # submit_session_attendance re-checks completion.
            logger.error("Database error while reading completed sessions.", exc_info=True)
            completed = set()

        sessions = [session for session in sessions if session.id not in completed]
        if field:
            sessions = [session for session in sessions if field in session.field_name]
        return sessions

    async def get_completed_sessions(self, session_date: date) -> Set[str]:
        try:
            return await self.db_client.get_completed_session_ids(session_date)
        except Exception as e:
            logger.error(f"Error reading completed sessions for {session_date}.", exc_info=True)
            raise ServiceError("A server error occurred while reading completed sessions.") from e

    async def submit_attendance(self, record: AttendanceRecord) -> str:
        """Upserts a single attendance record. Returns 'inserted' or 'updated'."""
        record = record.model_copy(update={"timestamp": to_local_naive(record.timestamp)})
        try:
            action = await self.db_client.upsert_attendance_record(record)
            logger.info(f"Attendance for student '{record.student_id}' in session '{record.session_id}' {action}.")
            return action
        except Exception as e:
            logger.error(f"Error saving attendance for student '{record.student_id}' in session '{record.session_id}'.", exc_info=True)
            raise ServiceError("A server error occurred while saving the attendance record.") from e

    async def submit_session_attendance(self, session_id: str, session: SessionInfo, marks: List[StudentMark],
                                        submitted_by: AdminUser, now: datetime) -> SessionAttendanceResult:
        """
        Records the marks for one session and closes the session for today.

        Each mark is saved independently. The session is marked completed when at
        least one mark was saved, and every saved absence gets a parent SMS text.

        Raises:
            ServiceError: if there are no marks, the session id does not match
                the session details, the session is already completed or no mark
                could be saved.
        """
        if not marks:
            raise ServiceError("Please mark attendance for at least one student.")
        if session_id != build_session_id(session.field_name, session.level, session.day, session.time_slot):
            logger.warning(f"Session id '{session_id}' does not match the submitted session details.")
            raise ServiceError("The session details do not match the session id.")

        now = to_local_naive(now)
        session_date = now.date()

        try:
            if await self.db_client.is_session_completed(session_id, session_date):
                raise ServiceError("This session has already been completed today.")
            students = await self.db_client.get_students_by_ids([mark.student_id for mark in marks])
        except ServiceError:
            logger.warning(f"Admin '{submitted_by.id}' tried to resubmit completed session '{session_id}'.")
            raise
        except Exception as e:
            logger.error(f"Error preparing attendance submission for session '{session_id}'.", exc_info=True)
            raise ServiceError("A server error occurred while saving attendance.") from e

        student_map = {student.id: student for student in students}
        saved, failed = 0, 0
        absentees: List[AbsenteeNotice] = []

        for mark in marks:
            student = student_map.get(mark.student_id)
            if student is None:
                logger.warning(f"Unknown student '{mark.student_id}' in submission for session '{session_id}'.")
                failed += 1
                continue

            record = AttendanceRecord(
                session_id=session_id, student_id=student.id, is_present=mark.is_present,
                timestamp=now, attendance_date=session_date,
                course_title=session.course_title, course_code=session.course_code,
                field_name=session.field_name, level=session.level,
                room=session.room, lecturer=session.lecturer
            )
            try:
                await self.db_client.upsert_attendance_record(record)
            except Exception:
                logger.error(f"Error saving attendance for student '{student.id}' in session '{session_id}'.", exc_info=True)
                failed += 1
                continue

            saved += 1
            if not mark.is_present:
                absentees.append(AbsenteeNotice(
                    student_id=student.id, student_name=student.name, matricule=student.matricule,
                    parent_name=student.parent_name, parent_phone=student.parent_phone,
                    parent_email=student.parent_email,
                    sms_message=build_parent_sms(student.name, student.parent_name, session.field_name,
                                                 session.course_title, session.time_slot),
                ))

        if saved == 0:
            logger.error(f"No attendance records could be saved for session '{session_id}'.")
            raise ServiceError("Failed to save attendance records. Please try again.")

        try:
            newly_completed = await self.db_client.add_session_completion(SessionCompletion(
                session_id=session_id, session_date=session_date,
                completed_by=submitted_by.id, completed_at=now
            ))
            completed = True
            if not newly_completed:
                logger.info(f"Session '{session_id}' was already marked completed for {session_date}.")
        except Exception:
            logger.error(f"Error marking session '{session_id}' as completed.", exc_info=True)
            completed = False

        message = f"Attendance saved for {saved} students."
        if failed:
            message += f" {failed} records failed to save."
        logger.info(f"Session '{session_id}' submitted by admin '{submitted_by.id}': {saved} saved, {failed} failed, {len(absentees)} absent.")

        return SessionAttendanceResult(
            session_id=session_id, saved=saved, failed=failed,
            completed=completed, message=message, absentees=absentees
        )
