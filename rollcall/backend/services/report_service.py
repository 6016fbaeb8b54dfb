import logging
from typing import Dict, List, Optional
from datetime import date, timedelta

from ..db.db_client import AsyncPostgresClient
from ..models.db_models import AbsenteeRecord, DashboardStats, FieldAttendanceSummary, StudentAbsenteeHours, AbsentSession
from ..modules.report_ranges import ReportType, resolve_report_range, week_bounds, month_bounds
from .errors import ServiceError

logger = logging.getLogger(__name__)

# Every session in the weekly timetable is a two-hour block.
ABSENCE_HOURS_PER_SESSION = 2


class ReportService:
    """
    Read-only reporting over recorded attendance.
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    @staticmethod
    def _resolve(report_type: ReportType, today: date, date_from: Optional[date], date_to: Optional[date]):
        try:
            return resolve_report_range(report_type, today, date_from, date_to)
        except ValueError as e:
            raise ServiceError(str(e)) from e

    async def absentee_report(self, today: date, report_type: ReportType = "daily", date_from: Optional[date] = None,
                              date_to: Optional[date] = None, field: Optional[str] = None, level: Optional[str] = None,
                              course: Optional[str] = None, student_name: Optional[str] = None,
                              matricule: Optional[str] = None) -> List[AbsenteeRecord]:
        start, end = self._resolve(report_type, today, date_from, date_to)
        try:
            records = await self.db_client.get_absentee_report(start, end, field, level, course, student_name, matricule)
            logger.info(f"Absentee report {start}..{end}: {len(records)} rows.")
            return records
        except Exception as e:
            logger.error(f"Error building the absentee report for {start}..{end}.", exc_info=True)
            raise ServiceError("A server error occurred while building the absentee report.") from e

    async def dashboard_stats(self, today: date) -> DashboardStats:
        try:
            return await self.db_client.get_dashboard_stats(today, week_bounds(today), month_bounds(today))
        except Exception as e:
            logger.error("Error building dashboard statistics.", exc_info=True)
            raise ServiceError("A server error occurred while building dashboard statistics.") from e

    async def field_attendance_summary(self, today: date, report_type: ReportType = "daily", date_from: Optional[date] = None,
                                       date_to: Optional[date] = None) -> List[FieldAttendanceSummary]:
        start, end = self._resolve(report_type, today, date_from, date_to)
        try:
            return await self.db_client.get_field_attendance_summary(start, end)
        except Exception as e:
            logger.error(f"Error building the field summary for {start}..{end}.", exc_info=True)
            raise ServiceError("A server error occurred while building the field attendance summary.") from e

    async def student_absentee_hours(self, today: date, report_type: ReportType = "monthly", date_from: Optional[date] = None,
                                     date_to: Optional[date] = None) -> List[StudentAbsenteeHours]:
        """
        Per-student absence totals in the range, ordered by hours (most first)
        then name. Students with no absences are listed with zero hours.
        """
        start, end = self._resolve(report_type, today, date_from, date_to)
        try:
            rows = await self.db_client.get_student_absence_rows(start, end)
        except Exception as e:
            logger.error(f"Error reading absences for {start}..{end}.", exc_info=True)
            raise ServiceError("A server error occurred while building the absentee hours report.") from e

        students: Dict[str, StudentAbsenteeHours] = {}
        for row in rows:
            summary = students.get(row["student_id"])
            if summary is None:
                summary = StudentAbsenteeHours(
                    student_id=row["student_id"], student_name=row["student_name"], matricule=row["matricule"],
                    field=row["field"], level=row["level"], total_absent_hours=0, absent_sessions=[]
                )
                students[row["student_id"]] = summary

            if row.get("attendance_date") is None:
                continue

            recorded_at = row["recorded_at"]
            ends_at = recorded_at + timedelta(hours=ABSENCE_HOURS_PER_SESSION)
            summary.total_absent_hours += ABSENCE_HOURS_PER_SESSION
            summary.absent_sessions.append(AbsentSession(
                course=row["course_title"] or "",
                date=row["attendance_date"],
                course_code=row["course_code"] or "",
                duration=ABSENCE_HOURS_PER_SESSION,
                time_slot=f"{recorded_at:%H:%M} - {ends_at:%H:%M}",
            ))

        return sorted(students.values(), key=lambda s: (-s.total_absent_hours, s.student_name))
